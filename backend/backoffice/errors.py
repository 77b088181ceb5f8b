# Overview: Error taxonomy shared by services and routes; each class carries its HTTP status.

from __future__ import annotations


class BackofficeError(Exception):
    """Base class for every failure the API maps to a JSON error body."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": str(self)}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(BackofficeError, ValueError):
    """400-level input problem."""

    status_code = 400


class NotFoundError(BackofficeError):
    """404: a referenced id does not exist."""

    status_code = 404


class ConflictError(BackofficeError, ValueError):
    """409-level business rule conflict (e.g., duplicate barcode)."""

    status_code = 409


class InsufficientStockError(ConflictError):
    """Raised when a sale line asks for more units than are on hand."""

    def __init__(self, product_name: str, details: dict | None = None):
        super().__init__(f"Insufficient stock for {product_name}", details=details)
        self.product_name = product_name


class OverpaymentError(ConflictError):
    """Raised when a payment exceeds the payable's open balance."""

    def __init__(self, details: dict | None = None):
        super().__init__("Payment amount exceeds balance", details=details)


class SchemaError(BackofficeError):
    """503: the database has not been migrated to the schema the code expects."""

    status_code = 503
    hint = "Run: flask db upgrade"

    def __init__(self, message: str = "Database schema not applied", details: dict | None = None):
        super().__init__(f"{message}. {self.hint}", details=details)
