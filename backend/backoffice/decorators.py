# Overview: Route decorators that map service errors to JSON responses.

from functools import wraps

from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError, OperationalError

from .errors import BackofficeError, ConflictError, SchemaError
from .extensions import db

_SCHEMA_MARKERS = ("no such table", "no such column", "undefinedtable", "undefinedcolumn", "does not exist")


def is_schema_error(exc: OperationalError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return any(marker in text for marker in _SCHEMA_MARKERS)


def error_response(err: BackofficeError):
    return jsonify(err.to_dict()), err.status_code


def handle_api_errors(message: str):
    """
    Wrap a route so every failure ends as a JSON error body.

    The session is rolled back before the response is built. Unclassified
    failures are logged with a traceback and reported as `message`.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except BackofficeError as e:
                db.session.rollback()
                return error_response(e)
            except OperationalError as e:
                db.session.rollback()
                if is_schema_error(e):
                    current_app.logger.error("Schema mismatch: %s", e.orig)
                    return error_response(SchemaError())
                current_app.logger.exception(message)
                return jsonify({"error": message}), 500
            except IntegrityError as e:
                db.session.rollback()
                current_app.logger.warning("Integrity error: %s", e.orig)
                return error_response(ConflictError("Conflicts with existing data"))
            except Exception:
                db.session.rollback()
                current_app.logger.exception(message)
                return jsonify({"error": message}), 500

        return decorated_function

    return decorator
