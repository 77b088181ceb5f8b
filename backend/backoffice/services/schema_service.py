# Overview: Compares the live database against the mapped models; fails fast when migrations are missing.

from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from ..errors import SchemaError
from ..extensions import db


def missing_schema(engine: Engine) -> dict[str, list[str]]:
    """
    Returns {table: [missing columns]} for every mapped table that is absent
    or incomplete. A wholly missing table maps to ["*"].
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    missing: dict[str, list[str]] = {}
    for table in db.metadata.sorted_tables:
        if table.name not in existing_tables:
            missing[table.name] = ["*"]
            continue
        present = {col["name"] for col in inspector.get_columns(table.name)}
        absent = [col.name for col in table.columns if col.name not in present]
        if absent:
            missing[table.name] = absent
    return missing


def verify_schema(engine: Engine | None = None) -> None:
    """Raise SchemaError if any mapped table or column is missing."""
    engine = engine or db.engine
    missing = missing_schema(engine)
    if missing:
        raise SchemaError(details={"missing": missing})
