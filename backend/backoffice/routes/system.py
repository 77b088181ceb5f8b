# backend/backoffice/routes/system.py
"""
System health endpoint.

Reports database reachability and whether every mapped table and column
exists. 503 when either check fails.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.schema_service import missing_schema
from backoffice.time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_schema_health() -> dict:
    try:
        missing = missing_schema(db.engine)
    except SQLAlchemyError:
        current_app.logger.exception("Schema inspection failed")
        return {"status": "unhealthy", "error": "Schema inspection failed"}

    if missing:
        return {
            "status": "unhealthy",
            "error": "Database schema not applied. Run: flask db upgrade",
            "missing": missing,
        }
    return {"status": "healthy"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable and schema complete
    - 503: otherwise
    """
    database_health = check_database_health()
    schema_health = check_schema_health() if database_health["status"] == "healthy" else {
        "status": "unknown",
    }

    healthy = database_health["status"] == "healthy" and schema_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
            "schema": schema_health,
        },
    }
    return response, 200 if healthy else 503
