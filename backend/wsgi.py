# backend/wsgi.py
import os

from backoffice import create_app
from backoffice.services.schema_service import verify_schema

app = create_app()

# Fail fast on an unmigrated database. `flask db ...` commands import the
# factory through FLASK_APP too, so they opt out with SKIP_SCHEMA_CHECK=1.
if os.environ.get("SKIP_SCHEMA_CHECK", "0") != "1":
    with app.app_context():
        verify_schema()
