# Overview: Flask CLI command group for bootstrap, inspection, and maintenance.

# backend/backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply migrations (preferred over `system init` outside local dev).
#
# System bootstrap/repair:
# - python -m flask system init
#   Create any missing tables and seed the default payment methods.
# - python -m flask system seed
#   Seed the default payment methods only (idempotent).
# - python -m flask system check-schema
#   Exit non-zero when a mapped table or column is missing.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system stats
#   Row counts per table.

import click
from flask.cli import with_appcontext

from .errors import SchemaError
from .extensions import db
from .models import (
    Category,
    Customer,
    InventoryAdjustment,
    Order,
    Payable,
    PaymentMethod,
    Product,
    Purchase,
    StockMovement,
    Supplier,
    Transaction,
)
from .services import payment_method_service
from .services.schema_service import verify_schema


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize a local back-office database.

    Creates:
    - Any missing tables (existing tables are left untouched)
    - Payment methods: Credit Card, Debit Card, Cash
    """
    click.echo("START Initializing back-office database...")
    db.create_all()
    click.echo("PASS Tables ready")

    created = payment_method_service.seed_payment_methods(db.session)
    click.echo(f"PASS Payment methods seeded ({created} created)")


@system_group.command('seed')
@with_appcontext
def seed_system():
    """Seed default payment methods (safe to re-run)."""
    created = payment_method_service.seed_payment_methods(db.session)
    if created:
        click.echo(f"PASS Created {created} payment method(s)")
    else:
        click.echo("SKIP Payment methods already present")


@system_group.command('check-schema')
@with_appcontext
def check_schema():
    """Verify that every mapped table and column exists."""
    try:
        verify_schema()
    except SchemaError as e:
        click.echo(f"FAIL {e}", err=True)
        for table, columns in e.details.get("missing", {}).items():
            click.echo(f"  - {table}: {', '.join(columns)}", err=True)
        raise SystemExit(1)
    click.echo("PASS Schema matches models")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to add payment methods.")


@system_group.command('stats')
@with_appcontext
def stats():
    """Show row counts for the main tables."""
    for model in (
        Product, Category, Supplier, Customer, PaymentMethod, Order,
        Purchase, Payable, InventoryAdjustment, StockMovement, Transaction,
    ):
        click.echo(f"{model.__tablename__:<24} {db.session.query(model).count()}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
