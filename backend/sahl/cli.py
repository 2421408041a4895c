# Overview: Flask CLI command groups for bootstrap, ledger inspection, and maintenance.

# backend/sahl/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables, the default warehouse and the settings row.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Ledger inspection/repair:
# - python -m flask ledger check
#   List clients/products whose cached balance or stock disagrees with their documents.
# - python -m flask ledger repair --yes
#   Overwrite drifted balances/stock with the recomputed values.
#
# Maintenance:
# - python -m flask clients set-balance 12 -150.00
#   Force a client balance (opening balance shifts by the same amount).
# - python -m flask products set-stock 7 40
#   Stock-count correction (opening quantity shifts by the same amount).

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import reconcile_service, settings_service, warehouse_service
from .services.errors import NotFoundError
from .money_utils import to_str


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables, the default warehouse and the settings row (safe to re-run)."""
    click.echo("START Initializing system...")
    db.create_all()

    warehouse = warehouse_service.ensure_default_warehouse()
    click.echo(f"PASS Default warehouse: {warehouse.name} (ID: {warehouse.id})")

    settings = settings_service.get_settings()
    click.echo(f"PASS Settings: {settings.company_name} ({settings.currency_symbol})")

    click.echo("DONE System initialized.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('ledger')
def ledger_group():
    """Balance/stock consistency commands."""


def _echo_drift(rows):
    for row in rows:
        click.echo(
            f"  {row['entity']:<8} {row['id']:>6}  cached={row['cached']:>12}  "
            f"expected={row['expected']:>12}  diff={row['difference']}"
        )


@ledger_group.command('check')
@with_appcontext
def ledger_check():
    """Report drift between cached aggregates and document history. Exits 1 on drift."""
    drift = reconcile_service.find_drift()
    if not drift:
        click.echo("PASS No drift: every balance and stock quantity matches its documents.")
        return
    click.echo(f"FAIL {len(drift)} drifted record(s):")
    _echo_drift(drift)
    raise SystemExit(1)


@ledger_group.command('repair')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def ledger_repair(yes):
    """Overwrite drifted balances and stock with recomputed values."""
    drift = reconcile_service.find_drift()
    if not drift:
        click.echo("PASS Nothing to repair.")
        return
    _echo_drift(drift)
    if not yes:
        click.confirm(f"WARN Overwrite {len(drift)} cached value(s)?", abort=True)
    repaired = reconcile_service.repair_drift()
    click.echo(f"PASS Repaired {len(repaired)} record(s).")


@click.group('clients')
def clients_group():
    """Client maintenance commands."""


@clients_group.command('set-balance')
@click.argument('client_id', type=int)
@click.argument('value')
@with_appcontext
def clients_set_balance(client_id, value):
    """Force CLIENT_ID's balance to VALUE (e.g. migrating legacy data)."""
    try:
        client = reconcile_service.set_client_balance(client_id, value)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")
    click.echo(
        f"PASS Client {client.id} balance={to_str(client.balance)} "
        f"(opening balance now {to_str(client.opening_balance)})"
    )


@click.group('products')
def products_group():
    """Product maintenance commands."""


@products_group.command('set-stock')
@click.argument('product_id', type=int)
@click.argument('value')
@with_appcontext
def products_set_stock(product_id, value):
    """Force PRODUCT_ID's stock to VALUE after a physical count."""
    try:
        product = reconcile_service.set_product_stock(product_id, value)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")
    click.echo(
        f"PASS Product {product.id} stock={to_str(product.stock_quantity)} "
        f"(opening quantity now {to_str(product.opening_quantity)})"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(ledger_group)
    app.cli.add_command(clients_group)
    app.cli.add_command(products_group)
