# Overview: Flask CLI command groups for seeding, inspection, and maintenance.

# backend/shopdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Demo data / inspection:
# - python -m flask data seed --user-id alice
#   Seed demo products, customers and invoices (only collections not yet stored).
# - python -m flask data stats --user-id alice
#   Print dashboard statistics for a user.
# - python -m flask data dump --user-id alice --collection invoices
#   Print a stored collection as JSON.
#
# Auth:
# - python -m flask auth issue-token --user-id alice
#   Print a bearer token for API calls as that user.
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import auth_service
from .services.collection_service import COLLECTIONS, EntityRepository, PersistenceError
from .services.reporting_service import compute_stats
from .services.seed_service import seed_user_data
from .time_utils import utcnow


@click.group('data')
def data_group():
    """Per-user collection commands."""


@data_group.command('seed')
@click.option('--user-id', required=True, help='User whose collections are seeded')
@with_appcontext
def seed_cli(user_id):
    """Seed demo data. Collections that already exist are left alone."""
    try:
        seeded = seed_user_data(user_id)
    except PersistenceError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    if seeded:
        click.echo(f"PASS Seeded {', '.join(seeded)} for {user_id}")
    else:
        click.echo(f"SKIP All collections already exist for {user_id}")


@data_group.command('stats')
@click.option('--user-id', required=True)
@with_appcontext
def stats_cli(user_id):
    """Print dashboard statistics for a user."""
    repo = EntityRepository(user_id)
    stats = compute_stats(
        repo.load_products(),
        repo.load_customers(),
        repo.load_invoices(),
        utcnow(),
    )

    click.echo("\n" + "=" * 50)
    click.echo(f"DASHBOARD: {user_id}")
    click.echo("=" * 50)
    click.echo(f"Products:        {stats.total_products}")
    click.echo(f"Low stock:       {stats.low_stock_products}")
    click.echo(f"Customers:       {stats.total_customers}")
    click.echo(f"Invoices:        {stats.total_invoices}")
    click.echo(f"Total revenue:   {stats.total_revenue:.2f}")
    click.echo(f"Monthly revenue: {stats.monthly_revenue:.2f}")
    click.echo("=" * 50 + "\n")


@data_group.command('dump')
@click.option('--user-id', required=True)
@click.option('--collection', type=click.Choice(COLLECTIONS), required=True)
@with_appcontext
def dump_cli(user_id, collection):
    """Print a stored collection as JSON."""
    repo = EntityRepository(user_id)
    result = repo.read(collection)
    if not result.ok:
        click.echo(f"WARN {collection} for {user_id}: {result.status}"
                   + (f" ({result.error})" if result.error else ""), err=True)
    click.echo(json.dumps([entity.to_dict() for entity in result.entities], indent=2))


@click.group('auth')
def auth_group():
    """Token commands."""


@auth_group.command('issue-token')
@click.option('--user-id', required=True)
@with_appcontext
def issue_token_cli(user_id):
    """Print a signed bearer token for a user id."""
    try:
        token = auth_service.issue_token(user_id)
    except auth_service.AuthError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(token)


@click.group('system')
def system_group():
    """System repair commands."""


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

    click.echo("PASS Database reset complete. Run 'python -m flask data seed --user-id <id>' for demo data.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(data_group)
    app.cli.add_command(auth_group)
    app.cli.add_command(system_group)
