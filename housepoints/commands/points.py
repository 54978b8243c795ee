"""
CLI Commands for ledger maintenance.

Reconciliation can be run from cron to catch house totals that drifted
after a failed cache update:

# Nightly reconciliation (run daily at 2 AM)
0 2 * * * cd /app && flask points reconcile
"""

import click
from flask.cli import with_appcontext

from ..extensions import db
from ..models import User, UserRole, seed_school_defaults
from ..services import ReconciliationService, BulkLedgerService
from ..utils.exceptions import HousePointsError


@click.group('points')
def points_cli():
    """House points maintenance commands."""
    pass


@points_cli.command('seed')
@with_appcontext
def seed():
    """Create default houses, behavior categories and rewards."""
    created = seed_school_defaults()
    for table, count in created.items():
        click.echo(f"  {table}: {count} created")


@points_cli.command('reconcile')
@click.option('--house-id', type=int, help='Specific house ID (or all if not specified)')
@with_appcontext
def reconcile(house_id):
    """
    Recompute house totals from the ledger.

    Prints each house whose cached total was corrected.
    """
    service = ReconciliationService()

    try:
        results = [service.reconcile_house(house_id)] if house_id else service.reconcile_all()
    except HousePointsError as e:
        raise click.ClickException(e.message)

    corrected = 0
    for result in results:
        marker = 'FIXED' if result.corrected else 'ok'
        click.echo(
            f"  House {result.house_id}: cached {result.previous_cached} -> "
            f"{result.recomputed} [{marker}]"
        )
        corrected += int(result.corrected)

    click.echo(f"\nTOTAL: {len(results)} houses checked, {corrected} corrected")


@points_cli.command('reset')
@click.option('--yes', is_flag=True, help='Confirm deleting every ledger entry')
@with_appcontext
def reset(yes):
    """Delete every ledger entry and zero every house."""
    if not yes:
        raise click.ClickException('Refusing to reset without --yes')

    result = BulkLedgerService().reset_all_points()
    click.echo(f"Deleted {result['transactions_deleted']} transactions, reset {result['houses_reset']} houses")


@points_cli.command('create-admin')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--first-name', default='School')
@click.option('--last-name', default='Admin')
@with_appcontext
def create_admin(username, email, password, first_name, last_name):
    """Create an admin account."""
    if User.query.filter(db.func.lower(User.username) == username.lower()).first():
        raise click.ClickException(f"User '{username}' already exists")
    if len(password) < 6:
        raise click.ClickException('Password must be at least 6 characters')

    user = User(
        username=username,
        first_name=first_name,
        last_name=last_name,
        email=email,
        role=UserRole.ADMIN.value,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f"Admin '{username}' created (id {user.id})")


def init_app(app):
    """Register points commands with Flask app."""
    app.cli.add_command(points_cli)
