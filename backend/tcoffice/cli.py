# Overview: Flask CLI command groups for bootstrap, out-of-band data entry, and maintenance.

# backend/tcoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent). Use "flask db upgrade" for migrated deployments.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users (back-office logins):
# - python -m flask users create --email admin@tc.local --password "Password123!" --name Admin
# - python -m flask users list
# - python -m flask users deactivate --email clerk@tc.local
#
# Employees (attendance subjects; the HTTP API never creates them):
# - python -m flask employees add --id 1 --name "Asha"
# - python -m flask employees list
# - python -m flask employees import-csv employees.csv
#   CSV with header row: employee_id,name
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30

import csv

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import employee_service, session_service
from .services.auth_service import create_user, normalize_email
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create any missing tables."""
    click.echo("START Creating tables...")
    db.create_all()
    click.echo("PASS Database schema is ready.")


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

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """Back-office login accounts."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--name', default=None, help='Display name')
@with_appcontext
def create_user_cli(email, password, name):
    """
    Create a login account.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(email=email, password=password, name=name)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.email} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Name':<25} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.email:<35} {user.name or '-':<25} {active_str}")

    click.echo("="*80 + "\n")


@users_group.command('deactivate')
@click.option('--email', required=True, help='Email address')
@with_appcontext
def deactivate_user_cli(email):
    """Disable a login and revoke all of its sessions."""
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user:
        raise click.ClickException(f"User not found: {email}")

    user.is_active = False
    db.session.commit()
    revoked = session_service.revoke_all_user_sessions(user.id, reason="User deactivated")
    click.echo(f"PASS Deactivated {user.email} ({revoked} sessions revoked)")


@click.group('employees')
def employees_group():
    """Employee records used by attendance."""


@employees_group.command('add')
@click.option('--id', 'employee_id', type=int, required=True, help='Employee ID')
@click.option('--name', required=True, help='Employee name')
@with_appcontext
def add_employee_cli(employee_id, name):
    """Add one employee."""
    try:
        employee = employee_service.create_employee(employee_id, name)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created employee: {employee.name} (ID: {employee.employee_id})")


@employees_group.command('list')
@click.option('--search', default=None, help='Filter by id or name')
@with_appcontext
def list_employees_cli(search):
    """List employees."""
    employees = employee_service.list_employees(search)
    if not employees:
        click.echo("No employees found.")
        return

    for employee in employees:
        click.echo(f"{employee.employee_id:<8} {employee.name}")


@employees_group.command('import-csv')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def import_employees_cli(path):
    """Import employees from a CSV file with employee_id,name columns."""
    with open(path, newline='', encoding='utf-8') as fh:
        created, skipped = employee_service.import_employees(csv.DictReader(fh))

    for message in skipped:
        click.echo(f"WARN  Skipped {message}")
    click.echo(f"PASS Imported {created} employees ({len(skipped)} skipped)")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(maintenance_group)
