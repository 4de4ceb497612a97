# Overview: Flask CLI command groups for bootstrap and user management.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent). Prefer "flask db upgrade" once migrations are in use.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User management:
# - python -m flask users create --loginid admin --email admin@stockroom.local --password "secret" --role admin
#   Create a user (prompts if options are omitted). Signup over HTTP can only create plain users.
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users set-role alice admin
#   Promote or demote an existing user.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models.auth import ROLES
from .services import auth_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--loginid', prompt=True, help='Login id')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), default='user', show_default=True, help='Role')
@with_appcontext
def create_user_cli(loginid, email, password, role):
    """Create a new user; the only way to create an admin."""
    try:
        user = auth_service.create_user(loginid=loginid, email=email, password=password, role=role)
    except auth_service.UserExistsError:
        click.echo(f"FAIL A user with loginid '{loginid}' or email '{email}' already exists")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.loginid} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = auth_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'LOGINID':<20} {'EMAIL':<35} {'ROLE':<8}")
    click.echo("="*80)
    for user in users:
        click.echo(f"{user.id:<5} {user.loginid:<20} {user.email:<35} {user.role:<8}")
    click.echo("="*80 + "\n")


@users_group.command('set-role')
@click.argument('loginid')
@click.argument('role', type=click.Choice(ROLES))
@with_appcontext
def set_role_cli(loginid, role):
    """Change a user's role."""
    try:
        user = auth_service.set_role(loginid, role)
    except auth_service.UserNotFoundError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS {user.loginid} is now '{user.role}'")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
