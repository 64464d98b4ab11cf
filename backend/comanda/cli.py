# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/comanda/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system seed
#   Create one user per role and a handful of dining tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection:
# - python -m flask users list [--role CASHIER]
#   List users with role and active status.
# - python -m flask users create --name "Ana" --email ana@comanda.local --role WAITER
#   Create a user.
#
# Permission inspection:
# - python -m flask perms list [--role KITCHEN] [--category VIEWS]
#   List permissions (optionally filtered by role or category).
# - python -m flask perms check 3 VIEW_PRICES
#   Check whether a user has a permission.

import click
from flask.cli import with_appcontext

from .constants import Role
from .extensions import db
from .models import DiningTable, User
from .permissions import (
    PERMISSION_DEFINITIONS,
    PermissionCategory,
    get_permission_definition,
    get_permissions_by_category,
    get_role_permission_definitions,
    get_status_edges_for_permission,
)
from .policy import current_policy


DEFAULT_USERS = [
    ("Cashier", "cashier@comanda.local", Role.CASHIER),
    ("Waiter", "waiter@comanda.local", Role.WAITER),
    ("Kitchen", "kitchen@comanda.local", Role.KITCHEN),
]

DEFAULT_TABLE_COUNT = 10


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('seed')
@click.option('--tables', 'table_count', default=DEFAULT_TABLE_COUNT, show_default=True, help='Dining tables to create')
@with_appcontext
def seed(table_count):
    """Create default users and dining tables if missing."""
    db.create_all()

    for name, email, role in DEFAULT_USERS:
        user = db.session.query(User).filter_by(email=email).first()
        if user:
            click.echo(f"SKIP  User {email} already exists (id {user.id})")
            continue
        user = User(name=name, email=email, role=role, is_active=True)
        db.session.add(user)
        db.session.flush()
        click.echo(f"ADD   User {email} ({role}) id {user.id}")

    for number in range(1, table_count + 1):
        if db.session.query(DiningTable).filter_by(number=number).first():
            continue
        db.session.add(DiningTable(number=number, is_active=True))
        click.echo(f"ADD   Table {number}")

    db.session.commit()
    click.echo("PASS Seed complete.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to add default users.")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(Role.ALL, case_sensitive=False), help='Filter by role')
@with_appcontext
def list_users(role):
    """List all users with their roles."""
    query = db.session.query(User)

    if role:
        query = query.filter_by(role=role.upper())

    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<30} {'Active':<8} {'Role'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<30} {active_str:<8} {user.role}")

    click.echo("="*80 + "\n")


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email')
@click.option('--role', prompt=True, type=click.Choice(Role.ALL, case_sensitive=False), help='Role')
@with_appcontext
def create_user_cli(name, email, role):
    """Create a user."""
    if db.session.query(User).filter_by(email=email).first():
        raise click.ClickException(f"User with email {email} already exists")

    user = User(name=name, email=email, role=role.upper(), is_active=True)
    db.session.add(user)
    db.session.commit()
    click.echo(f"PASS Created user {user.email} ({user.role}) id {user.id}")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(Role.ALL, case_sensitive=False), help='Filter by role')
@click.option('--category', type=click.Choice(PermissionCategory.ALL, case_sensitive=False), help='Filter by category')
@with_appcontext
def list_permissions_cli(role, category):
    """List all permissions, optionally filtered by role or category."""
    if role:
        perms = get_role_permission_definitions(role.upper())

        click.echo(f"\n{'='*80}")
        click.echo(f"Permissions for role: {role.upper()}")
        click.echo(f"{'='*80}\n")

        click.echo(f"{'Code':<30} {'Name':<35} {'Category'}")
        click.echo("-"*80)

        for perm in perms:
            click.echo(f"{perm['code']:<30} {perm['name']:<35} {perm['category']}")

        click.echo(f"\n Total: {len(perms)} permissions\n")

    elif category:
        perms = get_permissions_by_category(category.upper())

        click.echo(f"\n{'='*80}")
        click.echo(f"Permissions in category: {category.upper()}")
        click.echo(f"{'='*80}\n")

        click.echo(f"{'Code':<30} {'Name'}")
        click.echo("-"*80)

        for code, name, _, _ in perms:
            click.echo(f"{code:<30} {name}")
            for from_status, to_status in get_status_edges_for_permission(code):
                click.echo(f"{'':<30}   {from_status} -> {to_status}")

        click.echo(f"\n Total: {len(perms)} permissions\n")

    else:
        click.echo(f"\n{'='*80}")
        click.echo("All Permissions")
        click.echo(f"{'='*80}\n")

        for category_name in PermissionCategory.ALL:
            click.echo(f"CATEGORY {category_name}")
            click.echo("-"*80)
            for code, name, _, _ in get_permissions_by_category(category_name):
                click.echo(f"  {code:<28} {name}")
            click.echo("")

        click.echo(f" Total: {len(PERMISSION_DEFINITIONS)} permissions\n")


@perms_group.command('check')
@click.argument('user_id', type=int)
@click.argument('permission_code')
@with_appcontext
def check_permission_cli(user_id, permission_code):
    """Check if a user's role holds a specific permission."""
    definition = get_permission_definition(permission_code.upper())
    if not definition:
        raise click.ClickException(f"Unknown permission '{permission_code}'")

    user = db.session.get(User, user_id)
    if not user:
        raise click.ClickException(f"User {user_id} not found")

    if current_policy().has_permission(user.role, definition['code']):
        click.echo(f"PASS User {user.id} ({user.role}) HAS permission '{definition['code']}'")
    else:
        click.echo(f"FAIL User {user.id} ({user.role}) DOES NOT HAVE permission '{definition['code']}'")
    click.echo(f"     {definition['name']}: {definition['description']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
