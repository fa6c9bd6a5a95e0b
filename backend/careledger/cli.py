# Overview: Flask CLI command groups for bootstrap, admin accounts, and hospital resource maintenance.

# backend/careledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
#
# Administrator accounts:
# - python -m flask admins create --username ops --display-name "Ops Admin" --password "Password123!"
#   Create an administrator (prompts if options are omitted).
# - python -m flask admins list
#   List administrators with active status and last login.
#
# Hospital resources:
# - python -m flask hospital seed
#   Insert default bed types and operation theaters that are missing.
# - python -m flask hospital duplicates [--prune --yes]
#   Report (or delete) non-canonical duplicate bed/theater rows.

import click
from flask.cli import with_appcontext

from .extensions import db, remote
from .models import AdminUser
from .services.auth_service import PasswordValidationError, create_admin
from .services.canonical_service import canonical_rows, duplicate_rows
from .time_utils import to_utc_z, utcnow


DEFAULT_BED_TYPES = [
    ("General", 40, 40),
    ("ICU", 10, 10),
    ("Emergency", 15, 15),
    ("Pediatric", 12, 12),
    ("Maternity", 8, 8),
]

DEFAULT_THEATERS = ["OT-1", "OT-2", "OT-3"]

RESOURCE_KEYS = [
    ("hospital_beds", "bed_type"),
    ("operation_theater", "name"),
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema is up to date")


@click.group('admins')
def admins_group():
    """Administrator account commands."""


@admins_group.command('create')
@click.option('--username', prompt=True)
@click.option('--display-name', default=None)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin_command(username, display_name, password):
    """Create an administrator account."""
    try:
        admin = create_admin(username, password, display_name=display_name)
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created admin '{admin.username}' (ID: {admin.id})")


@admins_group.command('list')
@with_appcontext
def list_admins():
    """List administrator accounts."""
    admins = db.session.query(AdminUser).order_by(AdminUser.username).all()
    if not admins:
        click.echo("No administrators found.")
        return
    for admin in admins:
        status = "active" if admin.is_active else "inactive"
        last_login = to_utc_z(admin.last_login_at) or "never"
        click.echo(f"{admin.id:>4}  {admin.username:<24} {status:<9} last login: {last_login}")


@click.group('hospital')
def hospital_group():
    """Hospital resource maintenance commands."""


@hospital_group.command('seed')
@with_appcontext
def seed_hospital():
    """Insert default bed types and theaters that are missing (canonical rows only)."""
    store = remote.store
    now = utcnow()

    beds = {row["bed_type"] for row in canonical_rows(store.select("hospital_beds"), "bed_type")}
    for bed_type, total, available in DEFAULT_BED_TYPES:
        if bed_type in beds:
            click.echo(f"WARN  Bed type '{bed_type}' already exists, skipping...")
            continue
        store.insert("hospital_beds", {
            "bed_type": bed_type,
            "total_beds": total,
            "available_beds": available,
            "created_at": now,
            "updated_at": now,
        })
        click.echo(f"PASS Created bed type '{bed_type}' ({available}/{total})")

    theaters = {row["name"] for row in canonical_rows(store.select("operation_theater"), "name")}
    for name in DEFAULT_THEATERS:
        if name in theaters:
            click.echo(f"WARN  Theater '{name}' already exists, skipping...")
            continue
        store.insert("operation_theater", {
            "name": name,
            "is_available": True,
            "created_at": now,
            "updated_at": now,
        })
        click.echo(f"PASS Created theater '{name}'")


@hospital_group.command('duplicates')
@click.option('--prune', is_flag=True, help='Delete the non-canonical rows')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def hospital_duplicates(prune, yes):
    """Report duplicate bed/theater rows shadowed by a fresher canonical row."""
    store = remote.store
    found = []
    for table, key_field in RESOURCE_KEYS:
        for row in duplicate_rows(store.select(table), key_field):
            found.append((table, key_field, row))
            click.echo(
                f"{table:<18} {key_field}={row[key_field]!r:<16} id={row['id']} "
                f"updated_at={to_utc_z(row.get('updated_at'))}"
            )

    if not found:
        click.echo("PASS No duplicate rows")
        return

    click.echo(f"\n{len(found)} duplicate row(s)")
    if not prune:
        return

    if not yes:
        click.confirm("WARN Delete all duplicate rows listed above?", abort=True)

    removed = 0
    for table, _, row in found:
        removed += len(store.delete(table, row["id"]))
    click.echo(f"DELETE Removed {removed} duplicate row(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(admins_group)
    app.cli.add_command(hospital_group)
