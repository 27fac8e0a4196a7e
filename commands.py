"""Flask CLI commands for provisioning the administrator account."""

from __future__ import annotations

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from models import db
from models.user import User


def ensure_admin(email: str, password: str, name: str = "Administrator") -> tuple[User, str]:
    """Create the admin account, or promote and reset an existing one."""

    email = email.strip().lower()
    admin = User.query.filter_by(email=email).first()
    if admin is None:
        admin = User(name=name, email=email, role="admin", is_verified=True)
        admin.set_password(password)
        db.session.add(admin)
        action = "created"
    else:
        admin.role = "admin"
        admin.is_verified = True
        admin.set_password(password)
        action = "updated"
    db.session.commit()
    return admin, action


@click.command("seed-admin")
@with_appcontext
@click.option("--email", default=None, help="Defaults to ADMIN_EMAIL.")
@click.option("--password", default=None, help="Defaults to ADMIN_PASSWORD.")
@click.option("--name", default="Administrator", show_default=True)
def seed_admin_command(email: str | None, password: str | None, name: str) -> None:
    """Create or update the administrator account."""

    email = email or current_app.config.get("ADMIN_EMAIL")
    password = password or current_app.config.get("ADMIN_PASSWORD")
    if not email or not password:
        raise click.UsageError("An admin email and password are required.")

    admin, action = ensure_admin(email, password, name)
    click.echo(f"Admin user {action}: {admin.email}")


@click.command("check-admin")
@with_appcontext
@click.option("--email", default=None, help="Defaults to ADMIN_EMAIL.")
def check_admin_command(email: str | None) -> None:
    """Report whether the administrator account exists."""

    email = (email or current_app.config.get("ADMIN_EMAIL") or "").strip().lower()
    admin = User.query.filter_by(email=email).first()
    if admin is None:
        click.echo(f"Admin user not found: {email}")
        raise click.exceptions.Exit(1)
    click.echo(f"Admin user found: {admin.email} (role={admin.role})")


def register_commands(app: Flask) -> None:
    app.cli.add_command(seed_admin_command)
    app.cli.add_command(check_admin_command)
