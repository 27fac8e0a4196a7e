"""Tests for the admin provisioning CLI commands."""

from __future__ import annotations

from conftest import create_user
from models.user import User


def test_seed_admin_creates_then_updates(app):
    runner = app.test_cli_runner()

    created = runner.invoke(args=["seed-admin"])
    assert created.exit_code == 0, created.output
    assert "Admin user created: admin@example.com" in created.output

    updated = runner.invoke(
        args=["seed-admin", "--email", "ADMIN@example.com", "--password", "NewPass456"]
    )
    assert updated.exit_code == 0, updated.output
    assert "Admin user updated: admin@example.com" in updated.output

    with app.app_context():
        admin = User.query.filter_by(email="admin@example.com").one()
        assert admin.role == "admin"
        assert admin.is_verified is True
        assert admin.check_password("NewPass456")


def test_seed_admin_promotes_existing_user(app):
    with app.app_context():
        create_user("member@example.com")

    result = app.test_cli_runner().invoke(
        args=["seed-admin", "--email", "member@example.com", "--password", "Promoted1"]
    )

    assert result.exit_code == 0, result.output
    with app.app_context():
        assert User.query.filter_by(email="member@example.com").one().role == "admin"
        assert User.query.count() == 1


def test_check_admin_reports_presence(app):
    runner = app.test_cli_runner()

    missing = runner.invoke(args=["check-admin"])
    assert missing.exit_code == 1
    assert "Admin user not found: admin@example.com" in missing.output

    runner.invoke(args=["seed-admin"])

    found = runner.invoke(args=["check-admin"])
    assert found.exit_code == 0
    assert "Admin user found: admin@example.com (role=admin)" in found.output
