"""Tests that the Alembic migrations build the same schema as the models."""

from __future__ import annotations

from flask_migrate import downgrade, upgrade
from sqlalchemy import inspect

from app import create_app
from conftest import ROOT_DIR, _BaseTestConfig
from models import db

MIGRATIONS_DIR = str(ROOT_DIR / "migrations")


def test_upgrade_and_downgrade_on_fresh_database(tmp_path):
    class MigrationConfig(_BaseTestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'migrated.db'}"
        UPLOAD_DIR = str(tmp_path / "uploads")

    application = create_app(MigrationConfig)

    with application.app_context():
        upgrade(directory=MIGRATIONS_DIR)
        inspector = inspect(db.engine)
        tables = set(inspector.get_table_names())
        assert {"users", "items", "notifications", "activity_logs"} <= tables

        item_columns = {column["name"] for column in inspector.get_columns("items")}
        assert {"owner_id", "status", "date_lost", "photo"} <= item_columns

        downgrade(directory=MIGRATIONS_DIR, revision="base")
        remaining = set(inspect(db.engine).get_table_names())
        assert not {"users", "items", "notifications", "activity_logs"} & remaining
        db.engine.dispose()
