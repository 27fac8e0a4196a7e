"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.item import Item  # noqa: E402
from models.user import User  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RATE_LIMIT = "1000 per minute"
    ADMIN_EMAIL = "admin@example.com"
    ADMIN_PASSWORD = "AdminPass123"


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


def create_user(
    email: str,
    role: str = "user",
    *,
    name: str | None = None,
    password: str = "Password123",
    created_at: datetime | None = None,
) -> int:
    """Persist a user and return its id. Call inside an app context."""

    user = User(name=name or email.split("@")[0], email=email, role=role)
    user.set_password(password)
    if created_at is not None:
        user.created_at = created_at
    db.session.add(user)
    db.session.commit()
    return user.id


def create_item(
    owner_id: int,
    name: str = "Wallet",
    *,
    status: str = "lost",
    created_at: datetime | None = None,
) -> int:
    """Persist an item and return its id. Call inside an app context."""

    item = Item(
        name=name,
        description="Brown leather wallet",
        category="accessories",
        location="Library",
        date_lost=datetime(2024, 5, 1),
        owner_id=owner_id,
        status=status,
    )
    if created_at is not None:
        item.created_at = created_at
    db.session.add(item)
    db.session.commit()
    return item.id


def auth_headers(app: Flask, user_id: int) -> dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=str(user_id))
    return {"Authorization": f"Bearer {token}"}
