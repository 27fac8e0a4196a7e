"""Authentication blueprint providing register and login endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token
from werkzeug.exceptions import BadRequest, Unauthorized
from sqlalchemy import func

from models import db
from models.user import User
from utils.activity import log_activity
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _issue_token(user: User) -> str:
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role})


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new user account. Registration never grants the admin role."""
    payload = parse_json_request(request, required_keys=("name", "email", "password"))
    name = str(payload["name"]).strip()
    email = _normalize_email(payload.get("email"))
    password = str(payload["password"]).strip()

    if not name or not email or not password:
        raise BadRequest("Name, email and password are required.")

    # Case-insensitive unique check
    existing = User.query.filter(func.lower(User.email) == email).first()
    if existing is not None:
        raise BadRequest("A user with that email already exists.")

    user = User(
        name=name,
        email=email,
        full_name=payload.get("fullName"),
        contact_number=payload.get("contactNumber"),
        role="user",
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    log_activity(user, "register", f"User {user.name} registered")
    db.session.commit()
    current_app.logger.info("Registered user id=%s", user.id)

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "access_token": _issue_token(user),
                "user": user.to_dict(),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT access token."""
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = str(payload.get("password") or "").strip()

    if not email or not password:
        raise BadRequest("Email and password are required.")

    # Case-insensitive lookup
    user = User.query.filter(func.lower(User.email) == email).first()
    if user is None or not user.check_password(password):
        current_app.logger.warning("Failed login for %s", email)
        raise Unauthorized("Invalid email or password.")

    log_activity(user, "login", f"User {user.name} logged in")
    db.session.commit()

    return (
        jsonify(
            {
                "access_token": _issue_token(user),
                "user": user.to_dict(),
            }
        ),
        HTTPStatus.OK,
    )
