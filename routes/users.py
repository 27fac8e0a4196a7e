"""Users blueprint: admin management and self-service profile updates."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user
from sqlalchemy import func
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.user import USER_ROLES, User
from utils.access import authorize, requires
from utils.activity import log_activity
from utils.request_validation import parse_bool, parse_form_or_json
from utils.uploads import save_uploaded_photo

users_bp = Blueprint("users", __name__)


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _stripped(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


def _ensure_email_available(email: str, user: User) -> None:
    clash = User.query.filter(
        func.lower(User.email) == email, User.id != user.id
    ).first()
    if clash is not None:
        raise BadRequest("A user with that email already exists.")


@users_bp.route("", methods=["GET"])
@requires("users.list")
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([user.to_dict() for user in users])


@users_bp.route("/<int:user_id>", methods=["GET"])
@requires("users.get")
def get_user(user_id: int):
    """Return one user. Admins may read anyone, others only themselves."""

    authorize("users.get", current_user, owner_id=user_id)
    return jsonify(_get_user_or_404(user_id).to_dict())


@users_bp.route("/<int:user_id>", methods=["PUT"])
@requires("users.update")
def update_user(user_id: int):
    """Update a user.

    Accepts JSON or form fields. Admins may change name, email, role and
    verification; everyone else may change only their own name and email.
    Other keys, and values that are blank once stripped, are ignored.
    """

    authorize("users.update", current_user, owner_id=user_id)
    data = parse_form_or_json(request)
    user = _get_user_or_404(user_id)

    name = _stripped(data, "name")
    if name:
        user.name = name

    email = _stripped(data, "email").lower()
    if email:
        _ensure_email_available(email, user)
        user.email = email

    if current_user.is_admin:
        role = _stripped(data, "role")
        if role:
            if role not in USER_ROLES:
                raise BadRequest("Role must be one of: user, admin.")
            user.role = role

        if _stripped(data, "isVerified"):
            verified = parse_bool(data.get("isVerified"))
            if verified is None:
                raise BadRequest("isVerified must be boolean.")
            user.is_verified = verified

    # Admin edits are tagged verify_user whether or not verification changed.
    action = "verify_user" if current_user.is_admin else "edit_profile"
    log_activity(current_user, action, f"User {user.name} updated by {current_user.name}")
    db.session.commit()

    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@requires("users.delete")
def delete_user(user_id: int):
    """Hard-delete a user together with the items they own."""

    user = _get_user_or_404(user_id)
    name = user.name

    db.session.delete(user)
    log_activity(current_user, "delete_user", f"User {name} deleted by {current_user.name}")
    db.session.commit()
    current_app.logger.info("User %s deleted by admin %s", user_id, current_user.id)

    return jsonify({"message": "User deleted successfully"})


@users_bp.route("/profile", methods=["PUT"])
@requires("users.update_profile")
def update_profile():
    """Update the caller's full name, contact number and profile photo."""

    data = parse_form_or_json(request)
    user = current_user

    full_name = _stripped(data, "fullName")
    if full_name:
        user.full_name = full_name

    contact_number = _stripped(data, "contactNumber")
    if contact_number:
        user.contact_number = contact_number

    photo = save_uploaded_photo("profilePhoto")
    if photo:
        user.profile_photo = photo

    log_activity(user, "edit_profile", f"User {user.name} updated their profile")
    db.session.commit()

    return jsonify(user.to_dict())
