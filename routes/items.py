"""Items blueprint: public listing, owner CRUD and the found workflow."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.item import Item
from models.notification import Notification
from models.user import User
from utils.access import authorize, requires
from utils.activity import log_activity
from utils.errors import ConfigurationError, InvalidOperation
from utils.request_validation import (
    parse_datetime,
    parse_form_or_json,
    parse_json_request,
)
from utils.uploads import save_uploaded_photo

items_bp = Blueprint("items", __name__)

# Wire name -> model attribute for the owner-editable text fields.
TEXT_FIELDS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "location": "location",
}
REQUIRED_FIELDS = ("name", "description", "category", "location", "dateLost")


def _get_item_or_404(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if item is None:
        raise NotFound("Item not found")
    return item


def _newest_first(query):
    return query.order_by(Item.created_at.desc(), Item.id.desc())


def _clean_text(data: dict, key: str) -> str:
    value = str(data.get(key) or "").strip()
    if not value:
        raise BadRequest(f"{key} must not be empty.")
    return value


@items_bp.route("", methods=["GET"])
def list_items():
    """Return every item, newest first, with its owner's contact fields."""

    items = _newest_first(Item.query).all()
    return jsonify([item.to_dict(include_owner=True) for item in items])


@items_bp.route("/user", methods=["GET"])
@requires("items.list_mine")
def list_my_items():
    """Return the caller's own items, newest first."""

    items = _newest_first(Item.query.filter_by(owner_id=current_user.id)).all()
    return jsonify([item.to_dict() for item in items])


@items_bp.route("/<int:item_id>", methods=["GET"])
def get_item(item_id: int):
    item = _get_item_or_404(item_id)
    return jsonify(item.to_dict(include_owner=True))


@items_bp.route("", methods=["POST"])
@requires("items.create")
def create_item():
    """Create an item owned by the caller, with an optional ``photo`` upload."""

    data = parse_form_or_json(request, required_keys=REQUIRED_FIELDS)

    item = Item(
        name=_clean_text(data, "name"),
        description=_clean_text(data, "description"),
        category=_clean_text(data, "category"),
        location=_clean_text(data, "location"),
        date_lost=parse_datetime(data.get("dateLost"), "dateLost"),
        owner_id=current_user.id,
    )

    photo = save_uploaded_photo("photo")
    if photo:
        item.photo = photo

    db.session.add(item)
    log_activity(
        current_user,
        "post_item",
        f'Item "{item.name}" posted by {current_user.name}',
    )
    db.session.commit()

    return jsonify(item.to_dict()), 201


@items_bp.route("/<int:item_id>", methods=["PUT"])
@requires("items.update")
def update_item(item_id: int):
    """Replace the fields present in the request. Owner only."""

    item = _get_item_or_404(item_id)
    authorize("items.update", current_user, owner_id=item.owner_id)

    data = parse_form_or_json(request)

    for key, attribute in TEXT_FIELDS.items():
        if key in data and data[key] is not None:
            setattr(item, attribute, _clean_text(data, key))

    if "dateLost" in data and data["dateLost"] is not None:
        item.date_lost = parse_datetime(data["dateLost"], "dateLost")

    photo = save_uploaded_photo("photo")
    if photo:
        item.photo = photo

    log_activity(
        current_user,
        "edit_item",
        f'Item "{item.name}" edited by {current_user.name}',
    )
    db.session.commit()

    return jsonify(item.to_dict())


@items_bp.route("/<int:item_id>", methods=["DELETE"])
@requires("items.delete")
def delete_item(item_id: int):
    """Hard-delete an item. Owner only."""

    item = _get_item_or_404(item_id)
    authorize("items.delete", current_user, owner_id=item.owner_id)

    name = item.name
    db.session.delete(item)
    log_activity(
        current_user,
        "delete_item",
        f'Item "{name}" deleted by {current_user.name}',
    )
    db.session.commit()

    return jsonify({"message": "Item deleted successfully"})


def _found_notifications(item: Item, admin: User, finder_id: str, finder_name: str):
    """Build the admin-facing and owner-facing notifications for a found item."""

    return [
        Notification(
            recipient_id=admin.id,
            message=(
                f'Item "{item.name}" lost at {item.location} '
                f"has been found by {finder_name}"
            ),
            item_id=item.id,
            finder_id=finder_id,
            finder_name=finder_name,
        ),
        Notification(
            recipient_id=item.owner_id,
            message=f'Your item "{item.name}" has been found by {finder_name}',
            item_id=item.id,
            finder_id=finder_id,
            finder_name=finder_name,
        ),
    ]


@items_bp.route("/found", methods=["POST"])
@requires("items.mark_found")
def mark_item_found():
    """Record that someone other than the owner found an item.

    Notifies the owner and the administrator and flips the item to ``found``.
    Both notifications and the status change are committed together.
    """

    data = parse_json_request(request, required_keys=("itemId", "finderId", "finderName"))

    try:
        item_id = int(data["itemId"])
    except (TypeError, ValueError):
        raise NotFound("Item not found")
    finder_id = str(data["finderId"]).strip()
    finder_name = str(data["finderName"]).strip()

    item = _get_item_or_404(item_id)

    if str(item.owner_id) == finder_id:
        raise InvalidOperation("Cannot mark your own item as found")

    admin = User.query.filter_by(role="admin").order_by(User.id.asc()).first()
    if admin is None:
        current_app.logger.error("No admin account provisioned; cannot mark item %s found", item.id)
        raise ConfigurationError("Admin not found")

    db.session.add_all(_found_notifications(item, admin, finder_id, finder_name))
    item.mark_found()
    db.session.commit()

    current_app.logger.info(
        "Item %s marked found by finder=%s (reported by user %s)",
        item.id,
        finder_id,
        current_user.id,
    )
    return jsonify({"message": "Item marked as found, notifications sent"})
