"""Admin blueprint: notifications inbox, dashboard analytics and activity feed."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user
from sqlalchemy import extract, func
from werkzeug.exceptions import BadRequest

from models import db
from models.activity_log import ActivityLog
from models.item import ITEM_STATUSES, Item
from models.notification import Notification
from models.user import User
from utils.access import requires

admin_bp = Blueprint("admin", __name__)

ANALYTICS_MONTHS = 6
ACTIVITY_LIMIT_DEFAULT = 50
ACTIVITY_LIMIT_MAX = 200


def month_window_start(now: datetime, months: int = ANALYTICS_MONTHS) -> datetime:
    """First instant of the oldest month in a window of ``months`` ending with ``now``'s month."""

    year, month = now.year, now.month - (months - 1)
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1)


def monthly_counts(column, since: datetime) -> list[dict]:
    """Count rows per calendar month of ``column`` from ``since`` onwards.

    Months without rows are omitted.
    """

    year = extract("year", column)
    month = extract("month", column)
    rows = (
        db.session.query(year, month, func.count())
        .filter(column >= since)
        .group_by(year, month)
        .order_by(year, month)
        .all()
    )
    return [
        {"month": f"{int(y):04d}-{int(m):02d}", "count": count}
        for y, m, count in rows
    ]


@admin_bp.route("/notifications", methods=["GET"])
@requires("admin.notifications")
def list_notifications():
    """Notifications addressed to the calling admin, newest first."""

    notifications = (
        Notification.query.filter_by(recipient_id=current_user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return jsonify([notification.to_dict() for notification in notifications])


@admin_bp.route("/analytics", methods=["GET"])
@requires("admin.analytics")
def analytics():
    """Dashboard rollups over users and items, computed on every call."""

    total_users = User.query.count()
    total_posts = Item.query.count()
    found_items = Item.query.filter_by(status="found").count()
    lost_items = Item.query.filter_by(status="lost").count()

    since = month_window_start(datetime.utcnow())

    status_rows = (
        db.session.query(Item.status, func.count(Item.id))
        .filter(Item.status.in_(ITEM_STATUSES))
        .group_by(Item.status)
        .order_by(Item.status)
        .all()
    )

    return jsonify(
        {
            "totalUsers": total_users,
            "totalPosts": total_posts,
            "foundItems": found_items,
            "lostItems": lost_items,
            "userRegistrations": monthly_counts(User.created_at, since),
            "postsPerMonth": monthly_counts(Item.created_at, since),
            "foundLostCounts": [
                {"status": status, "count": count} for status, count in status_rows
            ],
        }
    )


@admin_bp.route("/activity", methods=["GET"])
@requires("admin.activity")
def recent_activity():
    """Most recent activity log entries."""

    raw_limit = request.args.get("limit")
    try:
        limit = int(raw_limit) if raw_limit is not None else ACTIVITY_LIMIT_DEFAULT
    except ValueError as exc:
        raise BadRequest(f"limit must be between 1 and {ACTIVITY_LIMIT_MAX}.") from exc
    if not 1 <= limit <= ACTIVITY_LIMIT_MAX:
        raise BadRequest(f"limit must be between 1 and {ACTIVITY_LIMIT_MAX}.")

    entries = (
        ActivityLog.query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([entry.to_dict() for entry in entries])
