"""Helpers for recording user activity."""

from __future__ import annotations

from models import db
from models.activity_log import ACTIVITY_ACTIONS, ActivityLog
from models.user import User


def log_activity(actor: User, action: str, details: str | None = None) -> ActivityLog:
    """Stage an activity entry in the current session.

    The caller commits it together with the change it describes.
    """

    if action not in ACTIVITY_ACTIONS:
        raise ValueError(f"Unknown activity action: {action}")

    entry = ActivityLog(user_id=actor.id, action=action, details=details)
    db.session.add(entry)
    return entry
