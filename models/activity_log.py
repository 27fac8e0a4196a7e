"""Activity log model definition."""

from datetime import datetime

from . import db


ACTIVITY_ACTIONS = (
    "login",
    "register",
    "post_item",
    "edit_item",
    "delete_item",
    "ban_user",
    "delete_user",
    "verify_user",
    "edit_profile",
)


class ActivityLog(db.Model):
    """Append-only audit entry for a user action."""

    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    # No foreign key: entries outlive the users they describe.
    user_id = db.Column(db.Integer, nullable=False, index=True)
    action = db.Column(
        db.Enum(*ACTIVITY_ACTIONS, name="activity_action"),
        nullable=False,
    )
    details = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user_id,
            "action": self.action,
            "details": self.details,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} user_id={self.user_id} action={self.action}>"
