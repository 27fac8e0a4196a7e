"""Notification model definition."""

from datetime import datetime

from . import db


class Notification(db.Model):
    """A message telling a user that an item has been found."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("items.id"),
        nullable=True,
        index=True,
    )
    finder_id = db.Column(db.String(64), nullable=False)
    finder_name = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Deleting an item clears item_id instead of deleting the notification.
    item = db.relationship("Item", backref=db.backref("notifications"))

    def to_dict(self) -> dict:
        """Serialize the notification with its item and the item's owner."""

        return {
            "id": self.id,
            "recipientId": self.recipient_id,
            "message": self.message,
            "item": self.item.to_dict(include_owner=True) if self.item else None,
            "finderId": self.finder_id,
            "finderName": self.finder_name,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
