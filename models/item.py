"""Item model definition."""

from datetime import datetime

from . import db


ITEM_STATUSES = ("lost", "found")


class Item(db.Model):
    """A lost item posted by its owner."""

    __tablename__ = "items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    date_lost = db.Column(db.DateTime, nullable=False)
    photo = db.Column(db.String(512), nullable=True)
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    status = db.Column(
        db.Enum(*ITEM_STATUSES, name="item_status"),
        nullable=False,
        default="lost",
        server_default=db.text("'lost'"),
        index=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner = db.relationship("User", back_populates="items")

    def mark_found(self) -> None:
        self.status = "found"

    def to_dict(self, include_owner: bool = False) -> dict:
        """Serialize the item; ``include_owner`` joins the owner's contact fields."""

        if include_owner and self.owner is not None:
            owner = self.owner.summary()
        else:
            owner = self.owner_id
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "location": self.location,
            "dateLost": self.date_lost.isoformat() if self.date_lost else None,
            "photo": self.photo,
            "owner": owner,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Item id={self.id} owner_id={self.owner_id} status={self.status}>"
