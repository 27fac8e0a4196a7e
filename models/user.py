"""User model definition."""

from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


USER_ROLES = ("user", "admin")


class User(db.Model):
    """Represents a registered account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    full_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="user")
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    contact_number = db.Column(db.String(64), nullable=True)
    profile_photo = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    items = db.relationship(
        "Item",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def summary(self) -> dict:
        """Public contact fields shown next to an item."""

        return {
            "id": self.id,
            "name": self.name,
            "fullName": self.full_name,
            "email": self.email,
            "contactNumber": self.contact_number,
            "profilePhoto": self.profile_photo,
        }

    def to_dict(self) -> dict:
        """Serialize the user. The password hash is never included."""

        return {
            "id": self.id,
            "name": self.name,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
            "isVerified": self.is_verified,
            "contactNumber": self.contact_number,
            "profilePhoto": self.profile_photo,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
