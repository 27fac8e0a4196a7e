"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .item import Item  # noqa: E402,F401
from .notification import Notification  # noqa: E402,F401
from .activity_log import ActivityLog  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "Item",
    "Notification",
    "ActivityLog",
]
