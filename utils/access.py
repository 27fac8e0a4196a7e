"""Role and ownership policies for API operations.

Each operation maps to the roles allowed to perform it and whether the owner
of the target resource may perform it regardless of role. Role-only policies
are enforced by :func:`requires` before the view runs. Policies that admit
owners are finished by the view itself, once it knows who owns the resource,
by calling :func:`authorize` with ``owner_id``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import current_app
from flask_jwt_extended import current_user, verify_jwt_in_request
from werkzeug.exceptions import Forbidden

from models.user import User

ADMIN = frozenset({"admin"})
AUTHENTICATED = frozenset({"user", "admin"})


@dataclass(frozen=True)
class Policy:
    roles: frozenset = frozenset()
    allow_owner: bool = False


POLICIES: dict[str, Policy] = {
    "items.list_mine": Policy(roles=AUTHENTICATED),
    "items.create": Policy(roles=AUTHENTICATED),
    "items.update": Policy(allow_owner=True),
    "items.delete": Policy(allow_owner=True),
    "items.mark_found": Policy(roles=AUTHENTICATED),
    "users.list": Policy(roles=ADMIN),
    "users.get": Policy(roles=ADMIN, allow_owner=True),
    "users.update": Policy(roles=ADMIN, allow_owner=True),
    "users.delete": Policy(roles=ADMIN),
    "users.update_profile": Policy(roles=AUTHENTICATED),
    "admin.notifications": Policy(roles=ADMIN),
    "admin.analytics": Policy(roles=ADMIN),
    "admin.activity": Policy(roles=ADMIN),
}


def is_permitted(operation: str, user: User, owner_id: int | None = None) -> bool:
    """Return True if ``user`` may perform ``operation``."""

    policy = POLICIES[operation]
    if user.role in policy.roles:
        return True
    return policy.allow_owner and owner_id is not None and owner_id == user.id


def authorize(operation: str, user: User, owner_id: int | None = None) -> None:
    """Raise ``Forbidden`` unless ``user`` may perform ``operation``."""

    if is_permitted(operation, user, owner_id):
        return

    current_app.logger.warning(
        "Forbidden: user=%s role=%s operation=%s owner=%s",
        user.id,
        user.role,
        operation,
        owner_id,
    )
    if POLICIES[operation].allow_owner:
        raise Forbidden("Forbidden")
    raise Forbidden("Forbidden: Insufficient permissions")


def requires(operation: str):
    """Require a valid bearer token, plus the role check for role-only policies."""

    if operation not in POLICIES:
        raise KeyError(f"No access policy for operation {operation!r}")
    policy = POLICIES[operation]

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not policy.allow_owner:
                authorize(operation, current_user)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
