"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest


def _require_keys(data, required_keys: Iterable[str] | None) -> None:
    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    _require_keys(data, required_keys)

    return data


def parse_form_or_json(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
) -> dict:
    """Return the fields of a multipart/urlencoded form or a JSON object.

    Routes that accept an optional file upload take their scalar fields from
    the form; clients without a file may send JSON instead.
    """

    if req.is_json:
        return parse_json_request(req, required_keys=required_keys, allow_empty=True)

    data = req.form.to_dict()
    _require_keys(data, required_keys)
    return data


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None


def parse_datetime(value: object, field: str) -> datetime:
    """Parse an ISO 8601 date or datetime string into a naive UTC datetime."""

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"{field} must be ISO 8601 format.")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise BadRequest(f"{field} must be ISO 8601 format.")
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed
