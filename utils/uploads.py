"""Validation and storage of uploaded photos."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Iterable

from flask import current_app, request
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from storage.local_storage import LocalStorage

MAX_UPLOAD_SIZE_DEFAULT = 5 * 1024 * 1024  # 5 MB
ALLOWED_EXTENSIONS_DEFAULT = {"png", "jpg", "jpeg", "gif", "webp"}


def _allowed_extensions() -> set[str]:
    configured = current_app.config.get("ALLOWED_UPLOAD_TYPES")
    if not configured:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if isinstance(configured, str):
        values: Iterable[str] = configured.split(",")
    else:
        values = configured

    normalized: set[str] = set()
    for raw in values:
        if not isinstance(raw, str):
            continue

        item = raw.strip().lower()
        if not item:
            continue

        if "/" in item and not item.startswith("."):
            item = item.rsplit("/", 1)[-1]

        item = item.lstrip(".")
        if item:
            normalized.add(item)

    if not normalized:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if "jpeg" in normalized:
        normalized.add("jpg")
    if "jpg" in normalized:
        normalized.add("jpeg")
    return normalized


def _validate_photo(file: FileStorage) -> None:
    if file.filename is None or "." not in file.filename:
        raise BadRequest("Uploaded file must have a file extension.")

    extension = file.filename.rsplit(".", 1)[-1].lower()
    if extension not in _allowed_extensions():
        allowed = ", ".join(sorted(_allowed_extensions()))
        raise BadRequest(f"File type not allowed. Allowed types: {allowed}.")

    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE_DEFAULT))
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise BadRequest(f"File exceeds the maximum upload size of {max_size} bytes.")


def _build_unique_filename(original: str) -> str:
    suffix = Path(original).suffix.lower()
    return f"{uuid.uuid4().hex}{suffix}"


def save_uploaded_photo(field: str) -> str | None:
    """Store the file sent in multipart ``field`` and return its public path.

    Returns None when the request carries no file under that field.
    """

    file = request.files.get(field)
    if not isinstance(file, FileStorage) or not file.filename:
        return None

    _validate_photo(file)

    storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
    stored_name = storage.save(file, _build_unique_filename(file.filename))
    current_app.logger.info("Stored upload %s from field %s", stored_name, field)
    return storage.url(stored_name)
