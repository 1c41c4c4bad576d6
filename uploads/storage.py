from __future__ import annotations

import logging
import uuid
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


def unique_name(folder: str, original_name: str) -> str:
    suffix = PurePosixPath(original_name or "").suffix.lower()
    return f"{folder}/{uuid.uuid4().hex}{suffix}"


def save_file(folder: str, upload) -> tuple[str, str]:
    """Store ``upload`` in the media storage; return ``(object_name, url)``."""
    name = default_storage.save(unique_name(folder, upload.name), upload)
    return name, default_storage.url(name)


def object_name_for_url(url: str) -> str | None:
    """Map a URL served by the media storage back to its object name."""
    if not url:
        return None
    base = urlparse(default_storage.base_url or "").path
    path = urlparse(url).path
    if not base or not path.startswith(base):
        return None
    name = unquote(path[len(base):])
    return name or None


def delete_object(name: str) -> None:
    default_storage.delete(name)
    logger.info("Deleted media object %s", name)


def delete_url(url: str) -> bool:
    """Delete the file behind ``url`` when it lives in the media storage."""
    name = object_name_for_url(url)
    if name is None:
        return False
    delete_object(name)
    return True
