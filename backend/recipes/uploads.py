from __future__ import annotations

import logging
import time
from pathlib import Path

from fastapi import UploadFile

from .config import DEFAULT_UPLOAD_CONFIG, UploadConfig

logger = logging.getLogger(__name__)

IMAGE_TYPE_ERROR = "Images only! Allowed types: jpg, jpeg, png"
FILE_SIZE_ERROR = "File too large. Maximum size is 5MB."


class UploadError(ValueError):
    """The uploaded file was rejected."""


def _is_allowed(upload: UploadFile, config: UploadConfig) -> bool:
    ext = Path(upload.filename or "").suffix.lower().lstrip(".")
    mime = (upload.content_type or "").lower()
    return ext in config.allowed_types and any(t in mime for t in config.allowed_types)


def save_image(
    upload: UploadFile,
    field_name: str = "image",
    config: UploadConfig | None = None,
) -> str:
    """Validate and persist an uploaded image, returning its stored path."""
    config = config or DEFAULT_UPLOAD_CONFIG

    if not _is_allowed(upload, config):
        logger.info("Rejected upload %r (%s)", upload.filename, upload.content_type)
        raise UploadError(IMAGE_TYPE_ERROR)

    data = upload.file.read(config.max_file_size + 1)
    if len(data) > config.max_file_size:
        raise UploadError(FILE_SIZE_ERROR)

    config.upload_dir.mkdir(parents=True, exist_ok=True)
    ext = Path(upload.filename or "").suffix.lower()
    filename = f"{field_name}-{int(time.time() * 1000)}{ext}"
    (config.upload_dir / filename).write_bytes(data)
    logger.info("Stored upload %r as %s", upload.filename, filename)
    return f"{config.url_prefix}/{filename}"


def remove_image(stored_path: str, config: UploadConfig | None = None) -> None:
    """Delete a previously stored upload. Paths outside the upload dir are ignored."""
    config = config or DEFAULT_UPLOAD_CONFIG
    if not stored_path or not stored_path.startswith(f"{config.url_prefix}/"):
        return
    target = config.upload_dir / Path(stored_path).name
    try:
        target.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete old image %s", target, exc_info=True)
