"""Image storage and the active-image pointer shown on the stream overlay."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.datastructures import FileStorage

from ..extensions import socketio
from ..models import Image


OVERLAY_ROOM = "overlay"
UPLOAD_URL_PREFIX = "/uploads"


class ImageUploadError(RuntimeError):
    """Raised when an uploaded file is rejected before anything is stored."""


def _file_size(upload: FileStorage) -> int:
    stream = upload.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _extension(filename: Optional[str]) -> str:
    extension = os.path.splitext(filename or "")[1].lower()
    if extension and extension[1:].isalnum():
        return extension
    return ""


def validate_upload(upload: Optional[FileStorage], max_bytes: int) -> FileStorage:
    if upload is None or not upload.filename:
        raise ImageUploadError("No image file provided")
    if not (upload.mimetype or "").startswith("image/"):
        raise ImageUploadError("Only image files are allowed")
    if _file_size(upload) > max_bytes:
        megabytes = max_bytes // (1024 * 1024)
        limit = f"{megabytes}MB" if megabytes else f"{max_bytes} bytes"
        raise ImageUploadError(f"File too large. Maximum size is {limit}.")
    return upload


def _activate_statement(image_id: Optional[int]):
    statement = update(Image)
    if image_id is None:
        statement = statement.where(Image.is_active.is_(True)).values(is_active=False)
    else:
        statement = statement.where((Image.is_active.is_(True)) | (Image.id == image_id)).values(
            is_active=case((Image.id == image_id, True), else_=False)
        )
    return statement.execution_options(synchronize_session=False)


def store_upload(
    session: Session,
    upload: FileStorage,
    upload_folder: str,
    *,
    max_bytes: int,
    template_id: Optional[int] = None,
    set_active: bool = True,
) -> Image:
    """Write ``upload`` under a generated name and record it.

    With ``set_active`` the new row becomes the only active image in the same
    transaction as the insert. If the database write fails the file is removed
    again.
    """

    validate_upload(upload, max_bytes)

    folder = Path(upload_folder)
    folder.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{_extension(upload.filename)}"
    path = folder / filename
    upload.save(str(path))

    try:
        image = Image(
            filename=filename,
            original_name=upload.filename,
            url=f"{UPLOAD_URL_PREFIX}/{filename}",
            template_id=template_id,
            is_active=False,
        )
        session.add(image)
        session.flush()
        if set_active:
            session.execute(_activate_statement(image.id))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        remove_file(path)
        raise

    current_app.logger.info("Stored upload %s as %s (active=%s)", upload.filename, filename, set_active)
    return image


def activate_image(session: Session, image: Image) -> Image:
    session.execute(_activate_statement(image.id))
    session.commit()
    return image


def hide_images(session: Session) -> None:
    session.execute(_activate_statement(None))
    session.commit()


def active_image(session: Session) -> Optional[Image]:
    return (
        session.query(Image)
        .filter(Image.is_active.is_(True))
        .order_by(Image.created_at.desc(), Image.id.desc())
        .first()
    )


def remove_file(path: Path) -> bool:
    try:
        path.unlink()
    except OSError as exc:
        current_app.logger.warning("Could not delete image file %s: %s", path, exc)
        return False
    return True


def delete_image(session: Session, image: Image, upload_folder: str) -> bool:
    """Delete the row, then try to remove the file; returns whether the image was active."""

    was_active = bool(image.is_active)
    path = Path(upload_folder) / image.filename
    session.delete(image)
    session.commit()
    remove_file(path)
    return was_active


def broadcast_image_update(payload: Optional[Dict[str, Any]]) -> None:
    # A tuple always sends one argument, so a hidden image arrives as null.
    socketio.emit("image-update", (payload,), to=OVERLAY_ROOM)
    current_app.logger.debug("Sent image-update to overlay (image=%s)", payload["id"] if payload else None)


def broadcast_image_uploaded(payload: Dict[str, Any]) -> None:
    socketio.emit("image-uploaded", payload)


def broadcast_caption(caption: str) -> None:
    socketio.emit("caption-update", {"caption": caption}, to=OVERLAY_ROOM)


def broadcast_template_generated(payload: Dict[str, Any]) -> None:
    socketio.emit("template-generated", payload)
