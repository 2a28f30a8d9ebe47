from __future__ import annotations

from pathlib import Path

from flask import current_app, jsonify, request, send_from_directory
from flask_login import login_required

from ..api import error_response, json_payload, not_found, page_args, validation_error
from ..extensions import db
from ..models import Image
from ..services.library import IMAGES, Repository, clamp_page
from ..services.overlay import (
    ImageUploadError,
    activate_image,
    active_image,
    broadcast_caption,
    broadcast_image_update,
    broadcast_image_uploaded,
    delete_image,
    hide_images,
    store_upload,
)
from . import bp
from .forms import CaptionForm, UploadForm


def _overlay_folder() -> Path:
    return Path(current_app.static_folder) / "overlay"


@bp.route("/api/images", methods=["GET"])
@login_required
def list_images():
    search, limit, offset = page_args()
    if request.args.get("active_only", "").lower() == "true":
        limit, offset = clamp_page(limit, offset, IMAGES.default_limit)
        images = (
            Repository(db.session, IMAGES)
            .query(search)
            .filter(Image.is_active.is_(True))
            .limit(limit)
            .offset(offset)
            .all()
        )
    else:
        images = Repository(db.session, IMAGES).list(search, limit, offset)
    return jsonify([image.to_dict() for image in images])


@bp.route("/api/images/active", methods=["GET"])
def get_active_image():
    image = active_image(db.session)
    return jsonify(image.to_dict() if image else None)


@bp.route("/api/images/<int:image_id>", methods=["GET"])
@login_required
def get_image(image_id: int):
    image = Repository(db.session, IMAGES).get(image_id)
    if image is None:
        return not_found(IMAGES.label)
    return jsonify(image.to_dict())


@bp.route("/api/images/upload", methods=["POST"])
@login_required
def upload():
    form = UploadForm()
    if not form.validate():
        return validation_error(form.errors)

    try:
        image = store_upload(
            db.session,
            request.files.get("image"),
            current_app.config["UPLOAD_FOLDER"],
            max_bytes=current_app.config["IMAGE_MAX_BYTES"],
            template_id=form.template_id.data,
            set_active=form.activate,
        )
    except ImageUploadError as exc:
        return error_response(str(exc))

    payload = image.to_dict()
    if image.is_active:
        broadcast_image_update(payload)
    broadcast_image_uploaded(payload)
    return jsonify(payload), 201


@bp.route("/api/images/<int:image_id>/activate", methods=["PUT"])
@login_required
def activate(image_id: int):
    image = Repository(db.session, IMAGES).get(image_id)
    if image is None:
        return not_found(IMAGES.label)
    activate_image(db.session, image)
    payload = image.to_dict()
    broadcast_image_update(payload)
    return jsonify(payload)


@bp.route("/api/images/hide", methods=["PUT"])
@login_required
def hide():
    hide_images(db.session)
    broadcast_image_update(None)
    return jsonify({"message": "Overlay cleared"})


@bp.route("/api/images/caption", methods=["PUT"])
@login_required
def caption():
    form = CaptionForm.from_payload(json_payload())
    if not form.validate():
        return validation_error(form.errors)
    text = (form.caption.data or "").strip()
    broadcast_caption(text)
    return jsonify({"caption": text})


@bp.route("/api/images/<int:image_id>", methods=["DELETE"])
@login_required
def delete(image_id: int):
    image = Repository(db.session, IMAGES).get(image_id)
    if image is None:
        return not_found(IMAGES.label)
    was_active = delete_image(db.session, image, current_app.config["UPLOAD_FOLDER"])
    if was_active:
        broadcast_image_update(None)
    current_app.logger.info("Deleted image %s", image_id)
    return jsonify({"message": "Image deleted successfully"})


@bp.route("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)


@bp.route("/overlay/")
def overlay_page():
    return send_from_directory(_overlay_folder(), "index.html")


@bp.route("/overlay/<path:filename>")
def overlay_asset(filename: str):
    return send_from_directory(_overlay_folder(), filename)
