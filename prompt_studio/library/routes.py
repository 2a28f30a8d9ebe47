from __future__ import annotations

from typing import Any, Callable, Dict, Type

from flask import current_app, jsonify
from flask_login import login_required

from ..api import JSONForm, error_response, json_payload, not_found, page_args, validation_error
from ..extensions import db
from ..services.library import (
    CHARACTERS,
    EVENTS,
    SCENES,
    STYLE_PROFILES,
    Collection,
    Repository,
    duplicate_scene,
    set_default_style_profile,
)
from . import bp
from .forms import CharacterForm, EventForm, SceneForm, StyleProfileForm


def _strip_values(values: Dict[str, Any]) -> Dict[str, Any]:
    return {name: value.strip() if isinstance(value, str) else value for name, value in values.items()}


def _event_values(values: Dict[str, Any]) -> Dict[str, Any]:
    if "type" in values and not values["type"]:
        values["type"] = "action"
    return values


def register_collection(
    url: str,
    collection: Collection,
    form_class: Type[JSONForm],
    normalise: Callable[[Dict[str, Any]], Dict[str, Any]] = lambda values: values,
) -> None:
    """Wire list/get/create/update/delete endpoints for one collection under ``url``."""

    endpoint = url.replace("-", "_")

    @login_required
    def list_view():
        search, limit, offset = page_args()
        rows = Repository(db.session, collection).list(search, limit, offset)
        return jsonify([row.to_dict() for row in rows])

    @login_required
    def detail_view(entity_id: int):
        instance = Repository(db.session, collection).get(entity_id)
        if instance is None:
            return not_found(collection.label)
        return jsonify(instance.to_dict())

    @login_required
    def create_view():
        payload = json_payload()
        form = form_class.from_payload(payload)
        if not form.validate():
            return validation_error(form.errors)

        values = normalise(_strip_values(form.values()))
        instance = Repository(db.session, collection).create(values)
        current_app.logger.info("Created %s %s", collection.label.lower(), instance.id)
        if collection is STYLE_PROFILES and payload.get("is_default") is True:
            set_default_style_profile(db.session, instance)
            db.session.refresh(instance)
        return jsonify(instance.to_dict()), 201

    @login_required
    def update_view(entity_id: int):
        repository = Repository(db.session, collection)
        instance = repository.get(entity_id)
        if instance is None:
            return not_found(collection.label)

        payload = json_payload()
        form = form_class.from_payload(payload)
        present = form.present_fields(payload)
        if not present:
            return error_response("No valid fields to update")
        if not form.validate_partial(present):
            return validation_error(form.errors)

        values = normalise(_strip_values(form.values(present)))
        repository.update(instance, values)
        return jsonify(instance.to_dict())

    @login_required
    def delete_view(entity_id: int):
        repository = Repository(db.session, collection)
        instance = repository.get(entity_id)
        if instance is None:
            return not_found(collection.label)
        repository.delete(instance)
        current_app.logger.info("Deleted %s %s", collection.label.lower(), entity_id)
        return jsonify({"message": f"{collection.label} deleted successfully"})

    bp.add_url_rule(f"/{url}", f"list_{endpoint}", list_view, methods=["GET"])
    bp.add_url_rule(f"/{url}", f"create_{endpoint}", create_view, methods=["POST"])
    bp.add_url_rule(f"/{url}/<int:entity_id>", f"get_{endpoint}", detail_view, methods=["GET"])
    bp.add_url_rule(f"/{url}/<int:entity_id>", f"update_{endpoint}", update_view, methods=["PUT"])
    bp.add_url_rule(f"/{url}/<int:entity_id>", f"delete_{endpoint}", delete_view, methods=["DELETE"])


register_collection("scenes", SCENES, SceneForm)
register_collection("characters", CHARACTERS, CharacterForm)
register_collection("events", EVENTS, EventForm, _event_values)
register_collection("style-profiles", STYLE_PROFILES, StyleProfileForm)


@bp.route("/scenes/<int:scene_id>/duplicate", methods=["POST"])
@login_required
def duplicate(scene_id: int):
    scene = Repository(db.session, SCENES).get(scene_id)
    if scene is None:
        return not_found(SCENES.label)
    copy = duplicate_scene(db.session, scene)
    return jsonify(copy.to_dict()), 201


@bp.route("/style-profiles/<int:profile_id>/set-default", methods=["PUT"])
@login_required
def set_default(profile_id: int):
    profile = Repository(db.session, STYLE_PROFILES).get(profile_id)
    if profile is None:
        return not_found(STYLE_PROFILES.label)
    set_default_style_profile(db.session, profile)
    db.session.refresh(profile)
    return jsonify(profile.to_dict())
