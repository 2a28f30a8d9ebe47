from __future__ import annotations

from dataclasses import asdict

from flask import current_app, jsonify
from flask_login import login_required

from ..api import error_response, json_payload, not_found, page_args, validation_error
from ..extensions import db
from ..models import Character, Event, Scene
from ..services.library import TEMPLATES, Repository, scenes_by_id
from ..services.narrative import parse_narrative
from ..services.overlay import broadcast_template_generated
from ..services.prompt_builder import render_prompt
from ..services.template_generation import (
    STYLE_KEYS,
    TemplateGenerationError,
    TemplateRequest,
    build_prompt_inputs,
    generate_template,
    resolve_selection,
)
from ..vocabulary import DEFAULT_VOCABULARY
from . import bp
from .forms import NarrativeForm, PreviewForm, TemplateForm


def _template_request(form: TemplateForm) -> TemplateRequest:
    return TemplateRequest(
        title=(form.title.data or "").strip(),
        scene_id=form.scene_id.data,
        character_ids=list(form.character_ids.data),
        event_ids=list(form.event_ids.data),
        custom_events=list(form.custom_events.data),
        modifiers=list(form.modifiers.data),
        custom_prompt=(form.custom_prompt.data or "").strip(),
        style_profile_id=form.style_profile_id.data,
        style={key: (form[key].data or "").strip() for key in STYLE_KEYS},
    )


@bp.route("/templates", methods=["GET"])
@login_required
def list_templates():
    search, limit, offset = page_args()
    templates = Repository(db.session, TEMPLATES).list(search, limit, offset)
    scenes = scenes_by_id(db.session, (template.scene_id for template in templates))
    return jsonify([template.to_dict(scenes.get(template.scene_id)) for template in templates])


@bp.route("/templates/<int:template_id>", methods=["GET"])
@login_required
def get_template(template_id: int):
    template = Repository(db.session, TEMPLATES).get(template_id)
    if template is None:
        return not_found(TEMPLATES.label)
    scene = db.session.get(Scene, template.scene_id) if template.scene_id else None
    return jsonify(template.to_dict(scene, include_scene_description=True))


@bp.route("/templates/generate", methods=["POST"])
@login_required
def generate():
    form = TemplateForm.from_payload(json_payload())
    if not form.validate():
        return validation_error(form.errors)

    try:
        result = generate_template(db.session, _template_request(form))
    except TemplateGenerationError as exc:
        return error_response(str(exc))

    payload = result.to_dict()
    broadcast_template_generated(payload)
    return jsonify(payload), 201


@bp.route("/templates/<int:template_id>", methods=["DELETE"])
@login_required
def delete_template(template_id: int):
    repository = Repository(db.session, TEMPLATES)
    template = repository.get(template_id)
    if template is None:
        return not_found(TEMPLATES.label)
    repository.delete(template)
    current_app.logger.info("Deleted template %s", template_id)
    return jsonify({"message": "Template deleted successfully"})


@bp.route("/prompts/preview", methods=["POST"])
@login_required
def preview():
    form = PreviewForm.from_payload(json_payload())
    if not form.validate():
        return validation_error(form.errors)

    request_data = _template_request(form)
    selection = resolve_selection(
        db.session,
        request_data.scene_id,
        request_data.character_ids,
        request_data.event_ids,
        request_data.style_profile_id,
    )
    inputs = build_prompt_inputs(request_data, selection)
    inputs.action_text = (form.action_text.data or "").strip()
    output_style = form.output_style.data
    return jsonify(
        {
            "prompt": render_prompt(inputs, output_style=output_style),
            "style": output_style,
            "resolved_style": asdict(inputs.style),
        }
    )


@bp.route("/prompts/parse", methods=["POST"])
@login_required
def parse():
    form = NarrativeForm.from_payload(json_payload())
    if not form.validate():
        return validation_error(form.errors)

    result = parse_narrative(
        form.text.data,
        scenes=db.session.query(Scene).order_by(Scene.id).all(),
        characters=db.session.query(Character).order_by(Character.id).all(),
        events=db.session.query(Event).order_by(Event.id).all(),
        vocabulary=DEFAULT_VOCABULARY,
    )
    return jsonify(result.to_dict())


@bp.route("/prompts/vocabulary", methods=["GET"])
@login_required
def vocabulary():
    return jsonify(DEFAULT_VOCABULARY.to_dict())
