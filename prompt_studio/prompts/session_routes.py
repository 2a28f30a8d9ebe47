"""Endpoints driving the live dashboard's cookie-backed session state."""
from __future__ import annotations

from dataclasses import asdict

from flask import jsonify, session
from flask_login import login_required

from ..api import error_response, json_payload, validation_error
from ..extensions import db
from ..services.live_session import LiveSessionError, LiveSessionState, active_profile, assemble, generate, remix
from . import bp


def _state_response(state: LiveSessionState, **extra):
    prompt, _selection = assemble(db.session, state)
    profile = active_profile(db.session, state)
    payload = state.to_dict()
    payload.update(
        {
            "prompt": prompt,
            "resolved_profile_id": profile.id if profile else None,
        }
    )
    payload.update(extra)
    return jsonify(payload)


@bp.route("/session", methods=["GET"])
@login_required
def get_session():
    return _state_response(LiveSessionState.load(session))


@bp.route("/session", methods=["PUT"])
@login_required
def update_session():
    state = LiveSessionState.load(session)
    try:
        state.update(json_payload())
    except LiveSessionError as exc:
        return validation_error({exc.field: [str(exc)]})
    state.save(session)
    return _state_response(state)


@bp.route("/session/characters/<int:character_id>/toggle", methods=["POST"])
@login_required
def toggle_character(character_id: int):
    state = LiveSessionState.load(session)
    selected = state.toggle_character(character_id)
    state.save(session)
    return _state_response(state, selected=selected)


@bp.route("/session/overrides", methods=["DELETE"])
@login_required
def clear_overrides():
    state = LiveSessionState.load(session)
    state.clear_overrides()
    state.save(session)
    return _state_response(state)


@bp.route("/session/generate", methods=["POST"])
@login_required
def generate_live_prompt():
    state = LiveSessionState.load(session)
    try:
        entry = generate(db.session, state)
    except LiveSessionError as exc:
        return error_response(str(exc))
    state.save(session)
    return jsonify({"prompt": entry.prompt, "entry": asdict(entry), "recent_prompts": state.to_dict()["recent_prompts"]})


@bp.route("/session/recent/<int:index>/remix", methods=["POST"])
@login_required
def remix_recent(index: int):
    state = LiveSessionState.load(session)
    try:
        remix(state, index)
    except LiveSessionError as exc:
        return error_response(str(exc), 404)
    state.save(session)
    return _state_response(state)
