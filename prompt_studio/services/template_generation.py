from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.orm import Session

from ..models import Character, Event, Scene, StyleProfile, Template, utcnow
from .library import CHARACTERS, EVENTS, Repository
from .prompt_builder import SECTIONS, PromptInputs, StyleSettings, render_prompt


STYLE_KEYS = ("style_preset", "composition", "lighting", "mood", "camera", "post_processing", "ai_style")


class TemplateGenerationError(RuntimeError):
    """Raised when a template request renders to an empty prompt."""


@dataclass
class TemplateRequest:
    title: str = ""
    scene_id: Optional[int] = None
    character_ids: List[int] = field(default_factory=list)
    event_ids: List[int] = field(default_factory=list)
    custom_events: List[str] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    custom_prompt: str = ""
    style_profile_id: Optional[int] = None
    style: Dict[str, str] = field(default_factory=dict)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "scene_id": self.scene_id,
            "character_ids": list(self.character_ids),
            "event_ids": list(self.event_ids),
            "custom_events": list(self.custom_events),
            "modifiers": list(self.modifiers),
            "custom_prompt": self.custom_prompt,
            "style_profile_id": self.style_profile_id,
            **{key: self.style.get(key, "") for key in STYLE_KEYS},
        }


@dataclass
class ResolvedSelection:
    scene: Optional[Scene]
    characters: List[Character]
    events: List[Event]
    profile: Optional[StyleProfile]


@dataclass
class GeneratedTemplate:
    template: Template
    selection: ResolvedSelection
    request: TemplateRequest

    def to_dict(self) -> Dict[str, Any]:
        template = self.template
        return {
            "id": template.id,
            "title": template.title,
            "template_text": template.template_text,
            "scene": self.selection.scene.to_dict() if self.selection.scene else None,
            "characters": [character.to_dict() for character in self.selection.characters],
            "events": [event.to_dict() for event in self.selection.events],
            "custom_events": list(self.request.custom_events),
            "ai_style": template.ai_style,
            "style_profile_id": template.style_profile_id,
            "input_snapshot": template.snapshot,
            "created_at": template.created_at.isoformat() if template.created_at else None,
        }


def resolve_selection(
    session: Session,
    scene_id: Optional[int],
    character_ids: List[int],
    event_ids: List[int],
    style_profile_id: Optional[int] = None,
) -> ResolvedSelection:
    """Look up the referenced rows, silently dropping ids that no longer exist."""

    scene = session.get(Scene, scene_id) if scene_id else None
    characters = Repository(session, CHARACTERS).get_many(character_ids)
    events = Repository(session, EVENTS).get_many(event_ids)
    profile = session.get(StyleProfile, style_profile_id) if style_profile_id else None
    return ResolvedSelection(scene=scene, characters=characters, events=events, profile=profile)


def build_prompt_inputs(request: TemplateRequest, selection: ResolvedSelection) -> PromptInputs:
    return PromptInputs(
        scene=selection.scene,
        characters=selection.characters,
        events=selection.events,
        custom_events=request.custom_events,
        style=StyleSettings.resolve(request.style, selection.profile),
        modifiers=request.modifiers,
        custom_prompt=request.custom_prompt,
    )


def _default_title(now: datetime) -> str:
    return f"Template {now.isoformat()}"


def generate_template(session: Session, request: TemplateRequest) -> GeneratedTemplate:
    """Render the sectioned prompt for ``request`` and store it with its input snapshot."""

    selection = resolve_selection(
        session,
        request.scene_id,
        request.character_ids,
        request.event_ids,
        request.style_profile_id,
    )
    inputs = build_prompt_inputs(request, selection)
    text = render_prompt(inputs, output_style=SECTIONS)
    if not text:
        raise TemplateGenerationError("Generated template is empty. Please provide some content.")

    now = utcnow()
    template = Template(
        title=(request.title or "").strip() or _default_title(now),
        template_text=text,
        scene_id=request.scene_id,
        character_ids=json.dumps(list(request.character_ids)),
        event_ids=json.dumps(list(request.event_ids)),
        ai_style=inputs.style.ai_style,
        input_snapshot=json.dumps(request.snapshot()),
        style_profile_id=request.style_profile_id,
        created_at=now,
    )
    session.add(template)
    session.commit()
    current_app.logger.info(
        "Generated template %s (%s characters, %s events)",
        template.id,
        len(selection.characters),
        len(selection.events) + len(request.custom_events),
    )
    return GeneratedTemplate(template=template, selection=selection, request=request)
