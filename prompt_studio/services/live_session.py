"""Per-browser live dashboard state kept in the signed session cookie."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from flask import current_app
from sqlalchemy.orm import Session

from ..models import StyleProfile, decode_id_list, utcnow
from .library import default_style_profile
from .prompt_builder import PROSE, PromptInputs, StyleSettings, render_prompt
from .template_generation import STYLE_KEYS, resolve_selection


SESSION_KEY = "live"
MAX_RECENT = 10


class LiveSessionError(RuntimeError):
    """Raised when a live-session action cannot be completed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def _optional_id(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@dataclass
class RecentPrompt:
    prompt: str
    action: str = ""
    scene_id: Optional[int] = None
    scene_name: str = ""
    character_ids: List[int] = field(default_factory=list)
    profile_id: Optional[int] = None
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: MutableMapping[str, Any]) -> "RecentPrompt":
        return cls(
            prompt=str(data.get("prompt") or ""),
            action=str(data.get("action") or ""),
            scene_id=_optional_id(data.get("scene_id")),
            scene_name=str(data.get("scene_name") or ""),
            character_ids=decode_id_list(data.get("character_ids")),
            profile_id=_optional_id(data.get("profile_id")),
            timestamp=str(data.get("timestamp") or ""),
        )


@dataclass
class LiveSessionState:
    active_profile_id: Optional[int] = None
    active_scene_id: Optional[int] = None
    active_character_ids: List[int] = field(default_factory=list)
    action_text: str = ""
    style_overrides: Dict[str, str] = field(default_factory=dict)
    recent_prompts: List[RecentPrompt] = field(default_factory=list)
    auto_copy: bool = True

    @classmethod
    def load(cls, store: MutableMapping[str, Any]) -> "LiveSessionState":
        data = store.get(SESSION_KEY) or {}
        overrides = data.get("style_overrides") or {}
        return cls(
            active_profile_id=_optional_id(data.get("active_profile_id")),
            active_scene_id=_optional_id(data.get("active_scene_id")),
            active_character_ids=decode_id_list(data.get("active_character_ids")),
            action_text=str(data.get("action_text") or ""),
            style_overrides={
                key: str(value) for key, value in overrides.items() if key in STYLE_KEYS and value
            },
            recent_prompts=[
                RecentPrompt.from_dict(entry)
                for entry in (data.get("recent_prompts") or [])[:MAX_RECENT]
                if isinstance(entry, dict)
            ],
            auto_copy=bool(data.get("auto_copy", True)),
        )

    def save(self, store: MutableMapping[str, Any]) -> None:
        store[SESSION_KEY] = asdict(self)

    def update(self, values: MutableMapping[str, Any]) -> None:
        """Apply any subset of the selection fields; absent keys are left alone."""

        overrides = values.get("style_overrides")
        if overrides is not None and not isinstance(overrides, Mapping):
            raise LiveSessionError("Must be an object of style fields.", field="style_overrides")
        character_ids = values.get("active_character_ids")
        if character_ids is not None and not isinstance(character_ids, (list, tuple)):
            raise LiveSessionError("Must be a list of character ids.", field="active_character_ids")

        if "active_profile_id" in values:
            self.active_profile_id = _optional_id(values["active_profile_id"])
        if "active_scene_id" in values:
            self.active_scene_id = _optional_id(values["active_scene_id"])
        if "active_character_ids" in values:
            self.active_character_ids = list(dict.fromkeys(decode_id_list(values["active_character_ids"])))
        if "action_text" in values:
            self.action_text = str(values["action_text"] or "")
        if "auto_copy" in values:
            self.auto_copy = bool(values["auto_copy"])
        if "style_overrides" in values:
            for key, value in (overrides or {}).items():
                if key not in STYLE_KEYS:
                    continue
                text = str(value or "").strip()
                if text:
                    self.style_overrides[key] = text
                else:
                    self.style_overrides.pop(key, None)

    def toggle_character(self, character_id: int) -> bool:
        if character_id in self.active_character_ids:
            self.active_character_ids.remove(character_id)
            return False
        self.active_character_ids.append(character_id)
        return True

    def clear_overrides(self) -> None:
        self.style_overrides = {}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def active_profile(session: Session, state: LiveSessionState) -> Optional[StyleProfile]:
    profile = session.get(StyleProfile, state.active_profile_id) if state.active_profile_id else None
    return profile or default_style_profile(session)


def assemble(session: Session, state: LiveSessionState):
    """Return ``(prompt, selection)`` for the current state, rendered as prose."""

    profile = active_profile(session, state)
    selection = resolve_selection(session, state.active_scene_id, state.active_character_ids, [])
    selection.profile = profile
    inputs = PromptInputs(
        scene=selection.scene,
        characters=selection.characters,
        style=StyleSettings.resolve(state.style_overrides, profile),
        action_text=state.action_text,
    )
    return render_prompt(inputs, output_style=PROSE), selection


def generate(session: Session, state: LiveSessionState) -> RecentPrompt:
    prompt, selection = assemble(session, state)
    if not prompt:
        raise LiveSessionError("Nothing to generate. Select a scene, characters or an action first.")

    entry = RecentPrompt(
        prompt=prompt,
        action=state.action_text,
        scene_id=selection.scene.id if selection.scene else None,
        scene_name=selection.scene.title if selection.scene else "",
        character_ids=[character.id for character in selection.characters],
        profile_id=selection.profile.id if selection.profile else None,
        timestamp=utcnow().isoformat(),
    )
    state.recent_prompts = [entry] + state.recent_prompts[: MAX_RECENT - 1]
    state.action_text = ""
    state.clear_overrides()
    current_app.logger.debug("Live prompt generated (%s recent entries)", len(state.recent_prompts))
    return entry


def remix(state: LiveSessionState, index: int) -> RecentPrompt:
    if index < 0 or index >= len(state.recent_prompts):
        raise LiveSessionError("Recent prompt not found")
    entry = state.recent_prompts[index]
    state.active_profile_id = entry.profile_id
    state.active_scene_id = entry.scene_id
    state.active_character_ids = list(entry.character_ids)
    state.action_text = ""
    state.clear_overrides()
    return entry
