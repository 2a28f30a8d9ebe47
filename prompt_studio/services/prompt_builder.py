"""Prompt assembly shared by template generation and the live session.

Both flows resolve the same scene, characters, events and style values and
then hand them to :func:`render_prompt`. The ``sections`` style produces the
labelled block persisted with a template; the ``prose`` style produces the
flowing sentence list the live dashboard copies to the clipboard.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Iterable, List, Mapping, Optional, Sequence

SECTIONS = "sections"
PROSE = "prose"
OUTPUT_STYLES = (SECTIONS, PROSE)

# Label order for the style block of a generated template.
STYLE_LABELS = (
    ("composition", "Composition"),
    ("lighting", "Lighting"),
    ("mood", "Mood"),
    ("camera", "Camera"),
    ("post_processing", "Post-Processing"),
    ("style_preset", "Style Preset"),
    ("ai_style", "AI Style"),
)


def _value(item: Any, name: str) -> str:
    if item is None:
        return ""
    if isinstance(item, Mapping):
        raw = item.get(name)
    else:
        raw = getattr(item, name, None)
    if raw is None:
        return ""
    return str(raw).strip()


def _clean_strings(values: Optional[Iterable[Any]]) -> List[str]:
    if not values:
        return []
    cleaned = []
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned


@dataclass
class StyleSettings:
    style_preset: str = ""
    composition: str = ""
    lighting: str = ""
    mood: str = ""
    camera: str = ""
    post_processing: str = ""
    ai_style: str = ""

    @classmethod
    def resolve(cls, overrides: Optional[Mapping[str, Any]] = None, profile: Any = None) -> "StyleSettings":
        """Merge per-shot overrides over a style profile's defaults.

        A blank override falls through to the profile; a blank profile value
        leaves the dimension empty.
        """

        overrides = overrides or {}
        values = {}
        for style_field in fields(cls):
            override = overrides.get(style_field.name)
            override_text = str(override).strip() if override is not None else ""
            values[style_field.name] = override_text or _value(profile, style_field.name)
        return cls(**values)

    def is_empty(self) -> bool:
        return not any(getattr(self, style_field.name) for style_field in fields(self))


@dataclass
class PromptInputs:
    scene: Any = None
    characters: Sequence[Any] = ()
    events: Sequence[Any] = ()
    custom_events: Sequence[str] = ()
    style: StyleSettings = field(default_factory=StyleSettings)
    modifiers: Sequence[str] = ()
    custom_prompt: str = ""
    action_text: str = ""


def render_prompt(inputs: PromptInputs, *, output_style: str = SECTIONS) -> str:
    """Render ``inputs`` as a single prompt string.

    Identical inputs always render identical text. An empty string is
    returned when nothing is selected.
    """

    if output_style == SECTIONS:
        return _render_sections(inputs)
    if output_style == PROSE:
        return _render_prose(inputs)
    raise ValueError(f"Unknown output style: {output_style!r}")


def _event_lines(inputs: PromptInputs) -> List[str]:
    lines = [_value(event, "description") for event in inputs.events]
    lines.extend(_clean_strings(inputs.custom_events))
    action = (inputs.action_text or "").strip()
    if action:
        lines.append(action)
    return [line for line in lines if line]


def _render_sections(inputs: PromptInputs) -> str:
    blocks: List[str] = []

    custom_prompt = (inputs.custom_prompt or "").strip()
    if custom_prompt:
        blocks.append(custom_prompt)

    modifiers = _clean_strings(inputs.modifiers)
    if modifiers:
        blocks.append(", ".join(modifiers))

    if inputs.scene is not None:
        scene_lines = [f"Scene: {_value(inputs.scene, 'title')}"]
        description = _value(inputs.scene, "description")
        if description:
            scene_lines.append(description)
        blocks.append("\n".join(scene_lines))

    if inputs.characters:
        lines = ["Characters:"]
        for character in inputs.characters:
            line = f"- {_value(character, 'name')}: {_value(character, 'description')}"
            appearance = _value(character, "appearance")
            if appearance:
                line += f" (Appearance: {appearance})"
            lines.append(line)
        blocks.append("\n".join(lines))

    events = _event_lines(inputs)
    if events:
        lines = ["Events/Actions:"]
        lines.extend(f"{index}. {event}" for index, event in enumerate(events, start=1))
        blocks.append("\n".join(lines))

    style_lines = [
        f"{label}: {getattr(inputs.style, name)}"
        for name, label in STYLE_LABELS
        if getattr(inputs.style, name)
    ]
    if style_lines:
        blocks.append("\n".join(style_lines))

    return "\n\n".join(blocks).strip()


def _render_prose(inputs: PromptInputs) -> str:
    style = inputs.style
    parts: List[str] = []

    custom_prompt = (inputs.custom_prompt or "").strip()
    if custom_prompt:
        parts.append(custom_prompt)

    modifiers = _clean_strings(inputs.modifiers)
    if modifiers:
        parts.append(", ".join(modifiers))

    parts.extend(
        value
        for value in (style.style_preset, style.composition, style.lighting, style.mood)
        if value
    )

    if inputs.scene is not None:
        setting = _value(inputs.scene, "description") or _value(inputs.scene, "title")
        if setting:
            parts.append(f"Setting: {setting}")

    if inputs.characters:
        descriptions = [
            f"{_value(character, 'name')}, "
            f"{_value(character, 'appearance') or _value(character, 'description')}"
            for character in inputs.characters
        ]
        parts.append("; ".join(descriptions))

    parts.extend(_event_lines(inputs))

    if style.camera:
        parts.append(f"Camera: {style.camera}")
    if style.post_processing:
        parts.append(style.post_processing)
    if style.ai_style:
        parts.append(f"AI style: {style.ai_style}")

    parts = [part for part in parts if part]
    if not parts:
        return ""
    return (". ".join(parts) + ".").replace("..", ".")
