"""Match free narration against known scenes, characters, events and styles.

Matching is case-insensitive and tolerant of dictation noise: a pattern
matches when it appears verbatim in the text or, for patterns of three or
more characters, when some substring of the text is within
``min(2, floor(0.3 * len(pattern)))`` edits of it. The tolerance admits
near-miss spellings ("Abbaox" for "Abbabox") at the cost of occasional false
positives on short names embedded in longer words.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..vocabulary import DEFAULT_VOCABULARY, StylePreset, StyleVocabulary

MIN_FUZZY_LENGTH = 3
MAX_EDIT_DISTANCE = 2
EDIT_RATIO = 0.3


@dataclass
class NarrativeMatch:
    matched_scene_id: Optional[int] = None
    matched_character_ids: List[int] = field(default_factory=list)
    matched_event_ids: List[int] = field(default_factory=list)
    matched_styles: Dict[str, str] = field(default_factory=dict)
    remaining_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matched_scene_id": self.matched_scene_id,
            "matched_character_ids": list(self.matched_character_ids),
            "matched_event_ids": list(self.matched_event_ids),
            "matched_styles": dict(self.matched_styles),
            "remaining_text": self.remaining_text,
        }


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def allowed_edits(pattern: str) -> int:
    if len(pattern) < MIN_FUZZY_LENGTH:
        return 0
    return min(MAX_EDIT_DISTANCE, int(len(pattern) * EDIT_RATIO))


def best_substring_distance(text: str, pattern: str, limit: Optional[int] = None) -> int:
    """Smallest edit distance between ``pattern`` and any substring of ``text``.

    With ``limit`` set, gives up once every cell of a row exceeds it and
    returns ``limit + 1``. Row minima never decrease, so no later row can
    get back under the limit.
    """

    # Row 0 is all zeros so a match may start anywhere in the text.
    previous = [0] * (len(text) + 1)
    for row, pattern_char in enumerate(pattern, start=1):
        current = [row] + [0] * len(text)
        for column, text_char in enumerate(text, start=1):
            cost = 0 if pattern_char == text_char else 1
            current[column] = min(
                previous[column] + 1,
                current[column - 1] + 1,
                previous[column - 1] + cost,
            )
        if limit is not None and min(current) > limit:
            return limit + 1
        previous = current
    return min(previous)


def _pieces(pattern: str, count: int) -> List[tuple]:
    """Split ``pattern`` into ``count`` contiguous pieces as ``(offset, piece)`` pairs."""

    size, extra = divmod(len(pattern), count)
    pieces = []
    offset = 0
    for index in range(count):
        length = size + (1 if index < extra else 0)
        pieces.append((offset, pattern[offset:offset + length]))
        offset += length
    return pieces


def candidate_windows(text: str, pattern: str, budget: int) -> List[tuple]:
    """Slices of ``text`` that could hold ``pattern`` within ``budget`` edits.

    Any alignment with at most ``budget`` edits leaves one of ``budget + 1``
    pieces of the pattern untouched, so a match must sit around an exact
    occurrence of some piece.
    """

    windows = set()
    for offset, piece in _pieces(pattern, budget + 1):
        position = text.find(piece)
        while position != -1:
            start = max(0, position - offset - budget)
            end = min(len(text), position - offset + len(pattern) + budget)
            windows.add((start, end))
            position = text.find(piece, position + 1)
    return sorted(windows)


def fuzzy_contains(text: str, pattern: str) -> bool:
    lowered_text = text.lower()
    lowered_pattern = pattern.lower().strip()
    if not lowered_pattern:
        return False
    if lowered_pattern in lowered_text:
        return True

    budget = allowed_edits(lowered_pattern)
    if budget == 0 or len(lowered_pattern) - budget > len(lowered_text):
        return False
    for start, end in candidate_windows(lowered_text, lowered_pattern, budget):
        if best_substring_distance(lowered_text[start:end], lowered_pattern, budget) <= budget:
            return True
    return False


def _sorted_by_length(items: Iterable[Any], name: str) -> List[Any]:
    candidates = [item for item in items if item is not None and isinstance(_field(item, name), str)]
    # sorted() is stable, so equally long names keep their input order.
    return sorted(candidates, key=lambda item: len(_field(item, name)), reverse=True)


def _match_option(text: str, options: Sequence[str]) -> Optional[str]:
    candidates = sorted((option for option in options if isinstance(option, str)), key=len, reverse=True)
    for option in candidates:
        if fuzzy_contains(text, option):
            return option
    return None


def _match_preset(text: str, presets: Sequence[StylePreset]) -> Optional[str]:
    lowered = text.lower()
    candidates = sorted(
        (preset for preset in presets if preset and preset.label and preset.value),
        key=lambda preset: len(preset.label),
        reverse=True,
    )
    for preset in candidates:
        if fuzzy_contains(text, preset.label) or preset.value.lower() in lowered:
            return preset.value
    return None


def parse_narrative(
    text: Optional[str],
    scenes: Sequence[Any] = (),
    characters: Sequence[Any] = (),
    events: Sequence[Any] = (),
    vocabulary: StyleVocabulary = DEFAULT_VOCABULARY,
) -> NarrativeMatch:
    """Scan ``text`` for known entity names and style vocabulary.

    ``scenes``, ``characters`` and ``events`` may be model instances or
    mappings; they need ``id`` plus ``title``, ``name`` or ``description``
    respectively. Only one scene is attached per excerpt, while characters
    and events accumulate. Each style dimension takes its longest matching
    option.
    """

    if not text:
        return NarrativeMatch()

    result = NarrativeMatch(remaining_text=text)

    for scene in _sorted_by_length(scenes, "title"):
        if fuzzy_contains(text, _field(scene, "title")):
            result.matched_scene_id = _field(scene, "id")
            break

    for character in _sorted_by_length(characters, "name"):
        character_id = _field(character, "id")
        if character_id not in result.matched_character_ids and fuzzy_contains(text, _field(character, "name")):
            result.matched_character_ids.append(character_id)

    for event in _sorted_by_length(events, "description"):
        event_id = _field(event, "id")
        if event_id not in result.matched_event_ids and fuzzy_contains(text, _field(event, "description")):
            result.matched_event_ids.append(event_id)

    for key, options in vocabulary.dimensions():
        match = _match_option(text, options)
        if match is not None:
            result.matched_styles[key] = match

    preset = _match_preset(text, vocabulary.presets)
    if preset is not None:
        result.matched_styles["style_preset"] = preset

    return result
