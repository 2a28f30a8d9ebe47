"""Start-up seed data for the event library and the sample style profiles."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Event, StyleProfile


SAMPLE_EVENTS: List[Dict[str, str]] = [
    {"description": "Dynamic rooftop leap with cape billowing in the wind", "type": "action", "tags": "parkour,cinematic,heroic"},
    {"description": "Hero braces for impact while energy shield crackles", "type": "combat", "tags": "defense,tech,glow"},
    {"description": "Sorcerer unleashes arcane blast with swirling runes", "type": "magic", "tags": "spellcasting,arcane,light burst"},
    {"description": "Duelists collide in mid-air sword clash, sparks flying", "type": "combat", "tags": "swordplay,mid-air,high-drama"},
    {"description": "Investigator kicks open neon-soaked alley door", "type": "action", "tags": "detective,noir,neon"},
    {"description": "Archer fires triple-shot volley from gargoyle perch", "type": "precision", "tags": "ranged,stealth,gothic"},
    {"description": "Team charges forward in split-panel battle montage", "type": "team", "tags": "ensemble,splash-page,momentum"},
    {"description": "Rogue slides under laser grid with twin daggers ready", "type": "stealth", "tags": "acrobatics,heist,tech"},
    {"description": "Battle mage slams staff to ground, shockwave radiates", "type": "magic", "tags": "shockwave,elemental,earth"},
    {"description": "Pilot vaults into mech cockpit as engines ignite", "type": "tech", "tags": "mecha,launch,hangar"},
    {"description": "Gunslinger spins into cover, muzzle flash lighting dust", "type": "combat", "tags": "western,gunfight,dramatic lighting"},
    {"description": "Heroine performs mid-spin roundhouse surrounded by speed lines", "type": "martial arts", "tags": "kinetic,impact,comic fx"},
    {"description": "Beast tamer whistles as spectral companions materialize", "type": "summoning", "tags": "mystical,companions,ethereal"},
    {"description": "Scientist detonates prototype gadget, rainbow plasma erupts", "type": "tech", "tags": "experiment,chaos,energy"},
    {"description": "Adventurers brace against sandstorm while map glows", "type": "exploration", "tags": "desert,relic-hunt,mystery"},
]


SAMPLE_STYLE_PROFILES: List[Dict[str, object]] = [
    {
        "name": "Dark Fantasy",
        "style_preset": "dark fantasy comic art, heavy blacks",
        "composition": "wide establishing shot",
        "lighting": "cold moonlight with mist",
        "mood": "grim resolve",
        "camera": "24mm wide",
        "post_processing": "high-contrast grading",
        "ai_style": "illustration",
        "is_default": True,
    },
    {
        "name": "Cinematic Heroic",
        "style_preset": "cinematic film still, 35mm grain",
        "composition": "rule-of-thirds framing",
        "lighting": "golden hour warm backlight",
        "mood": "triumphant",
        "camera": "50mm portrait",
        "post_processing": "teal-orange color grade",
        "ai_style": "photorealistic",
        "is_default": False,
    },
    {
        "name": "Comic Book Action",
        "style_preset": "silver age comic, bold ink lines",
        "composition": "hero landing splash page",
        "lighting": "strobe burst, rim lighting",
        "mood": "ferocious blood-rush",
        "camera": "low angle dynamic",
        "post_processing": "halftone dots, saturated primaries",
        "ai_style": "comic book",
        "is_default": False,
    },
    {
        "name": "Noir Mystery",
        "style_preset": "noir graphic novel, monochrome wash",
        "composition": "dutch angle",
        "lighting": "sodium vapor street lamp",
        "mood": "paranoid dread",
        "camera": "canted close-up",
        "post_processing": "film noir vignette",
        "ai_style": "noir",
        "is_default": False,
    },
    {
        "name": "Whimsical Adventure",
        "style_preset": "saturday morning cartoon, soft cel-shading",
        "composition": "panoramic vista",
        "lighting": "bioluminescent glow",
        "mood": "whimsical mischief",
        "camera": "bird-eye sweeping",
        "post_processing": "pastel bloom",
        "ai_style": "cartoon",
        "is_default": False,
    },
]


@dataclass
class SeedResult:
    inserted: int
    skipped: int


def ensure_event_library_seeded(session: Session) -> SeedResult:
    """Insert the sample event library when the events table is empty."""

    existing = session.query(Event).count()
    if existing:
        current_app.logger.info("Event library already populated (%s events). Skipping seed.", existing)
        return SeedResult(inserted=0, skipped=existing)

    try:
        for entry in SAMPLE_EVENTS:
            session.add(Event(**entry))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception("Failed to seed the event library")
        raise

    current_app.logger.info("Seeded %s library events.", len(SAMPLE_EVENTS))
    return SeedResult(inserted=len(SAMPLE_EVENTS), skipped=0)


def ensure_style_profiles_seeded(session: Session) -> SeedResult:
    """Insert any sample style profile whose name is not taken yet."""

    existing_names = {
        (name or "").strip()
        for (name,) in session.query(StyleProfile.name).all()
        if (name or "").strip()
    }
    missing = [profile for profile in SAMPLE_STYLE_PROFILES if profile["name"] not in existing_names]
    if not missing:
        current_app.logger.info("Style profiles already populated. Skipping seed.")
        return SeedResult(inserted=0, skipped=len(existing_names))

    has_default = session.query(StyleProfile).filter(StyleProfile.is_default.is_(True)).count() > 0
    try:
        for entry in missing:
            values = dict(entry)
            if has_default:
                values["is_default"] = False
            session.add(StyleProfile(**values))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception("Failed to seed style profiles")
        raise

    current_app.logger.info("Seeded %s style profiles.", len(missing))
    return SeedResult(inserted=len(missing), skipped=len(existing_names))
