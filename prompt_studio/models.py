from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from .extensions import db, login_manager


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def decode_id_list(raw: Any) -> List[int]:
    """Parse a JSON-encoded (or already decoded) id array, keeping only integer entries."""

    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        values = list(raw)
    else:
        try:
            values = json.loads(raw)
        except (TypeError, ValueError):
            return []
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, int) and not isinstance(value, bool)]


class AdminUser(UserMixin):
    """The single configured operator account."""

    def __init__(self, username: str, password_hash: str):
        self.id = username
        self.username = username
        self.password_hash = password_hash

    @classmethod
    def from_config(cls) -> "AdminUser":
        config = current_app.config
        password_hash = current_app.extensions.get("admin_password_hash")
        if password_hash is None:
            password_hash = config.get("ADMIN_PASSWORD_HASH") or generate_password_hash(
                config["ADMIN_PASSWORD"]
            )
            current_app.extensions["admin_password_hash"] = password_hash
        return cls(config["ADMIN_USERNAME"], password_hash)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> Dict[str, Any]:
        return {"username": self.username}

    def __repr__(self) -> str:  # pragma: no cover - repr for debugging
        return f"<AdminUser {self.username}>"


@login_manager.user_loader
def load_user(user_id: str) -> Optional[AdminUser]:
    admin = AdminUser.from_config()
    if user_id == admin.id:
        return admin
    return None


class Scene(db.Model):
    __tablename__ = "scenes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    tags = db.Column(db.String(500), nullable=False, default="")
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tags": self.tags or "",
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Scene {self.title}>"


class Character(db.Model):
    __tablename__ = "characters"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    appearance = db.Column(db.Text, nullable=False, default="")
    tags = db.Column(db.String(500), nullable=False, default="")
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "appearance": self.appearance or "",
            "tags": self.tags or "",
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Character {self.name}>"


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(100), nullable=False, default="action")
    tags = db.Column(db.String(200), nullable=False, default="")
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "type": self.type or "action",
            "tags": self.tags or "",
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Event {self.type}: {self.description[:30]}>"


STYLE_FIELDS = (
    "style_preset",
    "composition",
    "lighting",
    "mood",
    "camera",
    "post_processing",
)


class StyleProfile(db.Model):
    __tablename__ = "style_profiles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    style_preset = db.Column(db.String(500), nullable=False, default="")
    composition = db.Column(db.String(500), nullable=False, default="")
    lighting = db.Column(db.String(500), nullable=False, default="")
    mood = db.Column(db.String(500), nullable=False, default="")
    camera = db.Column(db.String(500), nullable=False, default="")
    post_processing = db.Column(db.String(500), nullable=False, default="")
    ai_style = db.Column(db.String(200), nullable=False, default="")
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "name": self.name}
        for field in STYLE_FIELDS:
            payload[field] = getattr(self, field) or ""
        payload.update(
            {
                "ai_style": self.ai_style or "",
                "is_default": bool(self.is_default),
                "created_at": _isoformat(self.created_at),
                "updated_at": _isoformat(self.updated_at),
            }
        )
        return payload

    def __repr__(self) -> str:  # pragma: no cover
        return f"<StyleProfile {self.name}{' (default)' if self.is_default else ''}>"


class Template(db.Model):
    __tablename__ = "templates"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=True)
    template_text = db.Column(db.Text, nullable=False)
    # Plain integer columns: deleted scenes and profiles leave dangling ids behind.
    scene_id = db.Column(db.Integer, nullable=True)
    character_ids = db.Column(db.Text, nullable=False, default="[]")
    event_ids = db.Column(db.Text, nullable=False, default="[]")
    ai_style = db.Column(db.String(200), nullable=False, default="")
    input_snapshot = db.Column(db.Text, nullable=True)
    style_profile_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    @property
    def character_id_list(self) -> List[int]:
        return decode_id_list(self.character_ids)

    @property
    def event_id_list(self) -> List[int]:
        return decode_id_list(self.event_ids)

    @property
    def snapshot(self) -> Dict[str, Any]:
        if not self.input_snapshot:
            return {}
        try:
            value = json.loads(self.input_snapshot)
        except (TypeError, ValueError):
            return {}
        return value if isinstance(value, dict) else {}

    def to_dict(self, scene: Optional[Scene] = None, *, include_scene_description: bool = False) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "title": self.title,
            "template_text": self.template_text,
            "scene_id": self.scene_id,
            "character_ids": self.character_id_list,
            "event_ids": self.event_id_list,
            "ai_style": self.ai_style or "",
            "input_snapshot": self.snapshot,
            "style_profile_id": self.style_profile_id,
            "created_at": _isoformat(self.created_at),
            "scene_title": scene.title if scene else None,
        }
        if include_scene_description:
            payload["scene_description"] = scene.description if scene else None
        return payload

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Template {self.title}>"


class Image(db.Model):
    __tablename__ = "images"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=True)
    url = db.Column(db.String(512), nullable=False)
    template_id = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "original_name": self.original_name,
            "url": self.url,
            "template_id": self.template_id,
            "is_active": bool(self.is_active),
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Image {self.filename}{' (active)' if self.is_active else ''}>"
