"""Persistence helpers for the scene, character, event and style libraries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from flask import current_app
from sqlalchemy import case, or_, update
from sqlalchemy.orm import Session

from ..models import Character, Event, Image, Scene, StyleProfile, Template, utcnow


MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class Collection:
    """How one entity type is searched, ordered and paged."""

    model: Type[Any]
    label: str
    search_fields: Sequence[str]
    ordering: Sequence[Any]
    default_limit: int = 50


SCENES = Collection(
    model=Scene,
    label="Scene",
    search_fields=("title", "description", "tags"),
    ordering=(Scene.updated_at.desc(), Scene.id.desc()),
)
CHARACTERS = Collection(
    model=Character,
    label="Character",
    search_fields=("name", "description", "tags"),
    ordering=(Character.updated_at.desc(), Character.id.desc()),
)
EVENTS = Collection(
    model=Event,
    label="Event",
    search_fields=("description", "tags"),
    ordering=(Event.created_at.desc(), Event.id.desc()),
    default_limit=100,
)
STYLE_PROFILES = Collection(
    model=StyleProfile,
    label="Style profile",
    search_fields=("name", "ai_style", "style_preset"),
    ordering=(StyleProfile.is_default.desc(), StyleProfile.updated_at.desc(), StyleProfile.id.desc()),
)
TEMPLATES = Collection(
    model=Template,
    label="Template",
    search_fields=("title", "template_text"),
    ordering=(Template.created_at.desc(), Template.id.desc()),
    default_limit=20,
)
IMAGES = Collection(
    model=Image,
    label="Image",
    search_fields=("original_name",),
    ordering=(Image.created_at.desc(), Image.id.desc()),
    default_limit=20,
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def clamp_page(limit: Optional[int], offset: Optional[int], default_limit: int) -> tuple[int, int]:
    if limit is None:
        limit = default_limit
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = max(0, int(offset or 0))
    return limit, offset


class Repository:
    """List/get/create/update/delete for one collection on an explicit session."""

    def __init__(self, session: Session, collection: Collection):
        self.session = session
        self.collection = collection

    @property
    def model(self) -> Type[Any]:
        return self.collection.model

    def query(self, search: Optional[str] = None):
        query = self.session.query(self.model)
        needle = (search or "").strip()
        if needle:
            pattern = f"%{_escape_like(needle)}%"
            clauses = [
                getattr(self.model, name).ilike(pattern, escape="\\")
                for name in self.collection.search_fields
            ]
            query = query.filter(or_(*clauses))
        return query.order_by(*self.collection.ordering)

    def list(self, search: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = 0) -> List[Any]:
        limit, offset = clamp_page(limit, offset, self.collection.default_limit)
        return self.query(search).limit(limit).offset(offset).all()

    def get(self, entity_id: int) -> Optional[Any]:
        return self.session.get(self.model, entity_id)

    def get_many(self, ids: Iterable[int]) -> List[Any]:
        """Fetch rows for ``ids`` in input order, dropping ids that no longer exist."""

        wanted = [entity_id for entity_id in ids if isinstance(entity_id, int)]
        if not wanted:
            return []
        rows = self.session.query(self.model).filter(self.model.id.in_(set(wanted))).all()
        by_id = {row.id: row for row in rows}
        ordered = []
        seen = set()
        for entity_id in wanted:
            row = by_id.get(entity_id)
            if row is not None and entity_id not in seen:
                ordered.append(row)
                seen.add(entity_id)
        return ordered

    def create(self, values: Mapping[str, Any], *, commit: bool = True) -> Any:
        instance = self.model(**dict(values))
        self.session.add(instance)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        current_app.logger.debug("Created %s %s", self.collection.label, instance.id)
        return instance

    def update(self, instance: Any, values: Mapping[str, Any]) -> Any:
        for name, value in values.items():
            setattr(instance, name, value)
        if hasattr(instance, "updated_at"):
            instance.updated_at = utcnow()
        self.session.commit()
        return instance

    def delete(self, instance: Any) -> None:
        entity_id = instance.id
        self.session.delete(instance)
        self.session.commit()
        current_app.logger.debug("Deleted %s %s", self.collection.label, entity_id)


def duplicate_scene(session: Session, scene: Scene) -> Scene:
    title = f"{scene.title} (Copy)"[:200]
    return Repository(session, SCENES).create(
        {"title": title, "description": scene.description, "tags": scene.tags or ""}
    )


def set_default_style_profile(session: Session, profile: StyleProfile) -> StyleProfile:
    """Make ``profile`` the only default with a single conditional UPDATE."""

    session.execute(
        update(StyleProfile)
        .where(or_(StyleProfile.is_default.is_(True), StyleProfile.id == profile.id))
        .values(
            is_default=case((StyleProfile.id == profile.id, True), else_=False),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    session.commit()
    current_app.logger.info("Style profile %s is now the default", profile.id)
    return profile


def default_style_profile(session: Session) -> Optional[StyleProfile]:
    profile = session.query(StyleProfile).filter(StyleProfile.is_default.is_(True)).first()
    if profile is None:
        profile = session.query(StyleProfile).order_by(*STYLE_PROFILES.ordering).first()
    return profile


def scenes_by_id(session: Session, scene_ids: Iterable[Optional[int]]) -> Dict[int, Scene]:
    ids = {scene_id for scene_id in scene_ids if scene_id is not None}
    if not ids:
        return {}
    return {scene.id: scene for scene in session.query(Scene).filter(Scene.id.in_(ids)).all()}
