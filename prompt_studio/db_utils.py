"""Database helper utilities for ensuring schema consistency."""
from __future__ import annotations

from typing import Dict, Iterable, Set

from flask import current_app
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db

# Columns introduced after the first release of the templates table.
TEMPLATE_COLUMN_MIGRATIONS: Dict[str, str] = {
    "event_ids": "ALTER TABLE templates ADD COLUMN event_ids TEXT NOT NULL DEFAULT '[]'",
    "input_snapshot": "ALTER TABLE templates ADD COLUMN input_snapshot TEXT",
    "style_profile_id": "ALTER TABLE templates ADD COLUMN style_profile_id INTEGER",
}


def _get_column_names(table_name: str) -> Set[str]:
    inspector = inspect(db.engine)
    return {column["name"] for column in inspector.get_columns(table_name)}


def ensure_database_schema() -> None:
    """Create missing tables and add template columns that older databases lack.

    Runs on every start-up, so each step is a no-op once applied.
    """

    try:
        inspector = inspect(db.engine)
        table_names: Iterable[str] = inspector.get_table_names()

        from .models import Character, Event, Image, Scene, StyleProfile, Template

        required_tables = {
            "scenes": Scene.__table__,
            "characters": Character.__table__,
            "events": Event.__table__,
            "style_profiles": StyleProfile.__table__,
            "templates": Template.__table__,
            "images": Image.__table__,
        }

        for table_name, table in required_tables.items():
            if table_name not in table_names:
                table.create(bind=db.engine)

        template_columns = _get_column_names("templates")
        for column, statement in TEMPLATE_COLUMN_MIGRATIONS.items():
            if column in template_columns:
                continue
            current_app.logger.info("Adding templates.%s column", column)
            with db.engine.begin() as connection:
                connection.execute(text(statement))
    except SQLAlchemyError:
        # Re-raise so the application does not start in a partially configured state.
        current_app.logger.exception("Database schema check failed")
        raise
