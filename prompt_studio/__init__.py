from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, request
from flask_limiter.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .config import Config
from .db_utils import ensure_database_schema
from .extensions import csrf, db, limiter, login_manager, migrate, socketio
from .seeds import ensure_event_library_seeded, ensure_style_profiles_seeded


BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

LOGIN_RATE_LIMIT_MESSAGE = "Too many login attempts, please try again later"


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder=str(BASE_DIR / "static"),
        static_url_path="/static",
    )
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))
    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)

    register_extensions(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        ensure_database_schema()
        if app.config.get("SEED_ON_STARTUP"):
            seed_database()

    return app


def register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    # Socket handlers registered before the first init_app are replayed onto every new server.
    from .overlay import events  # noqa: F401

    origins = [origin.strip() for origin in (app.config.get("CORS_ORIGIN") or "").split(",") if origin.strip()]
    socketio.init_app(app, cors_allowed_origins=origins or None)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401


def register_blueprints(app: Flask) -> None:
    from .auth import bp as auth_bp
    from .library import bp as library_bp
    from .main import bp as main_bp
    from .overlay import bp as overlay_bp
    from .prompts import bp as prompts_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(library_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(overlay_bp)
    app.register_blueprint(prompts_bp)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_error):
        megabytes = current_app.config["IMAGE_MAX_BYTES"] // (1024 * 1024)
        return jsonify({"error": f"File too large. Maximum size is {megabytes}MB."}), 400

    @app.errorhandler(RateLimitExceeded)
    def rate_limited(_error):
        current_app.logger.warning("Rate limit hit for %s on %s", request.remote_addr, request.path)
        return jsonify({"error": LOGIN_RATE_LIMIT_MESSAGE}), 429

    @app.errorhandler(SQLAlchemyError)
    def storage_error(_error):
        db.session.rollback()
        current_app.logger.exception("Database error while handling %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        if error.code == 404:
            message = "Not found"
        else:
            message = error.description or error.name
        return jsonify({"error": message}), error.code

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        current_app.logger.exception("Unhandled error while handling %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def seed_database() -> None:
    ensure_event_library_seeded(db.session)
    ensure_style_profiles_seeded(db.session)


def register_commands(app: Flask) -> None:
    @app.cli.command("seed")
    def seed_command():
        """Seed the event library and the sample style profiles."""
        events = ensure_event_library_seeded(db.session)
        profiles = ensure_style_profiles_seeded(db.session)
        click.echo(f"Events inserted: {events.inserted}; style profiles inserted: {profiles.inserted}")
