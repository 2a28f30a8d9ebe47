from flask import Blueprint

bp = Blueprint("prompts", __name__, url_prefix="/api")

from . import routes, session_routes  # noqa: E402,F401
