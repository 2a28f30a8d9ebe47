from flask import Blueprint

bp = Blueprint("overlay", __name__)

from . import routes  # noqa: E402,F401
