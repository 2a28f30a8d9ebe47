import os

from flask import jsonify

from ..models import utcnow
from . import bp


@bp.route("/health")
def health():
    return jsonify(
        {
            "status": "healthy",
            "timestamp": utcnow().isoformat() + "Z",
            "environment": os.environ.get("FLASK_ENV", "development"),
        }
    )


@bp.route("/api/health")
def api_health():
    return jsonify({"status": "OK", "timestamp": utcnow().isoformat() + "Z"})
