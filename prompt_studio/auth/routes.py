from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from ..api import error_response, json_payload, validation_error
from ..extensions import limiter
from ..models import AdminUser
from . import bp
from .forms import LoginForm


def _login_limit() -> str:
    return current_app.config["LOGIN_RATE_LIMIT"]


@bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit, error_message="Too many login attempts, please try again later")
def login():
    form = LoginForm.from_payload(json_payload())
    if not form.validate():
        return validation_error(form.errors)

    admin = AdminUser.from_config()
    if form.username.data == admin.username and admin.check_password(form.password.data):
        login_user(admin)
        current_app.logger.info("Admin %s signed in from %s", admin.username, request.remote_addr)
        return jsonify({"message": "Login successful", "user": admin.to_dict()})

    current_app.logger.warning("Failed login for %r from %s", form.username.data, request.remote_addr)
    return error_response("Invalid username or password", 401)


@bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return jsonify({"message": "Logout successful"})


@bp.route("/status")
def status():
    authenticated = current_user.is_authenticated
    return jsonify(
        {
            "authenticated": authenticated,
            "user": current_user.to_dict() if authenticated else None,
            "csrf_token": generate_csrf(),
        }
    )


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
