from datetime import timedelta
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request

from .errors import InvalidSession, NotAuthenticated, StorageError, UserNotFound, ValidationError
from .model import public_user, verify_password

bp = Blueprint("auth", __name__, url_prefix="/api")


def services():
    return current_app.extensions["subtasker"]


# Cookie helpers

def set_session_cookie(response, token, remember_me=False):
    cfg = current_app.config
    max_age = timedelta(days=cfg["REMEMBER_ME_DAYS"]) if remember_me else None
    response.set_cookie(
        cfg["SESSION_TOKEN_COOKIE"],
        token,
        max_age=max_age,
        httponly=True,
        secure=cfg["SESSION_COOKIE_SECURE"],
        samesite="Lax",
        path="/",
        domain=cfg["TOKEN_COOKIE_DOMAIN"],
    )


def clear_session_cookie(response):
    cfg = current_app.config
    response.delete_cookie(
        cfg["SESSION_TOKEN_COOKIE"],
        path="/",
        domain=cfg["TOKEN_COOKIE_DOMAIN"],
        httponly=True,
        samesite="Lax",
    )


def session_token():
    return request.cookies.get(current_app.config["SESSION_TOKEN_COOKIE"])


def resolve_user(token):
    """Turn a cookie value into the stored user record.

    Raises NotAuthenticated, InvalidSession or UserNotFound.
    """
    if not token:
        raise NotAuthenticated()
    user_id = services()["codec"].decode(token)
    user = services()["store"].find_user(user_id)
    if user is None:
        raise UserNotFound()
    return user


def login_required(view):
    """Attach the caller's full user record to ``g.user`` or reject with 401."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        g.user = resolve_user(session_token())
        return view(*args, **kwargs)

    return wrapped


# Routes

@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not email.strip() or not password:
        raise ValidationError("Email and password are required")

    user = services()["store"].find_by_email(email.strip())

    if user is None or not verify_password(user.get("password"), password):
        current_app.logger.info("Failed login for %s", email.strip())
        return jsonify({"error": "Invalid credentials"}), 401

    token = services()["codec"].issue(user["id"])
    response = jsonify({"message": "Login successful", "user": public_user(user)})
    set_session_cookie(response, token, remember_me=bool(data.get("rememberMe")))
    return response


@bp.route("/check-session", methods=["GET"])
def check_session():
    token = session_token()
    if not token:
        return jsonify({"user": None})

    try:
        user = resolve_user(token)
    except (InvalidSession, UserNotFound):
        response = jsonify({"user": None})
        clear_session_cookie(response)
        return response
    except StorageError:
        current_app.logger.exception("Check session error")
        return jsonify({"user": None})

    return jsonify({"user": public_user(user)})


@bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"message": "Logged out successfully"})
    clear_session_cookie(response)
    return response
