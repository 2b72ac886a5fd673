from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User, Role
from security.csrf import set_csrf_cookie
from security.password import MIN_PASSWORD_LENGTH, check_password, hash_password
from security.rbac import PLAYER
from security.session import open_session, close_session, close_all_sessions
from utils.audit import log_event
from utils.auth_context import login_required


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _clean_optional(data, key, max_length):
    value = data.get(key)
    if value is None:
        return None, None
    if not isinstance(value, str) or len(value.strip()) > max_length:
        return None, f"Invalid {key}"
    return value.strip() or None, None


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return jsonify(error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"), 400

    full_name, err = _clean_optional(data, "full_name", 120)
    if err:
        return jsonify(error=err), 400
    phone_number, err = _clean_optional(data, "phone_number", 30)
    if err:
        return jsonify(error=err), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        phone_number=phone_number,
    )
    player_role = Role.query.filter_by(name=PLAYER).first()
    if player_role:
        user.roles.append(player_role)
    db.session.add(user)
    db.session.commit()

    log_event("REGISTER_SUCCESS", user_id=user.id, entity="user", entity_id=user.id)
    return jsonify(id=user.id, message="Registered successfully"), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not check_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials"), 401

    # one live session per user
    revoked = close_all_sessions(user.id)
    raw_token = open_session(user.id)

    resp = jsonify(message="Login OK", roles=user.role_names)
    resp.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        raw_token,
        httponly=current_app.config.get("SESSION_COOKIE_HTTPONLY", True),
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    resp = set_csrf_cookie(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        id=g.user.id,
        email=g.user.email,
        full_name=g.user.full_name,
        phone_number=g.user.phone_number,
        roles=g.user.role_names,
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config["AUTH_COOKIE_NAME"]
    close_session(request.cookies.get(cookie_name))
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    return resp, 200
