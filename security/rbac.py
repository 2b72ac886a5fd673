from functools import wraps
from flask import g, jsonify

ADMIN = "ADMIN"
PLAYER = "PLAYER"


def user_has_role(user, role_name: str) -> bool:
    if user is None:
        return False
    return any(r.name == role_name for r in user.roles)


def is_admin(user) -> bool:
    return user_has_role(user, ADMIN)


def can_act_on(user, owner_user_id) -> bool:
    """
    Capability check for a resource whose owner is already resolved.

    Admins may act on anything; everyone else only on what they own.
    """
    if user is None:
        return False
    if is_admin(user):
        return True
    return owner_user_id is not None and owner_user_id == user.id


def require_roles(*role_names: str):
    """
    Usage: @require_roles("ADMIN")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401

            if not any(user_has_role(user, name) for name in role_names):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
