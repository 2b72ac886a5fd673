import hmac
import secrets
from flask import request, jsonify, current_app

CSRF_COOKIE = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

def set_csrf_cookie(resp):
    # double-submit token: readable by client JS, echoed back in CSRF_HEADER
    resp.set_cookie(
        CSRF_COOKIE,
        secrets.token_urlsafe(32),
        httponly=False,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp

def csrf_failure():
    """Error response when the header does not echo the cookie, else None."""
    cookie_token = request.cookies.get(CSRF_COOKIE) or ""
    header_token = request.headers.get(CSRF_HEADER) or ""
    if cookie_token and hmac.compare_digest(cookie_token, header_token):
        return None
    return jsonify(error="CSRF validation failed"), 403
