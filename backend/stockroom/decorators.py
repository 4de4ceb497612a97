# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the token's User.

    Responses:
    - 401 when the Authorization header is missing or not "Bearer <token>"
    - 403 when the token is malformed, badly signed or expired
    - 404 when the token's user no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        try:
            user = session_service.resolve_token(token)
        except session_service.TokenUserNotFoundError:
            return jsonify({"error": "User not found"}), 404
        except session_service.InvalidTokenError:
            return jsonify({"error": "Invalid or expired token"}), 403

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the authenticated user to have the admin role. Apply after @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not g.current_user.is_admin:
            return jsonify({"error": "Access denied. Admins only."}), 403
        return f(*args, **kwargs)
    return decorated_function
