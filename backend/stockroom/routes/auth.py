# Overview: Flask API routes for signup, login and the caller's identity.

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import db
from ..services import auth_service
from ..services import session_service
from ..decorators import require_auth, require_admin
from ..validation import json_object, ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _field(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


@auth_bp.post("/signup")
def signup_route():
    """
    Register a new user and log them in.

    Returns 201 with a token and the public user fields.
    400 when a field is missing or the loginid/email is taken.
    """
    try:
        data = json_object(request.get_json(silent=True))
        loginid = _field(data, "loginid")
        email = _field(data, "email")
        password = data.get("password") if isinstance(data.get("password"), str) else ""

        if not all([loginid, email, password]):
            return jsonify({"error": "loginid, email and password required"}), 400

        try:
            user = auth_service.create_user(loginid, email, password)
        except auth_service.UserExistsError as e:
            return jsonify({"error": str(e)}), 400

        current_app.logger.info("Registered user %s (id=%s)", user.loginid, user.id)

        return jsonify({
            "message": "User registered successfully",
            "token": session_service.issue_token(user),
            "user": user.to_public_dict(),
        }), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by loginid and password.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = json_object(request.get_json(silent=True))
        loginid = _field(data, "loginid")
        password = data.get("password")

        if not loginid or not isinstance(password, str) or not password:
            return jsonify({"error": "loginid and password required"}), 400

        user = auth_service.authenticate(loginid, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        return jsonify({
            "token": session_service.issue_token(user),
            "user": user.to_public_dict(),
        }), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(g.current_user.to_dict()), 200


@auth_bp.get("/users")
@require_auth
@require_admin
def list_users_route():
    try:
        users = auth_service.list_users()
        return jsonify({
            "count": len(users),
            "users": [u.to_dict() for u in users],
        }), 200
    except Exception:
        current_app.logger.exception("Failed to list users")
        return jsonify({"error": "Internal server error"}), 500
