# Overview: Bearer token issuance and validation.

"""
Token Service

Tokens are JWTs signed with JWT_SECRET_KEY. The subject is the user id and
the expiry comes from JWT_ACCESS_TOKEN_EXPIRES. Nothing is stored
server-side: a token is valid until it expires, as long as its user still
exists.
"""

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..extensions import db
from ..models import User


class InvalidTokenError(Exception):
    """Token is malformed, badly signed or expired."""
    pass


class TokenUserNotFoundError(Exception):
    """Token is valid but its user no longer exists."""
    pass


def issue_token(user: User) -> str:
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role})


def resolve_token(token: str) -> User:
    """
    Validate a bearer token and return its user.

    Raises:
        InvalidTokenError: token cannot be decoded or has expired
        TokenUserNotFoundError: the user id in the token is unknown
    """
    if not token:
        raise InvalidTokenError("Empty token")

    try:
        claims = decode_token(token)
        user_id = int(claims["sub"])
    except (PyJWTError, JWTExtendedException, KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError(str(exc)) from exc

    user = db.session.get(User, user_id)
    if user is None:
        raise TokenUserNotFoundError(f"User {user_id} not found")
    return user
