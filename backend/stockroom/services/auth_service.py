# Overview: Service-layer operations for users; password hashing and credential checks.

"""
Authentication Service

Passwords are hashed with bcrypt; the cost factor comes from the
BCRYPT_ROUNDS setting (12 by default, lowered in tests).

loginid and email are globally unique. Signup always creates a plain
"user"; admins are made from the CLI (flask users create / set-role).
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..models.auth import ROLES, ROLE_USER


class UserExistsError(Exception):
    """Raised when a loginid or email is already registered."""
    pass


class UserNotFoundError(Exception):
    """Raised when a user lookup by loginid fails."""
    pass


class InvalidRoleError(ValueError):
    """Raised for roles outside ROLES."""
    pass


def hash_password(password: str) -> str:
    """Hash password using bcrypt with the configured cost factor."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A corrupt stored hash counts as a
    mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(loginid: str, email: str, password: str, role: str = ROLE_USER) -> User:
    """
    Create a new user with a bcrypt password hash.

    Raises:
        UserExistsError: loginid or email already registered
        InvalidRoleError: role is not one of ROLES
    """
    if role not in ROLES:
        raise InvalidRoleError(f"Role must be one of: {', '.join(ROLES)}")

    existing = db.session.query(User).filter(
        db.or_(User.loginid == loginid, User.email == email)
    ).first()
    if existing:
        raise UserExistsError("User already exists")

    user = User(
        loginid=loginid,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same loginid/email
        db.session.rollback()
        raise UserExistsError("User already exists")
    return user


def authenticate(loginid: str, password: str) -> User | None:
    """Return the user when loginid and password match, None otherwise."""
    user = db.session.query(User).filter(User.loginid == loginid).first()
    if not user:
        return None
    if verify_password(password, user.password_hash):
        return user
    return None


def list_users() -> list[User]:
    return (
        db.session.query(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def set_role(loginid: str, role: str) -> User:
    if role not in ROLES:
        raise InvalidRoleError(f"Role must be one of: {', '.join(ROLES)}")
    user = db.session.query(User).filter(User.loginid == loginid).first()
    if not user:
        raise UserNotFoundError(f"User {loginid} not found")
    user.role = role
    db.session.commit()
    return user
