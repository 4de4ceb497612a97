from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)


class User(db.Model):
    """
    User accounts for authentication and attribution.

    loginid and email are globally unique. Users are created at signup
    (always with the "user" role) or from the CLI; the API never deletes them.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("loginid", name="uq_users_loginid"),
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    loginid = db.Column(db.String(64), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_USER)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} loginid={self.loginid!r} role={self.role!r}>"

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "loginid": self.loginid,
            "email": self.email,
            "role": self.role,
        }

    def to_dict(self) -> dict:
        data = self.to_public_dict()
        data["createdAt"] = to_utc_z(self.created_at)
        return data
