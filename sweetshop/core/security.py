"""Identity, password hashing and signed session tokens.

Core operations never look at tokens. The HTTP layer verifies the bearer token
with ``verify_token`` and hands the resulting ``Identity`` to the services as
an explicit argument.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from sweetshop.core.config import SECRET_KEY, TOKEN_MAX_AGE, TOKEN_SALT
from sweetshop.core.errors import AuthError, ForbiddenError
from sweetshop.models.user import Role


@dataclass(frozen=True)
class Identity:
    """A verified caller: who they are and what they may do."""

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _serializer(secret_key: str = SECRET_KEY) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def issue_token(identity: Identity, secret_key: str = SECRET_KEY) -> str:
    return _serializer(secret_key).dumps({"uid": identity.user_id, "role": identity.role.value})


def verify_token(token: str, max_age: int = TOKEN_MAX_AGE, secret_key: str = SECRET_KEY) -> Identity:
    """Decode a session token into an Identity, or raise AuthError."""
    try:
        decoded = _serializer(secret_key).loads(token, max_age=max_age)
    except (SignatureExpired, BadSignature):
        raise AuthError("Invalid or expired token")

    uid = decoded.get("uid") if isinstance(decoded, dict) else None
    try:
        role = Role(decoded.get("role"))
    except (ValueError, AttributeError):
        role = None
    if not uid or role is None:
        raise AuthError("Invalid or expired token")
    return Identity(user_id=str(uid), role=role)


def ensure_authenticated(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise AuthError("Missing token")
    return identity


def ensure_admin(identity: Optional[Identity]) -> Identity:
    identity = ensure_authenticated(identity)
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")
    return identity
