import logging
import re
from typing import Optional, Tuple

from tortoise.exceptions import BaseORMException, IntegrityError

from sweetshop.core.errors import AuthError, ConflictError, StoreFailure, ValidationError
from sweetshop.core.security import Identity, hash_password, issue_token, verify_password
from sweetshop.models.user import Role, User

log = logging.getLogger("sweetshop.auth")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# At least 8 characters with one letter and one digit
PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,}$")


def _normalise_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def identity_for(user: User) -> Identity:
    return Identity(user_id=str(user.id), role=Role(user.role))


async def register(username: Optional[str], email: Optional[str], password: Optional[str]) -> User:
    """Creates a plain user account. Admins are only made by the seed script."""
    name = (username or "").strip()
    email = _normalise_email(email)
    password = password or ""

    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    if not PASSWORD_RE.match(password):
        raise ValidationError(
            "Password must be at least 8 characters long and contain at least one letter and one number"
        )

    try:
        if await User.filter(email=email).exists():
            raise ConflictError("User already exists", code="duplicate_account")
        user = await User.create(
            username=name,
            email=email,
            password_hash=hash_password(password),
            role=Role.USER,
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise ConflictError("User already exists", code="duplicate_account")
    except BaseORMException as e:
        log.exception(f"Store failure registering {email}: {e}")
        raise StoreFailure("Server error")

    log.info(f"Registered user {user.id} <{email}>.")
    return user


async def login(email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
    """Checks credentials and returns the user with a fresh session token."""
    email = _normalise_email(email)
    password = password or ""
    if not email or not password:
        raise ValidationError("Email and password are required")

    try:
        user = await User.get_or_none(email=email)
    except BaseORMException as e:
        log.exception(f"Store failure during login for {email}: {e}")
        raise StoreFailure("Server error")

    if not user or not verify_password(user.password_hash, password):
        log.warning(f"Failed login for {email}.")
        raise AuthError("Invalid email or password")

    token = issue_token(identity_for(user))
    log.info(f"User {user.id} logged in.")
    return user, token
