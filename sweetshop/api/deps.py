from typing import Optional

from fastapi import Header

from sweetshop.core.security import Identity, ensure_admin, verify_token
from sweetshop.core.errors import AuthError


async def get_identity(authorization: Optional[str] = Header(None)) -> Identity:
    """Resolves the `Authorization: Bearer <token>` header into an Identity (401 otherwise)."""
    header = authorization or ""
    if not header.startswith("Bearer "):
        raise AuthError("Missing token")
    token = header[len("Bearer "):].strip()
    if not token:
        raise AuthError("Missing token")
    return verify_token(token)


async def get_admin(authorization: Optional[str] = Header(None)) -> Identity:
    """Like get_identity, but short-circuits non-admins with 403."""
    identity = await get_identity(authorization)
    return ensure_admin(identity)
