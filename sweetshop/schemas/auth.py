from typing import Optional
from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Public view of an account; never carries the password hash."""
    id: str
    username: str
    email: str
    role: str
