# sweetshop/models/__init__.py
from .sweet import Sweet
from .user import Role, User

# Export all models
__all__ = [
    "Role",
    "Sweet",
    "User",
]
