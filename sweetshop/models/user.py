from enum import Enum
from tortoise import fields, models
import uuid


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    username = fields.CharField(max_length=128)
    email = fields.CharField(max_length=255, unique=True) # Stored lower-cased
    password_hash = fields.CharField(max_length=255)
    role = fields.CharEnumField(Role, default=Role.USER)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"
