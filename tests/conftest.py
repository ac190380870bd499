import pytest
import pytest_asyncio
from types import SimpleNamespace
from datetime import datetime, timezone
from uuid import uuid4
from tortoise.contrib.test import tortoise_test_context

from sweetshop.core.db import MODELS_MODULES
from sweetshop.core.security import Identity, issue_token
from sweetshop.models.sweet import Sweet
from sweetshop.models.user import Role


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    async with tortoise_test_context(MODELS_MODULES) as ctx:
        yield ctx


@pytest.fixture
def admin():
    return Identity(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def customer():
    return Identity(user_id="user-1", role=Role.USER)


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {issue_token(admin)}"}


@pytest.fixture
def user_headers(customer):
    return {"Authorization": f"Bearer {issue_token(customer)}"}


async def make_sweet(**overrides) -> Sweet:
    data = {
        "name": "Strawberry Candy",
        "description": "Hard candy",
        "category": "candy",
        "image_url": "https://example.com/candy.jpg",
        "price": 5.0,
        "quantity": 100,
    }
    data.update(overrides)
    return await Sweet.create(**data)


LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


async def backdate(sweet: Sweet) -> None:
    """Pushes updated_at into the past so a later refresh is observable."""
    await Sweet.filter(id=sweet.id).update(updated_at=LONG_AGO)


def fake_sweet(**overrides):
    """Attribute bag shaped like a Sweet, for route tests that mock the services."""
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    data = {
        "id": uuid4(),
        "name": "Ladoo",
        "description": "Gram flour sweet",
        "category": "indian",
        "image_url": "https://example.com/ladoo.jpg",
        "price": 3.5,
        "quantity": 10,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return SimpleNamespace(**data)
