# sweetshop/scripts/seed_data.py
import asyncio
import logging
from sweetshop.core.config import ADMIN_SEED_PASSWORD
from sweetshop.core.db import init_db, close_db
from sweetshop.core.security import hash_password
from sweetshop.models.sweet import Sweet
from sweetshop.models.user import Role, User

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("sweetshop.seed")

ADMINS = [
    {"username": "Admin", "email": "admin@example.com"},
    {"username": "Owner", "email": "owner@example.com"},
]

SWEETS = [
    {"name": "Strawberry Candy", "description": "Hard candy with real strawberry", "category": "Candy",
     "price": 2.5, "quantity": 120, "image_url": "https://example.com/img/strawberry-candy.jpg"},
    {"name": "Dark Chocolate Bar", "description": "70% cocoa, single origin", "category": "Chocolate",
     "price": 4.0, "quantity": 60, "image_url": "https://example.com/img/dark-chocolate.jpg"},
    {"name": "Gulab Jamun", "description": "Milk dumplings soaked in rose syrup", "category": "Indian",
     "price": 8.0, "quantity": 30, "image_url": "https://example.com/img/gulab-jamun.jpg"},
    {"name": "Strawberry Cake", "description": "Sponge layered with fresh cream", "category": "Cake",
     "price": 18.0, "quantity": 0, "image_url": "https://example.com/img/strawberry-cake.jpg"},
]


async def seed_admins():
    """Creates or promotes the admin accounts (idempotent)."""
    for admin in ADMINS:
        user, created = await User.get_or_create(
            email=admin["email"],
            defaults={
                "username": admin["username"],
                "password_hash": hash_password(ADMIN_SEED_PASSWORD),
                "role": Role.ADMIN,
            },
        )
        if not created:
            user.username = admin["username"]
            user.password_hash = hash_password(ADMIN_SEED_PASSWORD)
            user.role = Role.ADMIN
            await user.save()
        log.info(f"admin ready: {user.username} <{user.email}>")


async def seed_sweets():
    """Adds demo sweets, but only into an empty catalog."""
    if await Sweet.exists():
        log.info("Catalog already has sweets; skipping.")
        return
    for data in SWEETS:
        sweet = await Sweet.create(**data)
        log.info(f"Sweet: {sweet.name} ({sweet.id})")


async def main():
    await init_db()
    try:
        await seed_admins()
        await seed_sweets()
    finally:
        await close_db()

if __name__ == "__main__":
    asyncio.run(main())
