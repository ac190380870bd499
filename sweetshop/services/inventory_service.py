import logging
from typing import Any, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.exceptions import BaseORMException
from tortoise.expressions import F
from tortoise.transactions import in_transaction

from sweetshop.core.errors import ConflictError, NotFoundError, StoreFailure, ValidationError
from sweetshop.core.security import Identity, ensure_admin, ensure_authenticated
from sweetshop.models.sweet import MAX_QUANTITY, Sweet

log = logging.getLogger("sweetshop.inventory")

INSUFFICIENT_STOCK = "insufficient stock or sweet not found"
INVALID_QUANTITY = "quantity must be a positive integer"
STOCK_LIMIT = f"stock cannot exceed {MAX_QUANTITY}"


def parse_quantity(value: Any, default: Optional[int] = None) -> int:
    """
    Coerces a requested quantity to a positive int.
    Accepts ints, integral floats and numeric strings ("3", "3.0").
    """
    if value is None:
        value = default
    if value is None or isinstance(value, bool):
        raise ValidationError(INVALID_QUANTITY)

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValidationError(INVALID_QUANTITY)

    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(INVALID_QUANTITY)
        value = int(value)

    if not isinstance(value, int) or value <= 0:
        raise ValidationError(INVALID_QUANTITY)
    return value


async def purchase(sweet_id: UUID, quantity: Any, identity: Optional[Identity]) -> Sweet:
    """
    Decrements stock by `quantity` (default 1) only if enough is available.

    The check and the write are one conditional UPDATE, so concurrent purchases
    are serialized by the database. A missing sweet and short stock both match
    zero rows and are reported with the same error.
    """
    ensure_authenticated(identity)
    qty = parse_quantity(quantity, default=1)
    if qty > MAX_QUANTITY:
        # No row can hold this much stock
        log.warning(f"Purchase rejected for sweet {sweet_id}: requested {qty}.")
        raise ConflictError(INSUFFICIENT_STOCK)

    try:
        async with in_transaction() as conn:
            matched = await Sweet.filter(id=sweet_id, quantity__gte=qty).using_db(conn).update(
                quantity=F("quantity") - qty,
                updated_at=timezone.now(),
            )
            if not matched:
                raise ConflictError(INSUFFICIENT_STOCK)
            # Row is locked by the update until commit, so this reads our own write
            sweet = await Sweet.filter(id=sweet_id).using_db(conn).first()
    except ConflictError:
        log.warning(f"Purchase rejected for sweet {sweet_id}: requested {qty}.")
        raise
    except BaseORMException as e:
        log.exception(f"Store failure purchasing sweet {sweet_id}: {e}")
        raise StoreFailure("Server error")

    log.info(f"User {identity.user_id} purchased {qty} of sweet {sweet_id}; {sweet.quantity} left.")
    return sweet


async def restock(sweet_id: UUID, quantity: Any, identity: Optional[Identity]) -> Sweet:
    """
    Adds `quantity` to stock. Admin only.
    The resulting stock may not pass MAX_QUANTITY; that bound is part of the
    same conditional UPDATE.
    """
    ensure_admin(identity)
    qty = parse_quantity(quantity)
    if qty > MAX_QUANTITY:
        raise ValidationError(STOCK_LIMIT)

    try:
        async with in_transaction() as conn:
            matched = await Sweet.filter(id=sweet_id, quantity__lte=MAX_QUANTITY - qty).using_db(conn).update(
                quantity=F("quantity") + qty,
                updated_at=timezone.now(),
            )
            if not matched:
                if await Sweet.filter(id=sweet_id).using_db(conn).exists():
                    raise ValidationError(STOCK_LIMIT)
                raise NotFoundError("Sweet not found")
            sweet = await Sweet.filter(id=sweet_id).using_db(conn).first()
    except (NotFoundError, ValidationError) as e:
        log.warning(f"Restock rejected for sweet {sweet_id}: {e.message}.")
        raise
    except BaseORMException as e:
        log.exception(f"Store failure restocking sweet {sweet_id}: {e}")
        raise StoreFailure("Server error")

    log.info(f"Admin {identity.user_id} restocked sweet {sweet_id} by {qty}; now {sweet.quantity}.")
    return sweet
