import logging
import math
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from sweetshop.core.errors import NotFoundError, StoreFailure, ValidationError
from sweetshop.core.security import Identity, ensure_admin
from sweetshop.models.sweet import MAX_QUANTITY, Sweet

log = logging.getLogger("sweetshop.catalog")

REQUIRED_FIELDS = "All fields are required"
TEXT_FIELDS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "imageUrl": "image_url",
}


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def validate_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Checks a create/update body and returns model field values.
    Text fields must be non-blank, price a number >= 0, quantity a whole number between 0 and MAX_QUANTITY.
    """
    fields: Dict[str, Any] = {}
    for key, attr in TEXT_FIELDS.items():
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(REQUIRED_FIELDS)
        fields[attr] = value.strip()

    price = _number(payload.get("price"))
    if price is None or price < 0:
        raise ValidationError(REQUIRED_FIELDS)
    fields["price"] = price

    quantity = _number(payload.get("quantity"))
    if quantity is None or quantity < 0 or not quantity.is_integer():
        raise ValidationError(REQUIRED_FIELDS)
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY}")
    fields["quantity"] = int(quantity)
    return fields


async def list_sweets() -> List[Sweet]:
    try:
        return await Sweet.all().order_by("-created_at")
    except BaseORMException as e:
        log.exception(f"Store failure listing sweets: {e}")
        raise StoreFailure("Server error")


async def get_sweet(sweet_id: UUID) -> Sweet:
    try:
        sweet = await Sweet.get_or_none(id=sweet_id)
    except BaseORMException as e:
        log.exception(f"Store failure fetching sweet {sweet_id}: {e}")
        raise StoreFailure("Server error")
    if not sweet:
        raise NotFoundError("Sweet not found")
    return sweet


async def create_sweet(payload: Mapping[str, Any], identity: Optional[Identity]) -> Sweet:
    ensure_admin(identity)
    fields = validate_payload(payload)
    try:
        sweet = await Sweet.create(**fields)
    except BaseORMException as e:
        log.exception(f"Store failure creating sweet: {e}")
        raise StoreFailure("Server error")
    log.info(f"Admin {identity.user_id} created sweet {sweet.id} ({sweet.name}).")
    return sweet


async def update_sweet(sweet_id: UUID, payload: Mapping[str, Any], identity: Optional[Identity]) -> Sweet:
    """Full replacement of the six mutable fields."""
    ensure_admin(identity)
    fields = validate_payload(payload)
    try:
        async with in_transaction() as conn:
            matched = await Sweet.filter(id=sweet_id).using_db(conn).update(
                **fields, updated_at=timezone.now()
            )
            if not matched:
                raise NotFoundError("Sweet not found")
            sweet = await Sweet.filter(id=sweet_id).using_db(conn).first()
    except BaseORMException as e:
        log.exception(f"Store failure updating sweet {sweet_id}: {e}")
        raise StoreFailure("Server error")
    log.info(f"Admin {identity.user_id} updated sweet {sweet_id}.")
    return sweet


async def delete_sweet(sweet_id: UUID, identity: Optional[Identity]) -> None:
    ensure_admin(identity)
    try:
        deleted = await Sweet.filter(id=sweet_id).delete()
    except BaseORMException as e:
        log.exception(f"Store failure deleting sweet {sweet_id}: {e}")
        raise StoreFailure("Server error")
    if not deleted:
        raise NotFoundError("Sweet not found")
    log.info(f"Admin {identity.user_id} deleted sweet {sweet_id}.")
