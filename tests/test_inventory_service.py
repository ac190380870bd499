import asyncio
import pytest
from uuid import uuid4

from conftest import LONG_AGO, backdate, make_sweet
from sweetshop.core.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from sweetshop.models.sweet import MAX_QUANTITY, Sweet
from sweetshop.services.inventory_service import INSUFFICIENT_STOCK, STOCK_LIMIT, parse_quantity, purchase, restock


# --- QUANTITY PARSING ---

@pytest.mark.parametrize("raw, expected", [(1, 1), (5, 5), ("3", 3), (" 7 ", 7), (2.0, 2), ("4.0", 4)])
def test_parse_quantity_accepts_positive_integers(raw, expected):
    assert parse_quantity(raw) == expected


@pytest.mark.parametrize("raw", [0, -1, 1.5, "abc", "", True, [], "nan", "inf"])
def test_parse_quantity_rejects_everything_else(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_quantity(raw)
    assert "positive integer" in excinfo.value.message


def test_parse_quantity_default():
    assert parse_quantity(None, default=1) == 1
    with pytest.raises(ValidationError):
        parse_quantity(None)


# --- PURCHASE ---

@pytest.mark.asyncio
async def test_purchase_defaults_to_one_unit(db, customer):
    sweet = await make_sweet(quantity=100)

    updated = await purchase(sweet.id, None, customer)

    assert updated.quantity == 99
    assert (await Sweet.get(id=sweet.id)).quantity == 99


@pytest.mark.asyncio
async def test_purchase_refreshes_updated_at(db, customer):
    sweet = await make_sweet(quantity=5)
    await backdate(sweet)

    await purchase(sweet.id, 1, customer)

    assert (await Sweet.get(id=sweet.id)).updated_at > LONG_AGO


@pytest.mark.asyncio
async def test_rejected_purchase_leaves_updated_at_alone(db, customer):
    sweet = await make_sweet(quantity=1)
    await backdate(sweet)

    with pytest.raises(ConflictError):
        await purchase(sweet.id, 2, customer)

    assert (await Sweet.get(id=sweet.id)).updated_at == LONG_AGO


@pytest.mark.asyncio
async def test_purchase_beyond_column_range_is_insufficient_stock(db, customer):
    sweet = await make_sweet(quantity=5)

    for huge in (MAX_QUANTITY + 1, 10**20, "1e20"):
        with pytest.raises(ConflictError) as excinfo:
            await purchase(sweet.id, huge, customer)
        assert excinfo.value.message == INSUFFICIENT_STOCK

    assert (await Sweet.get(id=sweet.id)).quantity == 5


@pytest.mark.asyncio
async def test_purchase_missing_and_short_stock_fail_identically(db, customer):
    sweet = await make_sweet(quantity=2)

    with pytest.raises(ConflictError) as short:
        await purchase(sweet.id, 3, customer)
    with pytest.raises(ConflictError) as missing:
        await purchase(uuid4(), 1, customer)

    assert short.value.message == missing.value.message == INSUFFICIENT_STOCK
    assert short.value.status_code == missing.value.status_code == 400
    assert (await Sweet.get(id=sweet.id)).quantity == 2


@pytest.mark.asyncio
async def test_purchase_validates_before_touching_the_store(customer):
    # No db fixture: an invalid quantity must never reach the store
    with pytest.raises(ValidationError):
        await purchase(uuid4(), 0, customer)


@pytest.mark.asyncio
async def test_purchase_requires_identity(db):
    sweet = await make_sweet()
    with pytest.raises(AuthError):
        await purchase(sweet.id, 1, None)


@pytest.mark.asyncio
async def test_purchase_can_drain_stock_to_exactly_zero(db, customer):
    sweet = await make_sweet(quantity=3)

    updated = await purchase(sweet.id, 3, customer)

    assert updated.quantity == 0
    with pytest.raises(ConflictError):
        await purchase(sweet.id, 1, customer)


# --- CONCURRENCY ---

@pytest.mark.asyncio
async def test_concurrent_purchases_cannot_overdraw(db, customer):
    """Two purchases of 60 against 100 units: exactly one wins."""
    sweet = await make_sweet(quantity=100)

    results = await asyncio.gather(
        purchase(sweet.id, 60, customer),
        purchase(sweet.id, 60, customer),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, Sweet)]
    failures = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert (await Sweet.get(id=sweet.id)).quantity == 40


@pytest.mark.asyncio
async def test_many_concurrent_single_unit_purchases(db, customer):
    sweet = await make_sweet(quantity=10)

    results = await asyncio.gather(
        *[purchase(sweet.id, 1, customer) for _ in range(25)],
        return_exceptions=True,
    )

    assert sum(isinstance(r, Sweet) for r in results) == 10
    assert sum(isinstance(r, ConflictError) for r in results) == 15
    assert (await Sweet.get(id=sweet.id)).quantity == 0


@pytest.mark.asyncio
async def test_restock_interleaved_with_purchases_is_consistent(db, admin, customer):
    sweet = await make_sweet(quantity=75)

    results = await asyncio.gather(
        purchase(sweet.id, 30, customer),
        restock(sweet.id, 25, admin),
        purchase(sweet.id, 30, customer),
        purchase(sweet.id, 30, customer),
        return_exceptions=True,
    )

    bought = 30 * sum(
        isinstance(r, Sweet) for i, r in enumerate(results) if i != 1
    )
    final = (await Sweet.get(id=sweet.id)).quantity
    assert final == 75 + 25 - bought
    assert final >= 0


# --- RESTOCK ---

@pytest.mark.asyncio
async def test_restock_adds_quantity(db, admin):
    sweet = await make_sweet(quantity=75)

    updated = await restock(sweet.id, 25, admin)

    assert updated.quantity == 100


@pytest.mark.asyncio
async def test_restock_unknown_sweet_is_not_found(db, admin):
    with pytest.raises(NotFoundError):
        await restock(uuid4(), 5, admin)


@pytest.mark.asyncio
async def test_restock_requires_admin(db, customer):
    sweet = await make_sweet(quantity=1)
    with pytest.raises(ForbiddenError):
        await restock(sweet.id, 5, customer)
    assert (await Sweet.get(id=sweet.id)).quantity == 1


@pytest.mark.asyncio
async def test_restock_refreshes_updated_at(db, admin):
    sweet = await make_sweet(quantity=1)
    await backdate(sweet)

    await restock(sweet.id, 5, admin)

    assert (await Sweet.get(id=sweet.id)).updated_at > LONG_AGO


@pytest.mark.asyncio
async def test_restock_rejects_quantity_beyond_column_range(db, admin):
    sweet = await make_sweet(quantity=5)

    with pytest.raises(ValidationError) as excinfo:
        await restock(sweet.id, 10**20, admin)

    assert excinfo.value.message == STOCK_LIMIT
    assert (await Sweet.get(id=sweet.id)).quantity == 5


@pytest.mark.asyncio
async def test_restock_cannot_push_stock_past_maximum(db, admin):
    sweet = await make_sweet(quantity=MAX_QUANTITY - 5)

    with pytest.raises(ValidationError) as excinfo:
        await restock(sweet.id, 10, admin)
    assert excinfo.value.message == STOCK_LIMIT
    assert (await Sweet.get(id=sweet.id)).quantity == MAX_QUANTITY - 5

    assert (await restock(sweet.id, 5, admin)).quantity == MAX_QUANTITY


@pytest.mark.asyncio
async def test_restock_rejects_missing_quantity(db, admin):
    sweet = await make_sweet()
    with pytest.raises(ValidationError):
        await restock(sweet.id, None, admin)


# --- SCENARIO ---

@pytest.mark.asyncio
async def test_purchase_restock_purchase_scenario(db, admin, customer):
    sweet = await make_sweet(quantity=100)

    assert (await purchase(sweet.id, 10, customer)).quantity == 90
    assert (await restock(sweet.id, 25, admin)).quantity == 115

    with pytest.raises(ConflictError) as excinfo:
        await purchase(sweet.id, 200, customer)

    assert excinfo.value.message == "insufficient stock or sweet not found"
    assert (await Sweet.get(id=sweet.id)).quantity == 115
