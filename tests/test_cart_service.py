"""Cart workflow: reservation of stock when products enter and leave a cart."""
from datetime import timezone

import pytest

from ecomerce import cart_service
from ecomerce.exceptions import (
    InsufficientStockError, InvalidRequestError, ProductNotFound, UserNotFound,
)

from conftest import fail_on_call, make_product, make_user, reserved_quantity, stock_of


async def test_get_or_create_cart_returns_same_cart(session, user_id):
    first = await cart_service.get_or_create_cart(session, user_id)
    second = await cart_service.get_or_create_cart(session, user_id)

    assert first.id == second.id
    assert first.items == []
    assert first.created_at is not None


async def test_new_cart_timestamps_are_utc(session, user_id):
    cart = await cart_service.get_or_create_cart(session, user_id)

    assert cart.created_at.tzinfo is timezone.utc
    assert cart.updated_at.tzinfo is timezone.utc


async def test_get_or_create_cart_unknown_user(session):
    with pytest.raises(UserNotFound):
        await cart_service.get_or_create_cart(session, 42)


async def test_add_item_merges_and_checks_only_added_units(session, user_id, product_id):
    item = await cart_service.add_item(session, user_id, product_id, 4)
    assert item.quantity == 4
    assert await stock_of(session, product_id) == 6

    item = await cart_service.add_item(session, user_id, product_id, 3)
    assert item.quantity == 7
    assert await stock_of(session, product_id) == 3

    with pytest.raises(InsufficientStockError):
        await cart_service.add_item(session, user_id, product_id, 5)

    assert await reserved_quantity(session, user_id, product_id) == 7
    assert await stock_of(session, product_id) == 3

    cart = await cart_service.get_or_create_cart(session, user_id)
    assert [(it.product_id, it.quantity) for it in cart.items] == [(product_id, 7)]


async def test_add_item_more_than_stock_creates_nothing(session, user_id, product_id):
    with pytest.raises(InsufficientStockError):
        await cart_service.add_item(session, user_id, product_id, 11)

    assert await reserved_quantity(session, user_id, product_id) is None
    assert await stock_of(session, product_id) == 10


@pytest.mark.parametrize("quantity", [0, -3])
async def test_add_item_rejects_non_positive_quantity(session, user_id, product_id, quantity):
    with pytest.raises(InvalidRequestError):
        await cart_service.add_item(session, user_id, product_id, quantity)
    assert await stock_of(session, product_id) == 10


async def test_add_item_unknown_user_or_product(session, user_id, product_id):
    with pytest.raises(UserNotFound):
        await cart_service.add_item(session, 999, product_id, 1)
    with pytest.raises(ProductNotFound):
        await cart_service.add_item(session, user_id, 999, 1)


async def test_update_quantity_to_zero_removes_item_and_returns_stock(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 7)
    assert await stock_of(session, product_id) == 3

    result = await cart_service.update_quantity(session, user_id, product_id, 0)

    assert result is None
    assert await reserved_quantity(session, user_id, product_id) is None
    assert await stock_of(session, product_id) == 10


async def test_update_quantity_up_and_down(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 2)

    item = await cart_service.update_quantity(session, user_id, product_id, 9)
    assert item.quantity == 9
    assert await stock_of(session, product_id) == 1

    item = await cart_service.update_quantity(session, user_id, product_id, 4)
    assert item.quantity == 4
    assert await stock_of(session, product_id) == 6


async def test_update_quantity_to_current_value_keeps_stock(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 5)

    item = await cart_service.update_quantity(session, user_id, product_id, 5)

    assert item.quantity == 5
    assert await stock_of(session, product_id) == 5


async def test_update_quantity_beyond_stock_is_rejected(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 4)

    with pytest.raises(InsufficientStockError):
        await cart_service.update_quantity(session, user_id, product_id, 11)

    assert await reserved_quantity(session, user_id, product_id) == 4
    assert await stock_of(session, product_id) == 6


async def test_update_quantity_rejections(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 1)

    with pytest.raises(InvalidRequestError):
        await cart_service.update_quantity(session, user_id, product_id, -1)

    other_id = await make_product(session, name="Bolsa de algodón", stock=3)
    with pytest.raises(InvalidRequestError):
        await cart_service.update_quantity(session, user_id, other_id, 2)

    with pytest.raises(UserNotFound):
        await cart_service.update_quantity(session, 999, product_id, 2)

    assert await stock_of(session, product_id) == 9
    assert await stock_of(session, other_id) == 3


async def test_remove_item(session, user_id, product_id):
    await cart_service.add_item(session, user_id, product_id, 3)

    assert await cart_service.remove_item(session, user_id, product_id) is True
    assert await reserved_quantity(session, user_id, product_id) is None
    assert await stock_of(session, product_id) == 10


async def test_remove_missing_item_changes_nothing(session, user_id, product_id):
    assert await cart_service.remove_item(session, user_id, product_id) is False
    assert await cart_service.load_cart(session, user_id) is None
    assert await stock_of(session, product_id) == 10


async def test_clear_cart_returns_every_reservation(session, user_id):
    p1 = await make_product(session, name="Cepillo de bambú", stock=10)
    p2 = await make_product(session, name="Botella de acero", stock=10)
    await cart_service.add_item(session, user_id, p1, 2)
    await cart_service.add_item(session, user_id, p2, 5)
    assert (await stock_of(session, p1), await stock_of(session, p2)) == (8, 5)

    assert await cart_service.clear_cart(session, user_id) is True
    assert (await stock_of(session, p1), await stock_of(session, p2)) == (10, 10)

    cart = await cart_service.get_or_create_cart(session, user_id)
    assert cart.items == []

    # the empty cart still exists, so clearing again succeeds without touching stock
    assert await cart_service.clear_cart(session, user_id) is True
    assert (await stock_of(session, p1), await stock_of(session, p2)) == (10, 10)


async def test_clear_cart_failure_midway_rolls_back_everything(session, user_id, monkeypatch):
    p1 = await make_product(session, name="Cepillo de bambú", stock=10)
    p2 = await make_product(session, name="Botella de acero", stock=10)
    await cart_service.add_item(session, user_id, p1, 2)
    await cart_service.add_item(session, user_id, p2, 5)

    calls = fail_on_call(monkeypatch, 2)
    with pytest.raises(RuntimeError):
        await cart_service.clear_cart(session, user_id)
    assert calls == [p1, p2]

    # the credit of p1 went out with the rollback
    assert (await stock_of(session, p1), await stock_of(session, p2)) == (8, 5)
    assert await reserved_quantity(session, user_id, p1) == 2
    assert await reserved_quantity(session, user_id, p2) == 5


async def test_clear_cart_without_cart(session, user_id):
    assert await cart_service.clear_cart(session, user_id) is False
    with pytest.raises(UserNotFound):
        await cart_service.clear_cart(session, 999)


async def test_stock_plus_reserved_is_conserved(session, product_id):
    ana = await make_user(session, email="ana@example.com")
    luis = await make_user(session, email="luis@example.com")

    async def total():
        reserved = 0
        for uid in (ana, luis):
            reserved += await reserved_quantity(session, uid, product_id) or 0
        return reserved + await stock_of(session, product_id)

    steps = [
        lambda: cart_service.add_item(session, ana, product_id, 4),
        lambda: cart_service.add_item(session, luis, product_id, 3),
        lambda: cart_service.update_quantity(session, ana, product_id, 6),
        lambda: cart_service.add_item(session, luis, product_id, 5),  # rejected
        lambda: cart_service.update_quantity(session, luis, product_id, 1),
        lambda: cart_service.remove_item(session, ana, product_id),
        lambda: cart_service.clear_cart(session, luis),
    ]
    for step in steps:
        try:
            await step()
        except InsufficientStockError:
            pass
        assert await total() == 10
        assert await stock_of(session, product_id) >= 0

    assert await stock_of(session, product_id) == 10
