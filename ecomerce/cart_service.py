"""Cart workflow.

Stock is reserved when it enters a cart: adding an item debits the product,
lowering a quantity or removing an item credits it back. Each public
operation is a single transaction, so a cart change and its stock change are
committed together or not at all.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from . import ledger
from .database import transactional
from .exceptions import InvalidRequestError, UserNotFound
from .models import Cart, CartItem, User

logger = logging.getLogger(__name__)


async def require_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


def cart_query(user_id: int, lock: bool = False):
    stmt = (
        select(Cart)
        .options(selectinload(Cart.items).selectinload(CartItem.product))
        .where(Cart.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    if lock:
        stmt = stmt.with_for_update()
    return stmt


async def load_cart(session: AsyncSession, user_id: int, lock: bool = False) -> Optional[Cart]:
    result = await session.execute(cart_query(user_id, lock=lock))
    return result.scalar_one_or_none()


async def _get_or_create(session: AsyncSession, user_id: int, lock: bool = False) -> Cart:
    await require_user(session, user_id)
    cart = await load_cart(session, user_id, lock=lock)
    if cart is None:
        cart = Cart(user_id=user_id, items=[])
        session.add(cart)
        await session.flush()
        logger.info("Created cart %s for user %s", cart.id, user_id)
    return cart


def _find_item(cart: Cart, product_id: int) -> Optional[CartItem]:
    return next((item for item in cart.items if item.product_id == product_id), None)


@transactional
async def get_or_create_cart(session: AsyncSession, user_id: int) -> Cart:
    return await _get_or_create(session, user_id)


@transactional
async def add_item(session: AsyncSession, user_id: int, product_id: int, quantity: int) -> CartItem:
    """Put ``quantity`` units of a product in the user's cart.

    A product already in the cart is merged into the existing row. Only the
    added units are checked against (and debited from) available stock, since
    the units already in the cart were debited when they were added.
    """
    if quantity <= 0:
        logger.warning("Rejected add to cart: user=%s product=%s quantity=%s", user_id, product_id, quantity)
        raise InvalidRequestError("La cantidad debe ser mayor que cero")

    cart = await _get_or_create(session, user_id, lock=True)
    product = await ledger.apply_delta(session, product_id, -quantity)

    item = _find_item(cart, product_id)
    if item is not None:
        item.quantity += quantity
    else:
        item = CartItem(product_id=product.id, product=product, quantity=quantity)
        cart.items.append(item)

    cart.touch()
    await session.flush()
    logger.info("Cart %s: product %s now x%s", cart.id, product_id, item.quantity)
    return item


@transactional
async def update_quantity(
    session: AsyncSession, user_id: int, product_id: int, new_quantity: int
) -> Optional[CartItem]:
    """Set the quantity of a product already in the cart.

    Returns the updated item, or None when ``new_quantity`` is 0 and the item
    was removed.
    """
    if new_quantity < 0:
        logger.warning("Rejected quantity update: user=%s product=%s quantity=%s", user_id, product_id, new_quantity)
        raise InvalidRequestError("La cantidad no puede ser negativa")

    cart = await _get_or_create(session, user_id, lock=True)
    item = _find_item(cart, product_id)
    if item is None:
        logger.warning("Rejected quantity update: product %s not in cart %s", product_id, cart.id)
        raise InvalidRequestError(f"El producto {product_id} no está en el carrito")

    if new_quantity == 0:
        await ledger.apply_delta(session, product_id, item.quantity)
        cart.items.remove(item)
        cart.touch()
        await session.flush()
        logger.info("Cart %s: product %s removed", cart.id, product_id)
        return None

    delta = new_quantity - item.quantity
    if delta:
        await ledger.apply_delta(session, product_id, -delta)
        item.quantity = new_quantity
        cart.touch()
        await session.flush()
        logger.info("Cart %s: product %s now x%s", cart.id, product_id, new_quantity)
    return item


@transactional
async def remove_item(session: AsyncSession, user_id: int, product_id: int) -> bool:
    await require_user(session, user_id)
    cart = await load_cart(session, user_id, lock=True)
    item = _find_item(cart, product_id) if cart is not None else None
    if item is None:
        return False

    await ledger.apply_delta(session, product_id, item.quantity)
    cart.items.remove(item)
    cart.touch()
    await session.flush()
    logger.info("Cart %s: product %s removed", cart.id, product_id)
    return True


async def return_reserved_stock(session: AsyncSession, cart: Cart) -> None:
    # product order keeps row locks acquired in a consistent sequence
    for item in sorted(cart.items, key=lambda it: it.product_id):
        await ledger.apply_delta(session, item.product_id, item.quantity)
    cart.items.clear()


@transactional
async def clear_cart(session: AsyncSession, user_id: int) -> bool:
    """Empty the cart, crediting every item back. False when there is no cart."""
    await require_user(session, user_id)
    cart = await load_cart(session, user_id, lock=True)
    if cart is None:
        return False

    if cart.items:
        await return_reserved_stock(session, cart)
        cart.touch()
        await session.flush()
        logger.info("Cart %s emptied", cart.id)
    return True


async def discard_cart(session: AsyncSession, user_id: int) -> None:
    """Return reserved stock, then delete the items and the cart row."""
    cart = await load_cart(session, user_id, lock=True)
    if cart is None:
        return
    await return_reserved_stock(session, cart)
    await session.flush()
    await session.delete(cart)
    await session.flush()
    logger.info("Cart %s of user %s deleted", cart.id, user_id)
