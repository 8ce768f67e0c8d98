"""Per-product stock counter.

Stock held by a product is what is still available; units sitting in carts
have already been debited. Every change goes through :func:`apply_delta`,
which locks the product row first so concurrent debits on the same product
are applied one after the other.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import transactional
from .exceptions import InsufficientStockError, ProductNotFound
from .models import Product

logger = logging.getLogger(__name__)


def product_for_update(product_id: int):
    return (
        select(Product)
        .where(Product.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def lock_product(session: AsyncSession, product_id: int) -> Product:
    """Load a product with a row lock (SELECT ... FOR UPDATE) and fresh state."""
    result = await session.execute(product_for_update(product_id))
    product = result.scalar_one_or_none()
    if product is None:
        raise ProductNotFound(product_id)
    return product


async def apply_delta(session: AsyncSession, product_id: int, delta: int) -> Product:
    """Add ``delta`` (negative to debit) to the product's stock.

    Runs inside the caller's transaction; nothing is committed here.
    Raises ProductNotFound or InsufficientStockError, leaving stock untouched.
    """
    product = await lock_product(session, product_id)
    new_stock = product.stock + delta
    if new_stock < 0:
        logger.warning(
            "Stock adjustment rejected: product=%s stock=%s delta=%s",
            product_id, product.stock, delta,
        )
        raise InsufficientStockError(product_id, requested=-delta, available=product.stock)

    product.stock = new_stock
    await session.flush()
    logger.info("Stock adjusted: product=%s delta=%+d stock=%s", product_id, delta, new_stock)
    return product


@transactional
async def adjust_stock(session: AsyncSession, product_id: int, delta: int) -> Product:
    return await apply_delta(session, product_id, delta)
