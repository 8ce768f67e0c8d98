import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from . import cart_service
from .database import transactional
from .exceptions import InvalidRequestError, ProductNotFound, UserNotFound
from .models import CartItem, Product, User
from .schemas import ProductCreate, UserCreate
from .security import get_password_hash

logger = logging.getLogger(__name__)


# 👤 Users
async def list_users(session: AsyncSession) -> List[User]:
    result = await session.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def get_user(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _apply_user_fields(user: User, payload: UserCreate) -> None:
    user.first_name = payload.first_name
    user.last_name = payload.last_name
    user.email = payload.email
    user.password_hash = get_password_hash(payload.password)
    user.phone = payload.phone
    user.address = payload.address
    # left unset, the column default fills in today's date on insert
    if payload.registered_on is not None:
        user.registered_on = payload.registered_on
    user.birth_date = payload.birth_date
    user.gender = payload.gender


async def _flush_unique(session: AsyncSession, message: str) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        raise InvalidRequestError(message) from exc


@transactional
async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    if await get_user_by_email(session, payload.email):
        raise InvalidRequestError("Ya existe un usuario con ese email")

    user = User()
    _apply_user_fields(user, payload)
    session.add(user)
    await _flush_unique(session, "Ya existe un usuario con ese email")
    logger.info("Created user %s", user.id)
    return user


@transactional
async def replace_user(session: AsyncSession, user_id: int, payload: UserCreate) -> User:
    user = await get_user(session, user_id)
    if user is None:
        raise UserNotFound(user_id)

    other = await get_user_by_email(session, payload.email)
    if other is not None and other.id != user_id:
        raise InvalidRequestError("Ya existe un usuario con ese email")

    _apply_user_fields(user, payload)
    await _flush_unique(session, "Ya existe un usuario con ese email")
    logger.info("Replaced user %s", user_id)
    return user


@transactional
async def delete_user(session: AsyncSession, user_id: int) -> None:
    """Delete a user together with their cart, giving reserved stock back."""
    user = await get_user(session, user_id)
    if user is None:
        raise UserNotFound(user_id)

    await cart_service.discard_cart(session, user_id)
    await session.delete(user)
    await session.flush()
    logger.info("Deleted user %s", user_id)


# 📦 Products
async def list_products(session: AsyncSession) -> List[Product]:
    result = await session.execute(select(Product).order_by(Product.id))
    return list(result.scalars().all())


async def get_product(session: AsyncSession, product_id: int) -> Optional[Product]:
    return await session.get(Product, product_id)


async def get_product_by_name(session: AsyncSession, name: str) -> Optional[Product]:
    result = await session.execute(select(Product).where(Product.name == name))
    return result.scalar_one_or_none()


def _apply_product_fields(product: Product, payload: ProductCreate) -> None:
    product.name = payload.name
    product.description = payload.description
    product.price = payload.price
    product.stock = payload.stock


@transactional
async def create_product(session: AsyncSession, payload: ProductCreate) -> Product:
    if await get_product_by_name(session, payload.name):
        raise InvalidRequestError("Ya existe un producto con ese nombre")

    product = Product()
    _apply_product_fields(product, payload)
    session.add(product)
    await _flush_unique(session, "Ya existe un producto con ese nombre")
    logger.info("Created product %s (%s) stock=%s", product.id, product.name, product.stock)
    return product


@transactional
async def replace_product(session: AsyncSession, product_id: int, payload: ProductCreate) -> Product:
    product = await get_product(session, product_id)
    if product is None:
        raise ProductNotFound(product_id)

    other = await get_product_by_name(session, payload.name)
    if other is not None and other.id != product_id:
        raise InvalidRequestError("Ya existe un producto con ese nombre")

    _apply_product_fields(product, payload)
    await _flush_unique(session, "Ya existe un producto con ese nombre")
    logger.info("Replaced product %s stock=%s", product_id, product.stock)
    return product


@transactional
async def delete_product(session: AsyncSession, product_id: int) -> None:
    """Delete a product after removing the cart items that point at it."""
    product = await get_product(session, product_id)
    if product is None:
        raise ProductNotFound(product_id)

    await session.execute(delete(CartItem).where(CartItem.product_id == product_id))
    await session.delete(product)
    await session.flush()
    logger.info("Deleted product %s", product_id)
