import os

# the application engine is never used by the tests; keep it off Postgres
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTO_CREATE_TABLES"] = "0"

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from ecomerce import crud, ledger
from ecomerce.database import Base, get_session
from ecomerce.main import app
from ecomerce.models import Cart, CartItem, Product
from ecomerce.schemas import ProductCreate, UserCreate


@pytest.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def make_user(session, email="ana.rojas@example.com") -> int:
    user = await crud.create_user(
        session,
        UserCreate(nombre="Ana", apellido="Rojas", email=email, password="secreto123"),
    )
    return user.id


async def make_product(session, name="Jabón sólido", stock=10, price=4.5) -> int:
    product = await crud.create_product(
        session,
        ProductCreate(nombreProducto=name, descripcion="Jabón artesanal", precio=price, stock=stock),
    )
    return product.id


async def stock_of(session, product_id: int) -> int:
    result = await session.execute(select(Product.stock).where(Product.id == product_id))
    return result.scalar_one()


async def reserved_quantity(session, user_id: int, product_id: int):
    """Quantity of the product in the user's cart, None when absent."""
    result = await session.execute(
        select(CartItem.quantity)
        .join(Cart, Cart.id == CartItem.cart_id)
        .where(Cart.user_id == user_id, CartItem.product_id == product_id)
    )
    return result.scalar_one_or_none()


@pytest.fixture
async def user_id(session):
    return await make_user(session)


@pytest.fixture
async def product_id(session):
    return await make_product(session, stock=10)


def fail_on_call(monkeypatch, n):
    """Make the n-th stock adjustment blow up; earlier ones run normally."""
    original = ledger.apply_delta
    calls = []

    async def flaky(session, product_id, delta):
        calls.append(product_id)
        if len(calls) == n:
            raise RuntimeError("connection lost")
        return await original(session, product_id, delta)

    monkeypatch.setattr(ledger, "apply_delta", flaky)
    return calls
