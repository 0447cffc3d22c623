# tests/conftest.py
# ---------------------------------------------------------------------
# - every test gets its own in-memory sqlite database (aiosqlite)
# - `session` talks to it directly, `client` goes through the FastAPI app
#   with `get_db` overridden to the same database
# - per-product stock locks are reset between tests
# ---------------------------------------------------------------------
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from optical_sales.db import models  # noqa: F401
from optical_sales.db.base import Base, get_db
from optical_sales.db.models.purchase_orders import PurchaseListOrder
from optical_sales.domain.catalog.schemas import CategoryCreate, ProductCreate
from optical_sales.domain.catalog.service import create_category, create_product
from optical_sales.domain.inventory import service as inventory_service
from optical_sales.main import app

DAY_ONE = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_product_locks():
    inventory_service._product_locks.clear()
    yield
    inventory_service._product_locks.clear()


# ---------- seed helpers ----------

async def make_product(session, category_name, name="商品", price=100, **fields):
    category = await create_category(session, CategoryCreate(name=category_name))
    return await create_product(
        session,
        ProductCreate(name=name, category_id=category.id, price=price, **fields),
    )


@pytest.fixture
def receive_lot(session):
    """Add a purchase lot already stocked in ``days_after`` days after DAY_ONE."""
    seq = iter(range(1, 1000))

    async def receive(product, rows, days_after=0):
        lot = PurchaseListOrder(
            order_no=f"CGTEST{next(seq):03d}",
            product_id=product.id,
            product_name=product.name,
            rows=rows,
            stock_in_at=DAY_ONE + timedelta(days=days_after),
        )
        session.add(lot)
        await session.commit()
        await session.refresh(lot)
        return lot

    return receive


@pytest.fixture
async def lens(session):
    return await make_product(session, "镜片", name="非球面镜片", price=300)


@pytest.fixture
async def frame(session):
    return await make_product(session, "镜架", name="钛架", price=500, model="TX-1")


@pytest.fixture
async def cloth(session):
    return await make_product(session, "配件", name="镜布", price=10)
