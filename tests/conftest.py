"""Test config and shared fixtures."""
import uuid
import pytest
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from apps.catalog.models import Product
from apps.catalog.repository import ProductRepository
from apps.catalog.unit_of_work import CatalogUnitOfWork


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create in-memory engine with all tables."""
    # Import all models so they are registered in metadata
    import apps.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine):
    """Factory for sessions on the shared test engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def uow(async_session: AsyncSession) -> AsyncGenerator[CatalogUnitOfWork, None]:
    """Unit of work owning the test session."""
    unit_of_work = CatalogUnitOfWork(async_session)
    yield unit_of_work
    await unit_of_work.dispose()


@pytest.fixture
def products(uow: CatalogUnitOfWork) -> ProductRepository:
    """Product repository over the unit of work's session."""
    return uow.products


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Build a transient product with a unique SKU."""
    def _make(**overrides) -> Product:
        values = {
            "sku": f"SKU-{uuid.uuid4().hex[:8]}",
            "name": "Widget",
            "price": 9.5,
            "stock": 3,
        }
        values.update(overrides)
        return Product(**values)
    return _make


@pytest.fixture
async def saved_product(uow: CatalogUnitOfWork, make_product) -> Product:
    """Product already persisted through the unit of work."""
    product = make_product(name="Saved")
    await uow.products.add(product)
    await uow.save()
    return product


@pytest.fixture
def mock_session() -> MagicMock:
    """Session double exposing the change-tracking surface the layer consumes."""
    session = MagicMock()
    session.new = []
    session.dirty = []
    session.deleted = []
    session.is_modified.return_value = True
    session.get = AsyncMock(return_value=None)
    session.exec = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session
