"""
Settings, SQL driver and database manager wiring.
"""
import pytest

from apps.catalog.unit_of_work import CatalogUnitOfWork
from dddkit.config import Settings
from dddkit.database.manager import DatabaseManager
from dddkit.database.sql_driver import SQLDriver
from dddkit.repository.unit_of_work import UnitOfWork


@pytest.fixture
def file_db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'dddkit_test.db'}"


@pytest.fixture
async def driver(file_db_url):
    import apps.models  # noqa: F401

    driver = SQLDriver(file_db_url)
    await driver.create_all()
    yield driver
    await driver.disconnect()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./env.db")
    monkeypatch.setenv("db_echo", "true")

    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./env.db"
    assert settings.DB_ECHO is True
    assert settings.DB_EXPIRE_ON_COMMIT is False


@pytest.mark.asyncio
async def test_driver_connects(driver: SQLDriver):
    await driver.connect()


@pytest.mark.asyncio
async def test_driver_unit_of_work_round_trip(driver: SQLDriver, make_product):
    product = make_product()

    async with driver.unit_of_work(CatalogUnitOfWork) as uow:
        await uow.products.add(product)
        assert await uow.save() == 1

    async with driver.unit_of_work(CatalogUnitOfWork) as uow:
        stored = await uow.products.find_by_id(product.id)
        assert stored is not product
        assert stored.sku == product.sku


@pytest.mark.asyncio
async def test_driver_default_unit_of_work_class(driver: SQLDriver):
    uow = driver.unit_of_work()
    try:
        assert type(uow) is UnitOfWork
    finally:
        await uow.dispose()


@pytest.mark.asyncio
async def test_get_session_yields_session(driver: SQLDriver):
    async for session in driver.get_session():
        assert session.in_transaction() is False


@pytest.mark.asyncio
async def test_manager_is_singleton(file_db_url):
    settings = Settings(_env_file=None, DATABASE_URL=file_db_url)
    try:
        manager = DatabaseManager.get_instance(settings)

        assert DatabaseManager.get_instance() is manager
        assert str(manager.sql.engine.url) == file_db_url
    finally:
        await DatabaseManager.reset()

    assert DatabaseManager._instance is None
