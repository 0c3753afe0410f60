from typing import Type, TypeVar
from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from dddkit.repository.unit_of_work import UnitOfWork
from .base import BaseDatabaseDriver

U = TypeVar("U", bound=UnitOfWork)


class SQLDriver(BaseDatabaseDriver):
    """Async SQLModel engine plus session factory for any SQLAlchemy async URL."""

    def __init__(self, url: str, echo: bool = False, expire_on_commit: bool = False, **engine_kwargs):
        self.engine = create_async_engine(url, echo=echo, **engine_kwargs)
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=expire_on_commit
        )

    async def connect(self):
        """Check connectivity (the engine manages the pool itself)."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self):
        """Create tables for every imported SQLModel table class (local/test databases)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def disconnect(self):
        """Dispose the engine and its connection pool."""
        await self.engine.dispose()

    def new_session(self) -> AsyncSession:
        return self.session_factory()

    def unit_of_work(self, uow_class: Type[U] = UnitOfWork) -> U:
        """Open a session and hand its ownership to a new unit of work."""
        return uow_class(self.new_session())

    async def get_session(self):
        async with self.session_factory() as session:
            yield session
