"""
Repository abstract base class and generic implementation.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, List, Type, Iterable, Any
from sqlalchemy import inspect
from sqlalchemy.orm import make_transient, make_transient_to_detached
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import select, func
from dddkit.domain.aggregate import IAggregateRoot
from dddkit.exceptions.errors import InvalidArgumentError, NotSupportedError
from dddkit.logging.logger import get_logger
from .ports import SessionPort

T = TypeVar("T", bound=IAggregateRoot)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def add(self, entity: T) -> None:
        """Stage entity for insertion."""
        pass

    @abstractmethod
    async def add_range(self, entities: Iterable[T]) -> None:
        """Stage entities for insertion."""
        pass

    @abstractmethod
    async def remove(self, entity: T) -> None:
        """Stage entity for deletion."""
        pass

    @abstractmethod
    async def remove_by_id(self, id: uuid.UUID) -> bool:
        """Stage entity with the given id for deletion; False if there is none."""
        pass

    @abstractmethod
    async def remove_range(self, entities: Iterable[T]) -> None:
        """Stage entities for deletion, one by one."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> None:
        """Mark entity as modified, attaching it if needed."""
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """Get all entities."""
        pass

    @abstractmethod
    async def find(self, *predicates: Any) -> List[T]:
        """Get entities matching the predicates."""
        pass

    @abstractmethod
    async def find_by_id(self, id: uuid.UUID) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def get_some(self, *predicates: Any) -> List[T]:
        pass

    @abstractmethod
    async def get_by_id(self, id: uuid.UUID) -> T:
        pass


class Repository(IRepository[T]):
    """Generic repository over a SQLModel session; subclasses can add custom queries.

    Mutating calls only stage changes in the session; nothing reaches the database
    until the owning UnitOfWork saves. Reads run with autoflush disabled for the same reason.
    """

    def __init__(self, session: SessionPort, model: Type[T]):
        """Initialize repository with session and model."""
        if session is None:
            raise InvalidArgumentError.missing("session")
        self.session = session
        self.model = model
        self._log_name = f"{type(self).__name__}[{model.__name__}]"

    @property
    def logger(self):
        return get_logger(self._log_name)

    async def add(self, entity: T) -> None:
        if entity is None:
            raise InvalidArgumentError.missing("entity")
        self.session.add(entity)
        self.logger.debug(f"Staged insert of {self.model.__name__} {entity.id}")

    async def add_range(self, entities: Iterable[T]) -> None:
        if entities is None:
            raise InvalidArgumentError.missing("entities")
        entities = list(entities)
        self.session.add_all(entities)
        self.logger.debug(f"Staged insert of {len(entities)} {self.model.__name__} entities")

    async def remove(self, entity: T) -> None:
        """Stage entity for deletion.

        A pending (added, not yet saved) entity is just dropped from the session;
        a transient entity carrying an id is treated as an existing row.
        """
        if entity is None:
            raise InvalidArgumentError.missing("entity")

        state = inspect(entity)
        if state.pending:
            self.session.expunge(entity)
            self.logger.debug(f"Dropped pending insert of {self.model.__name__} {entity.id}")
            return
        if state.transient:
            make_transient_to_detached(entity)
            try:
                await self.session.delete(entity)
            except BaseException:
                make_transient(entity)
                raise
        else:
            await self.session.delete(entity)
        self.logger.debug(f"Staged delete of {self.model.__name__} {entity.id}")

    async def remove_by_id(self, id: uuid.UUID) -> bool:
        entity = await self.find_by_id(id)
        if entity is None:
            return False

        await self.remove(entity)
        return True

    async def remove_range(self, entities: Iterable[T]) -> None:
        """Stage each entity for deletion; earlier ones stay staged if a later one fails."""
        if entities is None:
            raise InvalidArgumentError.missing("entities")

        for entity in entities:
            await self.remove(entity)

    async def update(self, entity: T) -> None:
        """Attach entity if untracked and mark all loaded columns as modified.

        The entity's identity is not checked against the session first; attaching an
        untracked copy of an already tracked row fails with the session's error.
        """
        if entity is None:
            raise InvalidArgumentError.missing("entity")

        state = inspect(entity)
        if state.transient:
            make_transient_to_detached(entity)
            try:
                self.session.add(entity)
            except BaseException:
                make_transient(entity)
                raise
        elif entity not in self.session:
            self.session.add(entity)

        primary_keys = {column.key for column in state.mapper.primary_key}
        for attr in state.mapper.column_attrs:
            if attr.key not in primary_keys and attr.key in state.dict:
                flag_modified(entity, attr.key)
        self.logger.debug(f"Marked {self.model.__name__} {entity.id} as modified")

    async def get_all(self) -> List[T]:
        """Get all entities as a new list."""
        return await self._fetch_all(select(self.model))

    async def find(self, *predicates: Any) -> List[T]:
        """Get entities matching all predicates (e.g. Product.price > 10)."""
        if not predicates:
            raise InvalidArgumentError.missing("predicate")
        return await self._fetch_all(select(self.model).where(*predicates))

    async def find_by_id(self, id: uuid.UUID) -> Optional[T]:
        """Get entity by ID: staged inserts first, then the identity map, then the database."""
        for entity in self.session.new:
            if isinstance(entity, self.model) and entity.id == id:
                return entity
        with self.session.no_autoflush:
            return await self.session.get(self.model, id)

    async def get_some(self, *predicates: Any) -> List[T]:
        raise NotSupportedError(f"{type(self).__name__}.get_some is not implemented; use find()")

    async def get_by_id(self, id: uuid.UUID) -> T:
        raise NotSupportedError(f"{type(self).__name__}.get_by_id is not implemented; use find_by_id()")

    async def find_one(self, **filters) -> Optional[T]:
        """Find one entity by filters (e.g. sku='A-1')."""
        statement = select(self.model).where(*self._filter_clauses(filters))
        with self.session.no_autoflush:
            result = await self.session.exec(statement)
            return result.first()

    async def find_all(self, **filters) -> List[T]:
        """Find entities by filters."""
        return await self._fetch_all(select(self.model).where(*self._filter_clauses(filters)))

    async def count(self, *predicates: Any) -> int:
        """Count entities matching predicates (all when none given)."""
        statement = select(func.count(self.model.id)).where(*predicates)
        with self.session.no_autoflush:
            result = await self.session.exec(statement)
            return result.one()

    async def exists(self, id: uuid.UUID) -> bool:
        """Whether an entity with that id is staged, tracked or stored."""
        return await self.find_by_id(id) is not None

    def _filter_clauses(self, filters: dict) -> list:
        columns = {attr.key for attr in inspect(self.model).column_attrs}
        unknown = sorted(set(filters) - columns)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown filter(s) for {self.model.__name__}: {', '.join(unknown)}",
                detail={"unknown": unknown},
            )
        return [getattr(self.model, key) == value for key, value in filters.items()]

    async def _fetch_all(self, statement) -> List[T]:
        with self.session.no_autoflush:
            result = await self.session.exec(statement)
            return list(result.all())
