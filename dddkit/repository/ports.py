"""
Session port: what the repository and unit of work need from the ORM session.

sqlmodel.ext.asyncio.session.AsyncSession satisfies it; tests may pass any object
with the same shape.
"""

from typing import Any, ContextManager, Iterable, Optional, Protocol, Type, TypeVar

_E = TypeVar("_E")


class SessionPort(Protocol):
    """Change-tracking session consumed by Repository and UnitOfWork."""

    # Change sets tracked since the last commit/rollback
    new: Any
    dirty: Any
    deleted: Any
    no_autoflush: ContextManager[Any]

    def __contains__(self, instance: object) -> bool: ...

    def add(self, instance: object) -> None: ...

    def add_all(self, instances: Iterable[object]) -> None: ...

    def expunge(self, instance: object) -> None: ...

    def is_modified(self, instance: object) -> bool: ...

    async def delete(self, instance: object) -> None: ...

    async def get(self, entity: Type[_E], ident: Any) -> Optional[_E]: ...

    async def exec(self, statement: Any) -> Any: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def close(self) -> None: ...
