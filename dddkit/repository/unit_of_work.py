"""
Unit of Work: owns the session, persists staged changes in one save, releases the session once.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Dict, Generic, Type, TypeVar
from dddkit.exceptions.errors import InvalidArgumentError, UnitOfWorkDisposedError
from dddkit.logging.logger import get_logger
from .ports import SessionPort

S = TypeVar("S", bound=SessionPort)
R = TypeVar("R")


class IUnitOfWork(ABC):
    """Unit of work interface."""

    @abstractmethod
    async def save(self) -> int:
        """Persist all staged changes; return the number of affected entities."""
        pass

    @abstractmethod
    async def dispose(self) -> None:
        """Release the session; safe to call more than once."""
        pass


class UnitOfWork(IUnitOfWork, Generic[S]):
    """Owns one session shared by the repositories built over it.

    Use ``async with`` (or call dispose()) to release the session deterministically:

        async with UnitOfWork(session) as uow:
            await uow.get_repository(ProductRepository).add(product)
            await uow.save()
    """

    def __init__(self, session: S):
        """Initialize UnitOfWork; it takes ownership of the session."""
        if session is None:
            raise InvalidArgumentError.missing("session")

        self.session = session
        self.id = uuid.uuid4().hex[:12]
        self._repositories: Dict[type, object] = {}
        self._disposed = False

    @property
    def logger(self):
        return get_logger(type(self).__name__)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def get_repository(self, repo_class: Type[R]) -> R:
        """Get or create a repository instance over the owned session (cached)."""
        self._ensure_active("get_repository")
        if repo_class not in self._repositories:
            self._repositories[repo_class] = repo_class(self.session)
        return self._repositories[repo_class]

    def pending_changes(self) -> int:
        """Number of entities the next save() will insert, update or delete."""
        modified = sum(1 for entity in self.session.dirty if self.session.is_modified(entity))
        return len(self.session.new) + modified + len(self.session.deleted)

    async def save(self) -> int:
        """Flush and commit all staged changes; store errors propagate unchanged."""
        self._ensure_active("save")
        affected = self.pending_changes()
        await self.session.commit()
        self.logger.info(f"UnitOfWork {self.id} saved {affected} change(s)")
        return affected

    async def rollback(self) -> None:
        """Discard all staged changes."""
        self._ensure_active("rollback")
        await self.session.rollback()
        self.logger.debug(f"UnitOfWork {self.id} rolled back")

    async def dispose(self) -> None:
        if self._disposed:
            return

        self._disposed = True
        self._repositories.clear()
        await self.session.close()
        self.logger.debug(f"UnitOfWork {self.id} disposed")

    def _ensure_active(self, operation: str) -> None:
        if self._disposed:
            raise UnitOfWorkDisposedError(
                f"Cannot {operation}: UnitOfWork {self.id} has been disposed",
                detail={"unit_of_work": self.id},
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None and not self._disposed:
                await self.rollback()
        finally:
            await self.dispose()

    def __del__(self):
        # Only a safety net: an AsyncSession cannot be closed from a finalizer
        if not getattr(self, "_disposed", True):
            self.logger.warning(f"UnitOfWork {self.id} was garbage-collected without dispose()")
