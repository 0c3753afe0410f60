"""
Error taxonomy for the repository / unit-of-work layer.

Store failures are not wrapped: SQLAlchemy errors (IntegrityError, OperationalError, ...)
reach the caller unchanged, and so does asyncio.CancelledError.
"""

from typing import Any


class DddKitError(Exception):
    """Base class for errors raised by this layer."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidArgumentError(DddKitError, ValueError):
    """A required argument is missing or not usable; raised before touching the session."""

    @classmethod
    def missing(cls, param_name: str) -> "InvalidArgumentError":
        return cls(f"Argument '{param_name}' must not be None", detail={"param": param_name})


class NotSupportedError(DddKitError, NotImplementedError):
    """Operation is part of the interface but intentionally not implemented."""


class UnitOfWorkDisposedError(DddKitError, RuntimeError):
    """Unit of work was used after dispose()."""
