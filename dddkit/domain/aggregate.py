"""
Aggregate root marker: anything with a UUID ``id`` can be handled by the generic repository.
"""

import uuid
from typing import Protocol, runtime_checkable
from sqlmodel import SQLModel, Field


@runtime_checkable
class IAggregateRoot(Protocol):
    """Capability required from entities: a 128-bit unique identifier."""

    id: uuid.UUID


class AggregateRoot(SQLModel):
    """SQLModel base for aggregate roots; subclasses declare ``table=True``."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
