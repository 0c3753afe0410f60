"""
Repository pattern: data access abstraction over a change-tracking session, with a unit of work owning that session.
"""

from .base import IRepository, Repository
from .ports import SessionPort
from .unit_of_work import IUnitOfWork, UnitOfWork

__all__ = ["IRepository", "Repository", "SessionPort", "IUnitOfWork", "UnitOfWork"]
