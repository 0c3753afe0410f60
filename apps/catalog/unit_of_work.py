"""Catalog unit of work: one session shared by the catalog repositories."""

from dddkit.repository.unit_of_work import UnitOfWork
from .repository import ProductRepository


class CatalogUnitOfWork(UnitOfWork):
    """Unit of work exposing the catalog repositories."""

    @property
    def products(self) -> ProductRepository:
        return self.get_repository(ProductRepository)
