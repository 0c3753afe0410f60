"""Catalog module repository implementation."""

from typing import List, Optional
from dddkit.repository.base import Repository
from .models import Product


class ProductRepository(Repository[Product]):
    """Product repository."""

    def __init__(self, session):
        super().__init__(session, Product)

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        """Find product by SKU."""
        return await self.find_one(sku=sku)

    async def list_out_of_stock(self) -> List[Product]:
        return await self.find(Product.stock <= 0)
