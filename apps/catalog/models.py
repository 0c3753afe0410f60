from typing import Optional
from sqlmodel import Field
from dddkit.domain.aggregate import AggregateRoot

class Product(AggregateRoot, table=True):
    __tablename__ = "products"
    sku: str = Field(unique=True, index=True)
    name: str
    price: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0)
    description: Optional[str] = None
