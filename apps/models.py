"""
Model registration: import every table model here so SQLModel.metadata knows about it
before create_all() runs.
"""
from apps.catalog.models import Product

__all__ = ["Product"]
