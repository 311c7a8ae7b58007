"""Storage abstraction layer for the billing backend."""

from .base import Storage, DuplicateMenuCode
from .inmemory import InMemoryStorage
from .sqlalchemy_adapter import SQLAlchemyStorage

__all__ = ["Storage", "DuplicateMenuCode", "InMemoryStorage", "SQLAlchemyStorage"]
