"""Document stores package."""

from .base import BaseStore
from .mongo_store import MongoStore

__all__ = ["BaseStore", "MongoStore"]
