from dumplens.adapters.base import StoreAdapter
from dumplens.adapters.sqlite import SQLiteAdapter

__all__ = [
    "StoreAdapter",
    "SQLiteAdapter",
]
