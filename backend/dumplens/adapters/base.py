"""Base store adapter interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class StoreAdapter(ABC):
    """Abstract base class for target store adapters"""

    @abstractmethod
    async def connect(self) -> None:
        """Open the store"""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the store connection"""
        pass

    @abstractmethod
    async def execute(self, sql: str) -> List[Dict[str, Any]]:
        """Execute one statement and return its rows (or a change summary)"""
        pass

    @abstractmethod
    async def list_tables(self) -> List[str]:
        """Names of user tables, sorted"""
        pass

    @abstractmethod
    async def describe_table(self, name: str) -> List[Dict[str, Any]]:
        """Column descriptors of one table"""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is usable"""
        pass

    async def __aenter__(self) -> "StoreAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
