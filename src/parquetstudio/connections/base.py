"""
Connection factory contract for the embedded engine.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseConnection(ABC):
    """
    Opens and closes connections to one engine database.

    The engine calls `connect()` from worker threads; the async helpers are
    for callers already on the event loop and default to running the
    blocking calls through asyncio.to_thread().
    """

    def __init__(self, database: str, options: Optional[Dict[str, Any]] = None):
        self.database = database
        self.options = dict(options or {})

    @abstractmethod
    def connect(self) -> Any:
        """Return a new open connection."""

    async def get_connection(self) -> Any:
        return await asyncio.to_thread(self.connect)

    @abstractmethod
    async def close_connection(self, conn: Any) -> None:
        """Release a connection returned by connect() or get_connection()."""

    async def is_connection_alive(self, conn: Any) -> bool:
        # Factories without a cheap liveness check report every connection as usable
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(database={self.database!r})"
