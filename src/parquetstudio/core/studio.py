"""
Studio keeps track of every open Parquet file.

Files are keyed by their canonical path: opening a file that is already open
returns its existing session, and two concurrent opens of the same file
share a single load. Loading and saving run in worker threads so the event
loop stays responsive while DuckDB works.
"""
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Union

from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import SessionError
from parquetstudio.utility.path_helper import PathHelper

from .config import StudioConfig
from .engine import ParquetEngine
from .session import ParquetSession


class Studio:
    """
    Registry of open ParquetSessions.

    Example:
        ```python
        studio = Studio(StudioConfig.find())
        session = await studio.open("data/users.parquet")
        session.add_row()
        await studio.save("data/users.parquet")
        studio.close("data/users.parquet")
        ```
    """

    def __init__(
        self,
        config: Optional[StudioConfig] = None,
        engine: Optional[ParquetEngine] = None,
    ):
        self.config = config or StudioConfig()
        self.engine = engine or ParquetEngine(self.config.engine.connection_factory())
        self._sessions: Dict[Path, ParquetSession] = {}
        self._opening: Dict[Path, asyncio.Task] = {}
        self._lock = asyncio.Lock()
        self.logger = get_logger("parquetstudio.studio")

    @property
    def sessions(self) -> List[ParquetSession]:
        return list(self._sessions.values())

    def is_open(self, path: Union[str, Path]) -> bool:
        return PathHelper.normalize(path) in self._sessions

    def get(self, path: Union[str, Path]) -> Optional[ParquetSession]:
        return self._sessions.get(PathHelper.normalize(path))

    async def open(self, path: Union[str, Path]) -> ParquetSession:
        """
        Open a Parquet file, or return its session if it is already open.

        Raises:
            ParquetReadError: If the file cannot be read
        """
        key = PathHelper.normalize(path)

        async with self._lock:
            existing = self._sessions.get(key)
            if existing is not None:
                self.logger.info(f"Already open: {key.name}")
                return existing

            task = self._opening.get(key)
            if task is None:
                task = asyncio.create_task(self._load(key))
                self._opening[key] = task
            else:
                self.logger.debug(f"Waiting for in-flight open of {key.name}")

        try:
            return await task
        finally:
            async with self._lock:
                if self._opening.get(key) is task:
                    del self._opening[key]

    async def _load(self, key: Path) -> ParquetSession:
        session = ParquetSession(self.engine, self.config)
        await asyncio.to_thread(session.open, key)
        async with self._lock:
            self._sessions[key] = session
        return session

    async def save(
        self,
        path: Union[str, Path],
        output: Optional[Union[str, Path]] = None,
        **kwargs,
    ) -> Path:
        """
        Save an open file, back to itself unless output is given.

        Keyword arguments are passed to ParquetSession.save.

        Raises:
            SessionError: If the file is not open
        """
        session = self.get(path)
        if session is None:
            raise SessionError(f"File is not open: {path}")

        if output is None:
            return await asyncio.to_thread(session.save_in_place, **kwargs)
        return await asyncio.to_thread(session.save, output, **kwargs)

    def close(self, path: Union[str, Path]) -> bool:
        """Close a file; returns False when it was not open."""
        session = self._sessions.pop(PathHelper.normalize(path), None)
        if session is None:
            return False
        if session.is_dirty:
            self.logger.warning(f"Closing {session.display_name} with unsaved changes")
        session.close()
        return True

    def close_all(self) -> int:
        """Close every open file and return how many were closed."""
        keys = list(self._sessions)
        for key in keys:
            self.close(key)
        return len(keys)
