"""
Geofence Data Cache - Memoized boundary data preloading

One load per process. Concurrent callers share the in-flight load; a failed
load is forgotten so the next preload() retries.
"""

import asyncio
from typing import Optional

from regionfence.exceptions import DataLoadError
from regionfence.modules.geofence_manager.boundary_store import BoundaryDataStore
from regionfence.utils.logger import get_logger

class GeofenceDataCache:
    """Preloads the boundary data store exactly once"""

    def __init__(self, store: BoundaryDataStore):
        self.store = store
        self.logger = get_logger(__name__)
        self._load_task: Optional[asyncio.Task] = None
        self.load_count = 0
        self.last_error: Optional[DataLoadError] = None

    def is_loaded(self) -> bool:
        return self.store.loaded

    def is_loading(self) -> bool:
        return self._load_task is not None and not self._load_task.done()

    def start_preload(self) -> asyncio.Task:
        """Schedule the load in the background and return the shared task"""

        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
            # Retrieve failures so an unawaited background task does not warn
            self._load_task.add_done_callback(self._on_load_done)
        return self._load_task

    async def preload(self) -> None:
        """Resolve once boundary data is resident; raises DataLoadError on failure"""

        if self.store.loaded:
            return

        await asyncio.shield(self.start_preload())

    async def wait_ready(self) -> bool:
        """
        Await an in-flight preload if one exists.

        Returns whether data is resident. Does not start a load and does not
        raise when the load fails.
        """

        if self.store.loaded:
            return True

        task = self._load_task
        if task is None:
            return False

        try:
            await asyncio.shield(task)
        except DataLoadError:
            return False
        return self.store.loaded

    async def _load(self) -> None:
        self.load_count += 1
        try:
            await self.store.load()
        except DataLoadError as e:
            self.last_error = e
            self.logger.error(f"Boundary data load failed: {e}")
            raise
        self.last_error = None

    def _on_load_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._load_task = None
            return

        if task.exception() is not None:
            self._load_task = None
