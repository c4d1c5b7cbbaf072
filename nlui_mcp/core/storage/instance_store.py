"""
Instance Store
==============

Ephemeral in-memory store mapping opaque instance identifiers to UI
descriptions, with a background sweep that drops entries older than the TTL.
"""

from typing import Any, Callable, Dict, Optional
import asyncio
import copy
import threading
import time
import uuid

from nlui_mcp.config.logging import get_logger
from nlui_mcp.models.schemas import StoredInstance

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


class InstanceStore:
    """
    Single-process store for UI instances.

    Mutations never await, so put() and sweep() are atomic on the event loop;
    the lock covers callers running in a threadpool.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if sweep_interval_seconds >= ttl_seconds:
            raise ValueError("sweep_interval_seconds must be less than ttl_seconds")

        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._instances: Dict[str, StoredInstance] = {}
        self._lock = threading.Lock()
        self.sweep_task: Optional[asyncio.Task[None]] = None
        self.logger: Any = logger.bind(component="instance_store")

    def put(self, payload: Dict[str, Any]) -> str:
        """
        Store a UI description.

        Args:
            payload: NLUI document

        Returns:
            Fresh instance identifier
        """
        instance_id = str(uuid.uuid4())
        instance = StoredInstance(
            id=instance_id, payload=copy.deepcopy(payload), created_at=self._clock()
        )
        with self._lock:
            self._instances[instance_id] = instance

        self.logger.debug("Instance stored", instance_id=instance_id)
        return instance_id

    def get(self, instance_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a stored UI description.

        Returns:
            A copy of the payload, or None if the id is unknown or swept
        """
        instance = self._instances.get(instance_id)
        if instance is None:
            return None
        return copy.deepcopy(instance.payload)

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Delete every instance older than the TTL.

        Returns:
            Number of removed instances
        """
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                instance_id
                for instance_id, instance in self._instances.items()
                if now - instance.created_at > self.ttl_seconds
            ]
            for instance_id in expired:
                del self._instances[instance_id]

        if expired:
            self.logger.info("Expired instances swept", removed=len(expired), remaining=len(self))
        return len(expired)

    def start(self) -> None:
        """Start the background sweep task on the running loop."""
        if self.sweep_task is None or self.sweep_task.done():
            self.sweep_task = asyncio.create_task(self._sweep_loop())
            self.logger.info(
                "Sweep task started",
                ttl_seconds=self.ttl_seconds,
                interval_seconds=self.sweep_interval_seconds,
            )

    async def stop(self) -> None:
        """Cancel the background sweep task."""
        if self.sweep_task is None:
            return
        self.sweep_task.cancel()
        try:
            await self.sweep_task
        except asyncio.CancelledError:
            pass
        self.sweep_task = None
        self.logger.info("Sweep task stopped")

    async def _sweep_loop(self) -> None:
        """Background task to drop expired instances."""
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                self.sweep()
            except Exception as e:
                self.logger.error("Error in sweep loop", error=str(e), exc_info=True)

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._instances
