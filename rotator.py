import asyncio
import logging
import threading
from typing import Sequence

from exceptions import EmptySnapshotSequenceError
from models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotRotator:
    """
    Owns the preloaded snapshot sequence and the cursor into it.

    The cursor is the only mutable state. advance() is the single writer and
    current_snapshot() is called concurrently by request handlers; both hold
    the same lock, and only long enough to move the cursor or copy a snapshot
    reference out. Serialization happens in the caller, outside the lock.
    """

    def __init__(self, snapshots: Sequence[Snapshot], start: int = 0):
        if len(snapshots) == 0:
            raise EmptySnapshotSequenceError()
        self._snapshots = tuple(snapshots)
        self._cursor = start % len(self._snapshots)
        self._ticks = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    @property
    def ticks(self) -> int:
        with self._lock:
            return self._ticks

    def advance(self) -> int:
        with self._lock:
            self._cursor = (self._cursor + 1) % len(self._snapshots)
            self._ticks += 1
            return self._cursor

    def current_snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshots[self._cursor]

    async def run(self, interval: float) -> None:
        """Advance every `interval` seconds until cancelled. Free-running: no drift or catch-up handling."""
        logger.info("Rotating %d snapshots every %ss", len(self._snapshots), interval)
        try:
            while True:
                await asyncio.sleep(interval)
                cursor = self.advance()
                logger.debug("Advanced to snapshot %d/%d", cursor, len(self._snapshots))
        except asyncio.CancelledError:
            logger.info("Rotation stopped after %d ticks", self.ticks)
            raise
