"""
Per-client rate limiting: one permitted call per interval per identity.

The limiter delegates to a store whose ``check_and_update`` must be atomic
for a given client, otherwise two near-simultaneous requests could both
pass.
"""

import fcntl
import re
import threading
import time
from pathlib import Path
from typing import Callable, Protocol

import anyio.to_thread
import structlog

from ..config import Config

logger = structlog.get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9\-_.]", re.IGNORECASE)


class ThrottleStore(Protocol):
    def check_and_update(self, client_id: str, now: float, interval: float) -> bool:
        """Record ``now`` for the client and return True, unless its last
        permitted call was less than ``interval`` seconds ago."""
        ...


class MemoryThrottleStore:
    """In-process store; suitable for a single-process deployment."""

    def __init__(self, max_clients: int = 10000) -> None:
        self.max_clients = max_clients
        self.last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def check_and_update(self, client_id: str, now: float, interval: float) -> bool:
        with self._lock:
            last = self.last_seen.get(client_id)
            if last is not None and now - last < interval:
                return False

            self.last_seen[client_id] = now
            if len(self.last_seen) > self.max_clients:
                self._prune(now, interval)
            return True

    def _prune(self, now: float, interval: float) -> None:
        expired = [cid for cid, ts in self.last_seen.items() if now - ts >= interval]
        for cid in expired:
            del self.last_seen[cid]
        logger.debug("Pruned throttle entries", removed=len(expired))


class FileThrottleStore:
    """One timestamp file per client, guarded by an exclusive flock.

    Works across worker processes sharing a filesystem.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)

    def path_for(self, client_id: str) -> Path:
        return self.directory / f"last_{_UNSAFE_FILENAME_CHARS.sub('_', client_id)}"

    def check_and_update(self, client_id: str, now: float, interval: float) -> bool:
        with open(self.path_for(client_id), "a+", encoding="ascii") as fh:
            fcntl.flock(fh, fcntl.LOCK_EX)
            fh.seek(0)
            raw = fh.read().strip()
            try:
                last = float(raw) if raw else None
            except ValueError:
                logger.warning("Corrupt throttle file, resetting", client=client_id)
                last = None

            if last is not None and now - last < interval:
                return False

            fh.seek(0)
            fh.truncate()
            fh.write(repr(now))
            fh.flush()
            return True


class RateLimiter:
    """Minimum-interval limiter keyed by client identity."""

    def __init__(
        self,
        config: Config,
        store: ThrottleStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.interval = config.rate_limit_interval
        self.clock = clock
        if store is None:
            if config.rate_limit_store == "file":
                store = FileThrottleStore(config.rate_limit_dir)
            else:
                store = MemoryThrottleStore(config.rate_limit_max_clients)
        self.store = store

    async def allow(self, client_id: str) -> bool:
        """Return True if the client may issue a lookup now.

        The store may block on file locks, so it runs in a worker thread.
        """
        allowed = await anyio.to_thread.run_sync(
            self.store.check_and_update, client_id, self.clock(), self.interval
        )
        if not allowed:
            logger.info("Rate limit hit", client=client_id, interval=self.interval)
        return allowed
