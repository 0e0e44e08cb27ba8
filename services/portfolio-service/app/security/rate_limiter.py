"""In-memory per-client login rate limiter with a background sweeper."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    """Limiter parameters fixed at construction.

    ``block_seconds`` is accepted for configuration symmetry only: a blocked
    client is released once ``window_seconds`` have passed since its last
    admitted request, whatever ``block_seconds`` says.
    """

    max_requests: int
    window_seconds: float
    block_seconds: float


@dataclass(slots=True)
class Visitor:
    """Per-client state: requests admitted in the current window."""

    last_seen: float
    count: int


class VisitorRateLimiter:
    """Thread-safe fixed-threshold limiter keyed by client identifier.

    Every read-modify-write of the visitor table, including the periodic
    sweep, happens under a single lock.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float | None = 60.0,
    ) -> None:
        """Initialise limiter state and start the sweeper unless ``sweep_interval`` is ``None``."""
        self._config = config
        self._clock = clock
        self._visitors: dict[str, Visitor] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._sweeper: threading.Thread | None = None
        if sweep_interval is not None:
            self._sweeper = threading.Thread(
                target=self._sweep_forever,
                args=(sweep_interval,),
                name="login-rate-limit-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def allow(self, client_id: str) -> bool:
        """Return ``True`` when ``client_id`` may proceed, recording the attempt."""
        with self._lock:
            now = self._clock()
            visitor = self._visitors.get(client_id)
            if visitor is None:
                self._visitors[client_id] = Visitor(last_seen=now, count=1)
                return True

            if now - visitor.last_seen > self._config.window_seconds:
                visitor.count = 1
                visitor.last_seen = now
                return True

            # Rejections leave last_seen alone so retries never extend the block.
            if visitor.count >= self._config.max_requests:
                return False

            visitor.count += 1
            visitor.last_seen = now
            return True

    def sweep(self) -> int:
        """Evict visitors idle for longer than the window; return how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [
                client_id
                for client_id, visitor in self._visitors.items()
                if now - visitor.last_seen > self._config.window_seconds
            ]
            for client_id in stale:
                del self._visitors[client_id]
        if stale:
            logger.debug("evicted %d idle rate-limit entries", len(stale))
        return len(stale)

    def get(self, client_id: str) -> Visitor | None:
        """Return a snapshot of the visitor record for ``client_id``."""
        with self._lock:
            visitor = self._visitors.get(client_id)
            return replace(visitor) if visitor is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._visitors)

    def close(self) -> None:
        """Stop the background sweeper. Safe to call more than once."""
        self._stopped.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=5)
        self._sweeper = None

    def _sweep_forever(self, interval: float) -> None:
        while not self._stopped.wait(interval):
            try:
                self.sweep()
            except Exception:  # pragma: no cover - keep the sweeper alive
                logger.exception("rate limiter sweep failed")
