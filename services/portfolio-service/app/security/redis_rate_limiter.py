"""Redis-backed login rate limiter sharing state across service replicas."""

from __future__ import annotations

import time
from typing import Callable, Final

from redis import Redis
from redis.exceptions import ResponseError

from .rate_limiter import RateLimitConfig


class RedisVisitorRateLimiter:
    """Distributed counterpart of :class:`VisitorRateLimiter` using Redis hashes.

    Each client is a hash holding ``count`` and ``last_seen`` (milliseconds).
    Idle eviction is handled by a key TTL one millisecond longer than the
    window, refreshed only when a request is admitted.
    """

    _LUA_SCRIPT: Final[str] = """
    local key = KEYS[1]
    local window_ms = tonumber(ARGV[1])
    local max_requests = tonumber(ARGV[2])
    local now_ms = tonumber(ARGV[3])
    local ttl_ms = tonumber(ARGV[4])

    local state = redis.call('HMGET', key, 'count', 'last_seen')
    local count = tonumber(state[1])
    local last_seen = tonumber(state[2])

    if count == nil or last_seen == nil or now_ms - last_seen > window_ms then
        count = 0
    elseif count >= max_requests then
        return 0
    end
    redis.call('HSET', key, 'count', count + 1, 'last_seen', now_ms)
    redis.call('PEXPIRE', key, ttl_ms)
    return 1
    """

    def __init__(
        self,
        client: Redis,
        *,
        config: RateLimitConfig,
        key_prefix: str = "login-rate",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialise the Redis client, window configuration, and Lua script cache."""
        self._client = client
        self._config = config
        self._max_requests = config.max_requests
        self._window_ms = int(config.window_seconds * 1000)
        # A record is only stale strictly after the window, so the key must outlive it.
        self._ttl_ms = self._window_ms + 1
        self._key_prefix = key_prefix
        self._clock = clock
        self._script = client.register_script(self._LUA_SCRIPT)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def allow(self, client_id: str) -> bool:
        """Return ``True`` when ``client_id`` is still within the distributed limit."""
        now_ms = int(self._clock() * 1000)
        redis_key = f"{self._key_prefix}:{client_id}"
        try:
            result = self._script(keys=[redis_key], args=[self._window_ms, self._max_requests, now_ms, self._ttl_ms])
            return int(result) == 1
        except ResponseError as exc:
            message = str(exc).lower()
            if "unknown command" in message and "eval" in message:
                return self._allow_fallback(redis_key, now_ms)
            raise

    def _allow_fallback(self, redis_key: str, now_ms: int) -> bool:
        """Optimistic WATCH/MULTI variant used when Lua is unavailable."""

        def apply(pipe) -> bool:
            count, last_seen = pipe.hmget(redis_key, "count", "last_seen")
            if count is None or last_seen is None or now_ms - int(last_seen) > self._window_ms:
                new_count = 1
            elif int(count) >= self._max_requests:
                return False
            else:
                new_count = int(count) + 1
            pipe.multi()
            pipe.hset(redis_key, mapping={"count": new_count, "last_seen": now_ms})
            pipe.pexpire(redis_key, self._ttl_ms)
            return True

        return self._client.transaction(apply, redis_key, value_from_callable=True)

    def sweep(self) -> int:
        """Expiry is delegated to key TTLs; nothing to evict locally."""
        return 0

    def close(self) -> None:
        return None
