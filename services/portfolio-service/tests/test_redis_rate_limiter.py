"""Tests for the Redis-backed login rate limiter."""

from __future__ import annotations

import fakeredis
import pytest
from redis.exceptions import ResponseError

from app.security.rate_limiter import RateLimitConfig
from app.security.redis_rate_limiter import RedisVisitorRateLimiter


class WallClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def redis_client() -> fakeredis.FakeStrictRedis:
    client = fakeredis.FakeStrictRedis()
    client.flushall()
    return client


@pytest.fixture()
def wall_clock() -> WallClock:
    return WallClock()


def make_limiter(client, clock, *, max_requests: int = 2, window: float = 60) -> RedisVisitorRateLimiter:
    return RedisVisitorRateLimiter(
        client,
        config=RateLimitConfig(max_requests=max_requests, window_seconds=window, block_seconds=window),
        key_prefix="test",
        clock=clock,
    )


def force_fallback(limiter: RedisVisitorRateLimiter) -> None:
    def unavailable(*args, **kwargs):
        raise ResponseError("unknown command `evalsha`, with args beginning with: ")

    limiter._script = unavailable


@pytest.fixture(params=["script", "fallback"])
def limiter_factory(request, redis_client, wall_clock):
    def build(**kwargs) -> RedisVisitorRateLimiter:
        limiter = make_limiter(redis_client, wall_clock, **kwargs)
        if request.param == "fallback":
            force_fallback(limiter)
        return limiter

    return build


def test_redis_rate_limiter_allows_within_threshold(limiter_factory):
    limiter = limiter_factory(max_requests=3)
    assert limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.1")


def test_redis_rate_limiter_blocks_excess(limiter_factory):
    limiter = limiter_factory(max_requests=2)
    assert limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.1")
    assert not limiter.allow("10.0.0.1")
    assert limiter.allow("10.0.0.2")


def test_redis_rejection_does_not_refresh_last_seen(limiter_factory, redis_client, wall_clock):
    limiter = limiter_factory(max_requests=1, window=10)
    assert limiter.allow("x")
    first_seen = redis_client.hget("test:x", "last_seen")

    wall_clock.now += 5
    assert not limiter.allow("x")
    assert redis_client.hget("test:x", "last_seen") == first_seen

    wall_clock.now += 5.5
    assert limiter.allow("x")
    assert int(redis_client.hget("test:x", "count")) == 1


def test_redis_admitted_request_sets_ttl(limiter_factory, redis_client):
    limiter = limiter_factory(window=60)
    assert limiter.allow("x")
    ttl = redis_client.pttl("test:x")
    assert 59_000 < ttl <= 60_001


def test_redis_record_exactly_one_window_old_is_still_limited(limiter_factory, wall_clock):
    limiter = limiter_factory(max_requests=1, window=60)
    assert limiter.allow("x")

    wall_clock.now += 60
    assert not limiter.allow("x")

    wall_clock.now += 0.001
    assert limiter.allow("x")


def test_redis_key_outlives_window(redis_client, wall_clock):
    limiter = make_limiter(redis_client, wall_clock, window=60)
    script = limiter._script
    sent = []

    def recording(keys, args):
        sent.append(args)
        return script(keys=keys, args=args)

    limiter._script = recording
    assert limiter.allow("x")

    window_ms, _, _, ttl_ms = sent[0]
    assert window_ms == 60_000
    # a record exactly one window old is still limited, so its key must not expire yet
    assert ttl_ms == window_ms + 1
    assert redis_client.pttl("test:x") > 59_000


def test_redis_unrelated_errors_propagate(redis_client, wall_clock):
    limiter = make_limiter(redis_client, wall_clock)

    def broken(*args, **kwargs):
        raise ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")

    limiter._script = broken
    with pytest.raises(ResponseError):
        limiter.allow("x")


def test_redis_sweep_and_close_are_noops(redis_client, wall_clock):
    limiter = make_limiter(redis_client, wall_clock)
    limiter.allow("x")
    assert limiter.sweep() == 0
    limiter.close()
    assert redis_client.exists("test:x")
