import pytest

from config import DEFAULT_RATE_LIMITS
from src.adapter.services.rate_limiter import InMemoryRateLimiter


@pytest.mark.asyncio
async def test_allows_up_to_max_then_denies():
    limiter = InMemoryRateLimiter({"login": {"max": 3, "window_seconds": 60}})

    decisions = [await limiter.hit("login", "198.51.100.1") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert decisions[0].remaining == 2
    assert decisions[-1].remaining == 0
    assert 1 <= decisions[-1].retry_after <= 60


@pytest.mark.asyncio
async def test_keys_and_rules_are_independent():
    limiter = InMemoryRateLimiter(
        {"login": {"max": 1, "window_seconds": 60}, "register": {"max": 1, "window_seconds": 60}}
    )

    assert (await limiter.hit("login", "198.51.100.1")).allowed
    assert not (await limiter.hit("login", "198.51.100.1")).allowed
    assert (await limiter.hit("login", "198.51.100.2")).allowed
    assert (await limiter.hit("register", "198.51.100.1")).allowed


@pytest.mark.asyncio
async def test_window_slides():
    """
    Given a rule of two hits per minute, exhausted at t=0 and t=30
    When the clock reaches t=61
    Then the first hit has left the window and one more is allowed
    """
    clock = {"now": 1000.0}
    limiter = InMemoryRateLimiter(
        {"api": {"max": 2, "window_seconds": 60}}, clock=lambda: clock["now"]
    )

    await limiter.hit("api", "k")
    clock["now"] += 30
    await limiter.hit("api", "k")
    denied = await limiter.hit("api", "k")
    assert not denied.allowed
    assert denied.retry_after == 30

    clock["now"] += 31

    assert (await limiter.hit("api", "k")).allowed
    assert not (await limiter.hit("api", "k")).allowed


@pytest.mark.asyncio
async def test_reset_clears_counters():
    limiter = InMemoryRateLimiter({"api": {"max": 1, "window_seconds": 60}})
    await limiter.hit("api", "k")
    assert not (await limiter.hit("api", "k")).allowed

    await limiter.reset()

    assert (await limiter.hit("api", "k")).allowed


@pytest.mark.asyncio
async def test_default_rules():
    limiter = InMemoryRateLimiter(DEFAULT_RATE_LIMITS)

    results = [(await limiter.hit("login", "203.0.113.9")).allowed for _ in range(6)]

    assert results == [True] * 5 + [False]
    assert set(limiter.rules) == {"login", "register", "password_reset", "api", "admin_action"}
