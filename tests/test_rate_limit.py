import pytest

from liaise.services.rate_limit import InMemoryRateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _limiter(clock, **kwargs):
    return InMemoryRateLimiter(
        window_seconds=60,
        max_requests=10,
        clock=clock,
        cleanup_probability=0.0,
        **kwargs,
    )


@pytest.mark.anyio
async def test_allows_max_requests_then_rejects():
    limiter = _limiter(FakeClock())

    results = [await limiter.check("ip:1.2.3.4") for _ in range(10)]
    assert all(r.allowed for r in results)
    assert [r.remaining for r in results] == list(range(9, -1, -1))

    rejected = await limiter.check("ip:1.2.3.4")
    assert rejected.allowed is False
    assert rejected.remaining == 0


@pytest.mark.anyio
async def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = _limiter(clock)
    for _ in range(11):
        await limiter.check("user:a")

    clock.now += 61
    result = await limiter.check("user:a")

    assert result.allowed is True
    assert result.remaining == 9
    assert result.reset_at == clock.now + 60


@pytest.mark.anyio
async def test_identifiers_are_counted_separately():
    limiter = _limiter(FakeClock())
    for _ in range(10):
        await limiter.check("user:a")

    assert (await limiter.check("user:a")).allowed is False
    assert (await limiter.check("user:b")).allowed is True


@pytest.mark.anyio
async def test_cleanup_drops_only_expired_windows():
    clock = FakeClock()
    limiter = _limiter(clock)
    await limiter.check("old")
    clock.now += 30
    await limiter.check("fresh")
    clock.now += 31

    await limiter.cleanup()

    assert len(limiter) == 1


def test_retry_after_rounds_up_and_is_at_least_one():
    from liaise.services.rate_limit import RateLimitResult

    result = RateLimitResult(False, 0, reset_at=100.2)
    assert result.retry_after(99.0) == 2
    assert result.retry_after(100.5) == 1
