"""Tests for the per-actor rate limiter."""

from cmdgate.gate.rate_limit import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(
        max_per_window=2,
        window_seconds=60,
        max_violations=2,
        lockout_seconds=900,
        clock=clock,
    )


def test_allows_up_to_budget():
    limiter = _limiter(FakeClock())
    assert limiter.check("admin").allowed
    assert limiter.check("admin").allowed
    denied = limiter.check("admin")
    assert not denied.allowed
    assert denied.reason == "rate limit exceeded"
    assert denied.retry_after == 60


def test_actors_are_independent():
    limiter = _limiter(FakeClock())
    limiter.check("a")
    limiter.check("a")
    assert not limiter.check("a").allowed
    assert limiter.check("b").allowed


def test_window_resets():
    clock = FakeClock()
    limiter = _limiter(clock)
    limiter.check("admin")
    limiter.check("admin")
    assert not limiter.check("admin").allowed
    clock.advance(60)
    assert limiter.check("admin").allowed


def test_lockout_after_repeated_violations():
    clock = FakeClock()
    limiter = _limiter(clock)
    limiter.check("admin")
    limiter.check("admin")
    assert not limiter.check("admin").allowed
    locked = limiter.check("admin")
    assert not locked.allowed
    assert "locked out" in locked.reason
    assert locked.retry_after == 900

    # A fresh window does not lift the lockout.
    clock.advance(120)
    still = limiter.check("admin")
    assert not still.allowed
    assert "locked out" in still.reason

    clock.advance(900)
    assert limiter.check("admin").allowed


def test_reset():
    limiter = _limiter(FakeClock())
    limiter.check("admin")
    limiter.check("admin")
    limiter.reset("admin")
    assert limiter.check("admin").allowed
    limiter.reset()
    assert limiter.check("admin").allowed
