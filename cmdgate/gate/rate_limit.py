"""Per-actor command rate limiting with lockout.

Each actor gets a fixed window budget. A request over budget counts as a
violation; enough violations lock the actor out for a while.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class RateLimitDecision:
    """Outcome of a rate-limit check."""

    allowed: bool
    reason: str | None = None
    retry_after: float | None = None  # seconds until the actor may try again


@dataclass(slots=True)
class _ActorState:
    window_start: float
    count: int = 0
    violations: int = 0
    locked_until: float | None = None


class RateLimiter:
    """In-memory fixed-window limiter, safe to share across threads."""

    def __init__(
        self,
        *,
        max_per_window: int = 10,
        window_seconds: float = 60.0,
        max_violations: int = 3,
        lockout_seconds: float = 15 * 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_per_window = max_per_window
        self._window = window_seconds
        self._max_violations = max_violations
        self._lockout = lockout_seconds
        self._clock = clock
        self._actors: dict[str, _ActorState] = {}
        self._lock = threading.Lock()

    def check(self, actor: str) -> RateLimitDecision:
        """Record one attempt by ``actor`` and decide whether it may proceed."""
        now = self._clock()
        with self._lock:
            state = self._actors.get(actor)

            if state is not None and state.locked_until is not None:
                if now < state.locked_until:
                    return RateLimitDecision(
                        allowed=False,
                        reason="actor is locked out after repeated rate limit violations",
                        retry_after=state.locked_until - now,
                    )
                state.locked_until = None
                state.violations = 0

            if state is None or now - state.window_start >= self._window:
                violations = state.violations if state else 0
                self._actors[actor] = _ActorState(window_start=now, count=1, violations=violations)
                return RateLimitDecision(allowed=True)

            if state.count >= self._max_per_window:
                state.violations += 1
                if state.violations >= self._max_violations:
                    state.locked_until = now + self._lockout
                    return RateLimitDecision(
                        allowed=False,
                        reason="too many violations, actor locked out",
                        retry_after=self._lockout,
                    )
                return RateLimitDecision(
                    allowed=False,
                    reason="rate limit exceeded",
                    retry_after=state.window_start + self._window - now,
                )

            state.count += 1
            return RateLimitDecision(allowed=True)

    def reset(self, actor: str | None = None) -> None:
        with self._lock:
            if actor is None:
                self._actors.clear()
            else:
                self._actors.pop(actor, None)
