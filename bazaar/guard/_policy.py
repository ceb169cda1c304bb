"""
Guard policy: dedup window and clock.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

DEFAULT_WINDOW = timedelta(seconds=120)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class GuardPolicy:
    """
    Duplicate guard configuration.

    Example:
        policy = GuardPolicy().with_window(minutes=5).with_clock(fake_clock)

    Note: Two clicks that land on either side of a bucket boundary get
    different fingerprints. A wider window makes that rarer but also merges
    genuinely repeated purchases that happen inside it.
    """

    window: timedelta = DEFAULT_WINDOW
    clock: Callable[[], datetime] = utc_now

    def with_window(self, *, seconds: float = 0, minutes: float = 0) -> GuardPolicy:
        window = timedelta(seconds=seconds, minutes=minutes)
        if window <= timedelta(0):
            raise ValueError("dedup window must be positive")
        return GuardPolicy(window=window, clock=self.clock)

    def with_clock(self, clock: Callable[[], datetime]) -> GuardPolicy:
        return GuardPolicy(window=self.window, clock=clock)

    def now(self) -> datetime:
        return self.clock()

    def bucket(self, at: datetime) -> int:
        """floor(epoch seconds / window seconds)."""
        return int(at.timestamp() // self.window.total_seconds())


DEFAULT_POLICY = GuardPolicy()


__all__ = (
    "DEFAULT_WINDOW",
    "DEFAULT_POLICY",
    "GuardPolicy",
    "utc_now",
)
