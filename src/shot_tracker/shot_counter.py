"""
Shot counter for the basketball tracker.

Keeps the shot and make totals for one session and exposes an immutable
snapshot with the derived shooting percentage. Ticks come from a detection
source (fixed timer or frame analysis); which shots count as makes is decided
by a replaceable make rule.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShotStats:
    """Immutable snapshot of the session totals."""

    shots: int = 0
    makes: int = 0

    @property
    def percentage(self) -> int:
        # Truncating, not rounding
        if self.shots > 0:
            return self.makes * 100 // self.shots
        return 0

    def as_dict(self):
        return {
            'shots': self.shots,
            'makes': self.makes,
            'percentage': self.percentage,
        }

    def __str__(self) -> str:
        return f"{self.makes}/{self.shots} ({self.percentage}%)"


class AlternatingMakeRule:
    """
    Placeholder make/miss classifier: every second shot is a make.

    Stands in for a real classifier until one exists. Any callable taking the
    post-increment shot count and returning True for a make can replace it.
    """

    def __call__(self, shots: int) -> bool:
        return shots % 2 == 0


class ShotCounter:
    """
    Shot/make state for a single session.

    Single state ("running") with a self-loop on each tick. Counters only ever
    grow; there is no reset. Not thread-safe: deliver ticks from one thread.

    Usage:
        counter = ShotCounter()
        counter.subscribe(lambda stats: print(stats))
        counter.on_detection_tick()
        counter.get_stats()   # ShotStats(shots=1, makes=0)
    """

    def __init__(self, make_rule=None):
        self.make_rule = make_rule or AlternatingMakeRule()
        self._shots = 0
        self._makes = 0
        self._listeners = []

    def on_detection_tick(self):
        """Register one detected shot and notify listeners."""
        self._shots += 1
        if self.make_rule(self._shots):
            self._makes += 1

        stats = self.get_stats()
        logger.debug("Shot registered: %s", stats)
        self._notify(stats)

    def get_stats(self) -> ShotStats:
        """Return the current totals. No side effects."""
        return ShotStats(shots=self._shots, makes=self._makes)

    # ── listeners ────────────────────────────────────────────────────────────

    def subscribe(self, listener):
        """
        Call listener(stats) after every tick.

        Args:
            listener: callable taking a ShotStats
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, stats):
        for listener in list(self._listeners):
            try:
                listener(stats)
            except Exception:
                logger.exception("Shot listener %r failed", listener)
