"""Monotonic request tags for discarding stale responses."""

from typing import Dict


class RequestSequencer:
    """
    Issues increasing sequence numbers per fetch kind.

    A response is applied only if its number is still the latest issued for
    its kind; anything older was superseded while in flight.

    Usage:
        seq = sequencer.issue("candidates")
        ...
        if sequencer.is_current("candidates", seq):
            apply(response)
    """

    def __init__(self):
        self._latest: Dict[str, int] = {}
        self._counter = 0

    def issue(self, kind: str) -> int:
        self._counter += 1
        self._latest[kind] = self._counter
        return self._counter

    def is_current(self, kind: str, seq: int) -> bool:
        return self._latest.get(kind) == seq

    def invalidate(self, kind: str) -> None:
        """Make every in-flight request of ``kind`` stale."""
        self._counter += 1
        self._latest[kind] = self._counter

    def invalidate_all(self) -> None:
        for kind in list(self._latest):
            self.invalidate(kind)
