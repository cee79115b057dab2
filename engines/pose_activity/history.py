"""
Temporal buffers — bounded FIFO windows of recent nose and wrist positions.

Motion and waving are not visible in a single frame, so the classifier keeps a
short history of each. ``HistoryBuffer`` is the mutable ring buffer owned by a
classifier instance; ``HistorySnapshot`` is the immutable equivalent passed to
and returned from the pure ``classify_frame``.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Iterator, List, Optional, Tuple

from engines.pose_activity.rules import ActivityRules

_DEFAULT_RULES = ActivityRules()


def _check_capacity(capacity: int) -> None:
    if capacity < 1:
        raise ValueError(f"capacity must be at least 1, got {capacity}")


@dataclass(frozen=True)
class PositionSample:
    """Position of the reference landmark (nose) at one frame."""
    x: float
    y: float

    @classmethod
    def of(cls, point) -> 'PositionSample':
        return cls(float(point.x), float(point.y))


@dataclass(frozen=True)
class WristPairSample:
    """Both wrist positions at one frame."""
    left: PositionSample
    right: PositionSample

    @classmethod
    def of(cls, left, right) -> 'WristPairSample':
        return cls(PositionSample.of(left), PositionSample.of(right))


class HistoryBuffer:
    """
    Fixed-capacity, chronologically ordered sample window.
    Appending past capacity evicts the oldest sample in O(1).
    """

    def __init__(self, capacity: int):
        _check_capacity(capacity)
        self.capacity = capacity
        self._samples: Deque[Any] = deque(maxlen=capacity)

    def append(self, sample: Any) -> None:
        self._samples.append(sample)

    def recent(self, n: int) -> List[Any]:
        """Last ``n`` samples, oldest first. Returns fewer when history is short."""
        if n <= 0:
            return []
        if n >= len(self._samples):
            return list(self._samples)
        return list(self._samples)[-n:]

    def clear(self) -> None:
        self._samples.clear()

    def snapshot(self) -> Tuple[Any, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return f"HistoryBuffer(capacity={self.capacity}, size={len(self._samples)})"


@dataclass(frozen=True)
class HistorySnapshot:
    """Immutable view of both histories, oldest sample first."""
    positions: Tuple[PositionSample, ...] = ()
    wrists: Tuple[WristPairSample, ...] = ()

    def append(self, position: PositionSample, wrists: WristPairSample,
               position_capacity: Optional[int] = None,
               wrist_capacity: Optional[int] = None) -> 'HistorySnapshot':
        """Return a new snapshot with one more sample each, trimmed to capacity.

        Capacities default to the ActivityRules values and must be at least 1.
        """
        if position_capacity is None:
            position_capacity = _DEFAULT_RULES.position_capacity
        if wrist_capacity is None:
            wrist_capacity = _DEFAULT_RULES.wrist_capacity
        _check_capacity(position_capacity)
        _check_capacity(wrist_capacity)
        return HistorySnapshot(
            positions=(self.positions + (position,))[-position_capacity:],
            wrists=(self.wrists + (wrists,))[-wrist_capacity:],
        )
