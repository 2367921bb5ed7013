"""
sample_buffer.py

Bounded drop-rate history with an outlier-trimmed mean.  A single spike
(a seek, a window resize) should not steer the controller, so the one
highest and one lowest sample are thrown away before averaging.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator

MIN_TRIM_SAMPLES = 3


def trimmed_mean(values: Iterable[float]) -> float:
    """Mean without the single min and single max; 0.0 below 3 samples."""
    ordered = sorted(values)
    if len(ordered) < MIN_TRIM_SAMPLES:
        return 0.0
    inner = ordered[1:-1]
    return sum(inner) / len(inner)


class SampleBuffer:
    """FIFO window of the last *capacity* samples."""

    def __init__(self, capacity: int) -> None:
        if capacity < MIN_TRIM_SAMPLES:
            raise ValueError(f"capacity must be >= {MIN_TRIM_SAMPLES}, got {capacity}")
        self.capacity = capacity
        self._values: deque[float] = deque(maxlen=capacity)

    def push(self, value: float) -> None:
        self._values.append(value)      # deque drops the oldest on overflow

    def clear(self) -> None:
        self._values.clear()

    def ready(self) -> bool:
        return len(self._values) >= MIN_TRIM_SAMPLES

    def trimmed_mean(self) -> float:
        return trimmed_mean(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"SampleBuffer({list(self._values)!r}, capacity={self.capacity})"
