from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator, Union

Number = Union[int, float]

FRAME_MS = 1000 / 60
OVERALL_DURATION_MS = 1500
CATEGORY_DURATION_MS = 1200

CIRCLE_RADIUS = 94
CIRCUMFERENCE = 2 * math.pi * CIRCLE_RADIUS


def ease_out_cubic(progress: float) -> float:
    return 1 - (1 - progress) ** 3


def as_number(value: Any) -> Number:
    """Best-effort numeric target for a score the model returned; 0 when unusable."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        parsed = float(str(value).strip().rstrip("%"))
    except ValueError:
        return 0
    return int(parsed) if parsed.is_integer() else parsed


def circle_offset(score: Any) -> float:
    return CIRCUMFERENCE - (as_number(score) / 100) * CIRCUMFERENCE


@dataclass(frozen=True)
class CounterAnimation:
    """Counts an element from ``start`` to ``end`` over ``duration_ms``."""

    target: str
    end: Number
    duration_ms: int
    start: Number = 0

    def value_at(self, elapsed_ms: float) -> Number:
        progress = min(max(elapsed_ms, 0) / self.duration_ms, 1)
        if progress >= 1:
            return self.end
        return math.floor(self.start + (self.end - self.start) * ease_out_cubic(progress))

    def frames(self, frame_ms: float = FRAME_MS) -> Iterator[Number]:
        elapsed = 0.0
        while elapsed < self.duration_ms:
            yield self.value_at(elapsed)
            elapsed += frame_ms
        yield self.end

    @property
    def final_value(self) -> Number:
        return self.value_at(self.duration_ms)
