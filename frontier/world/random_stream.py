"""Deterministic random stream used by sector generation."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, TypeVar

from frontier.world.sector import Coordinate

T = TypeVar("T")

SINE_SCALE = 10000.0
COORDINATE_STRIDE = 1000

# Largest float below 1.0; keeps draws inside [0, 1) when the fractional
# part of a tiny negative state rounds up.
_BELOW_ONE = math.nextafter(1.0, 0.0)


def sector_seed(coordinates: Coordinate, global_seed: int = 0) -> int:
    """Seed for a single sector.

    Distinct coordinates only map to distinct seeds while ``|y| < 500``;
    farther out, collisions are accepted.
    """

    return coordinates.x * COORDINATE_STRIDE + coordinates.y + global_seed


@dataclass(frozen=True)
class RandomStream:
    """Immutable sine-transform stream: ``next()`` returns the draw and the advanced stream."""

    state: float

    @classmethod
    def from_seed(cls, seed: int) -> "RandomStream":
        return cls(math.sin(seed) * SINE_SCALE)

    def next(self) -> Tuple[float, "RandomStream"]:
        state = math.sin(self.state) * SINE_SCALE
        value = state - math.floor(state)
        return min(value, _BELOW_ONE), RandomStream(state)


class SeededRandom:
    """Cursor over a :class:`RandomStream` with ``random.Random``-style helpers."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self.draws = 0
        self._stream = RandomStream.from_seed(seed)

    @property
    def stream(self) -> RandomStream:
        return self._stream

    def random(self) -> float:
        value, self._stream = self._stream.next()
        self.draws += 1
        return value

    def below(self, upper: int) -> int:
        """Integer in ``[0, upper)`` from one draw."""

        return math.floor(self.random() * upper)

    def uniform(self, low: float, high: float) -> float:
        return low + self.random() * (high - low)

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        return options[self.below(len(options))]


__all__ = ["RandomStream", "SeededRandom", "sector_seed"]
