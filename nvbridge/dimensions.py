"""Width/height pairs for window and grid geometry."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

_NUMBER = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1


def _to_u64(number: float | int) -> int:
    """Convert a number to an unsigned 64-bit value, truncating and saturating."""
    if isinstance(number, float):
        if math.isnan(number):
            return 0
        if math.isinf(number):
            return _U64_MAX if number > 0 else 0
    return min(max(int(number), 0), _U64_MAX)


@dataclass(frozen=True)
class Dimensions:
    """A width and a height, both unsigned integers."""

    width: int
    height: int

    @classmethod
    def parse(cls, text: str) -> Dimensions:
        """Parse ``<width>x<height>``; both parts must be positive integers."""
        invalid = f"Invalid geometry: {text}\nValid format: <width>x<height>"
        values = []
        for part in text.split("x"):
            if not _NUMBER.fullmatch(part) or int(part) > _U64_MAX:
                raise ValueError(invalid)
            number = int(part)
            if number == 0:
                raise ValueError(
                    "Invalid Dimensions: Window dimensions should be greater than 0."
                )
            values.append(number)
        if len(values) != 2:
            raise ValueError(invalid)
        width, height = values
        return cls(width, height)

    @classmethod
    def from_tuple(cls, pair: tuple[float | int, float | int]) -> Dimensions:
        """Build from a ``(width, height)`` pair, truncating fractional parts."""
        width, height = pair
        return cls(_to_u64(width), _to_u64(height))

    def as_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"

    def __mul__(self, other: Dimensions) -> Dimensions:
        if not isinstance(other, Dimensions):
            return NotImplemented
        return Dimensions(self.width * other.width, self.height * other.height)

    def __rmul__(self, other: tuple[int, int]) -> tuple[int, int]:
        if not isinstance(other, tuple) or len(other) != 2:
            return NotImplemented
        x, y = other
        return (x * self.width, y * self.height)

    def __floordiv__(self, other: Dimensions) -> Dimensions:
        if not isinstance(other, Dimensions):
            return NotImplemented
        return Dimensions(self.width // other.width, self.height // other.height)