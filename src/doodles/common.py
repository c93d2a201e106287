import math
from dataclasses import dataclass
from typing import TypeAlias

Vec2: TypeAlias = tuple[float, float]
GVec2: TypeAlias = tuple[int, int]
Bounds: TypeAlias = tuple[float, float, float, float]  # xmin, ymin, xmax, ymax
Color: TypeAlias = tuple[int, int, int]


class InvalidDomainError(ValueError):
    pass


def clamp(val, a, b):
    return max(min(val, b), a)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle with a bottom-up vertical axis.

    left < right and bottom < top; all edges finite.
    """
    left: float
    right: float
    bottom: float
    top: float

    @classmethod
    def from_w_h(cls, w: float, h: float) -> "Rect":
        """Rectangle of the given size centred on the origin."""
        return cls(-w / 2, w / 2, -h / 2, h / 2)

    @classmethod
    def from_bounds(cls, bounds: Bounds) -> "Rect":
        xmin, ymin, xmax, ymax = bounds
        return cls(xmin, xmax, ymin, ymax)

    @property
    def w(self) -> float:
        return self.right - self.left

    @property
    def h(self) -> float:
        return self.top - self.bottom

    @property
    def area(self) -> float:
        return self.w * self.h

    def contains(self, p: Vec2) -> bool:
        return self.left <= p[0] <= self.right and self.bottom <= p[1] <= self.top

    def validate(self) -> "Rect":
        edges = (self.left, self.right, self.bottom, self.top)
        if not all(math.isfinite(e) for e in edges):
            raise InvalidDomainError(f"domain edges must be finite: {self}")
        if not (self.left < self.right and self.bottom < self.top):
            raise InvalidDomainError(f"domain must have positive width and height: {self}")
        return self
