import math

import numpy as np

from doodles.common import Rect, Vec2

TAU = 2 * math.pi


def distance(a: Vec2, b: Vec2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def to_upper_left_origin(p: Vec2, domain: Rect) -> Vec2:
    """x grows right from the left edge, y grows down from the top edge."""
    return p[0] - domain.left, domain.top - p[1]


def to_bottom_left_origin(p: Vec2, domain: Rect) -> Vec2:
    return p[0] - domain.left, p[1] - domain.bottom


def random_point_in_rect(rng: np.random.Generator, domain: Rect) -> Vec2:
    return (
        float(rng.uniform(domain.left, domain.right)),
        float(rng.uniform(domain.bottom, domain.top)),
    )


def random_point_in_annulus(rng: np.random.Generator, r_min: float, r_max: float) -> Vec2:
    """
    Offset vector with direction uniform in [0, 2pi) and magnitude
    uniform in [r_min, r_max).
    """
    angle = rng.uniform(0, TAU)
    magnitude = rng.uniform(r_min, r_max)
    return magnitude * math.cos(angle), magnitude * math.sin(angle)
