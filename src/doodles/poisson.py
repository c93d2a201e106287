import logging
import math
from typing import Iterator

import numpy as np

from doodles.common import Bounds, GVec2, InvalidDomainError, Rect, Vec2, clamp
from doodles.geometry import (
    random_point_in_annulus,
    random_point_in_rect,
    to_bottom_left_origin,
    to_upper_left_origin,
)

logger = logging.getLogger(__name__)

# number of dimensions the sampler works in
N = 2

__all__ = [
    "InvalidDomainError",
    "SamplerFinishedError",
    "SpatialGrid",
    "PoissonDiscSampler",
    "grid_cell_size",
    "calculate_min_distance",
    "calculate_radius",
    "poisson_disc_2d",
]


class SamplerFinishedError(RuntimeError):
    pass


def grid_cell_size(r: float) -> float:
    """
    Side of a grid cell for minimum distance r: floor(r / sqrt(N)).

    Radii below sqrt(N) would floor to zero, those keep the exact
    r / sqrt(N) instead.
    """
    size = r / math.sqrt(N)
    return float(math.floor(size)) or size


class SpatialGrid:
    """
    Uniform grid over the domain holding at most one point per cell.

    Cells are addressed (col, row) with the origin in the upper-left corner
    of the domain, rows growing downwards. Storage is a flat
    (cols * rows, 2) buffer indexed by row * cols + col, NaN marks an
    empty cell.
    """

    def __init__(self, cell_size: float, domain: Rect):
        if not (math.isfinite(cell_size) and cell_size > 0):
            raise ValueError(f"cell size must be positive, got {cell_size}")

        self.cell_size = cell_size
        self.domain = domain.validate()
        self.cols = int(math.ceil(domain.w / cell_size))
        self.rows = int(math.ceil(domain.h / cell_size))
        self.occupied = 0
        self._cells = np.full((self.cols * self.rows, 2), np.nan)

    @property
    def shape(self) -> GVec2:
        return self.cols, self.rows

    def __len__(self) -> int:
        return self.occupied

    def index_of(self, p: Vec2) -> GVec2:
        # points on the right / bottom edge land in the last column / row
        x, y = to_upper_left_origin(p, self.domain)
        col = clamp(int(math.floor(x / self.cell_size)), 0, self.cols - 1)
        row = clamp(int(math.floor(y / self.cell_size)), 0, self.rows - 1)
        return col, row

    def raw_index_of(self, p: Vec2) -> GVec2:
        """Cell index under the native bottom-up convention, for reference only."""
        x, y = to_bottom_left_origin(p, self.domain)
        col = clamp(int(math.floor(x / self.cell_size)), 0, self.cols - 1)
        row = clamp(int(math.floor(y / self.cell_size)), 0, self.rows - 1)
        return col, row

    def get(self, col: int, row: int) -> Vec2 | None:
        x, y = self._cells[row * self.cols + col]
        if math.isnan(x):
            return None
        return float(x), float(y)

    def insert(self, p: Vec2) -> None:
        if not self.domain.contains(p):
            raise ValueError(f"point {p} is outside of {self.domain}")

        col, row = self.index_of(p)
        i = row * self.cols + col
        if math.isnan(self._cells[i, 0]):
            self.occupied += 1
        self._cells[i] = p

    def window(self, col: int, row: int, reach: int = 1) -> tuple[int, int, int, int]:
        """
        Inclusive (col_start, col_end, row_start, row_end) of the block of
        cells within `reach` of (col, row), clamped to the grid.
        """
        return (
            max(col - reach, 0),
            min(col + reach, self.cols - 1),
            max(row - reach, 0),
            min(row + reach, self.rows - 1),
        )

    def _block(self, p: Vec2, reach: int) -> np.ndarray:
        c0, c1, r0, r1 = self.window(*self.index_of(p), reach=reach)
        rows = [
            self._cells[row * self.cols + c0:row * self.cols + c1 + 1]
            for row in range(r0, r1 + 1)
        ]
        return np.concatenate(rows)

    def neighbors(self, p: Vec2, reach: int = 1) -> Iterator[Vec2]:
        for x, y in self._block(p, reach):
            if not math.isnan(x):
                yield float(x), float(y)

    def is_far_enough(self, p: Vec2, r: float, reach: int = 1) -> bool:
        block = self._block(p, reach)
        d2 = np.sum((block - np.asarray(p)) ** 2, axis=1)
        # empty cells give NaN, which never compares below r^2
        return not np.any(d2 < r * r)


class PoissonDiscSampler:
    """
    Bridson's Poisson-disc sampling, one step at a time.

    The sampler starts from one random point of the domain. Every call to
    `sample` picks a random active point and tries up to `k` candidates in
    the annulus [r, 2r) around it. The first candidate that is inside the
    domain and at least `r` away from every accepted point is accepted and
    returned. When all `k` candidates fail the active point is retired and
    None is returned.

    Parameters
    ----------
    domain : Rect
        Region to fill with points.

    r : float
        Minimum distance between any two points.

    k : int
        Candidate attempts per step before the active point is retired.

    rng : numpy.random.Generator, optional
        Source of randomness. Built from `seed` when omitted.

    seed : int, optional
    """

    def __init__(
        self,
        domain: Rect,
        r: float,
        k: int = 30,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        domain.validate()
        if not (math.isfinite(r) and r > 0):
            raise ValueError(f"minimum distance must be positive and finite, got {r}")
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")

        self.domain = domain
        self._r = float(r)
        self.k = int(k)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.grid = SpatialGrid(grid_cell_size(self._r), domain)
        # a 3x3 block only covers r when cells are at least r wide
        self.reach = int(math.ceil(self._r / self.grid.cell_size))

        p = random_point_in_rect(self.rng, domain)
        self.grid.insert(p)
        self._active: list[Vec2] = [p]
        self._accepted: list[Vec2] = [p]

        logger.debug(
            "sampler over %s: r=%.3f k=%d cell_size=%.3f grid=%dx%d",
            domain, self._r, self.k, self.grid.cell_size, self.grid.cols, self.grid.rows,
        )

    @property
    def r(self) -> float:
        return self._r

    @property
    def active_points(self) -> tuple[Vec2, ...]:
        return tuple(self._active)

    @property
    def accepted_points(self) -> tuple[Vec2, ...]:
        """Seed point followed by every point returned by `sample`."""
        return tuple(self._accepted)

    def is_finished(self) -> bool:
        return not self._active

    def is_valid(self, p: Vec2) -> bool:
        return self.domain.contains(p) and self.grid.is_far_enough(p, self._r, self.reach)

    def sample(self) -> Vec2 | None:
        if self.is_finished():
            raise SamplerFinishedError("sample() called on a finished sampler")

        index = int(self.rng.integers(len(self._active)))
        pivot = self._active[index]

        for _ in range(self.k):
            dx, dy = random_point_in_annulus(self.rng, self._r, 2 * self._r)
            p = (pivot[0] + dx, pivot[1] + dy)
            if self.is_valid(p):
                self.grid.insert(p)
                self._active.append(p)
                self._accepted.append(p)
                return p

        # swap-remove, frontier order is irrelevant
        self._active[index] = self._active[-1]
        self._active.pop()
        logger.debug("retired %s, %d active points left", pivot, len(self._active))
        if not self._active:
            logger.debug("sampling finished with %d points", len(self._accepted))
        return None


def calculate_min_distance(
    domain: Rect,
    start: float | None = None,
    end: float | None = None,
    rng: np.random.Generator | None = None,
) -> float:
    """
    Random minimum distance for a sampler over `domain`, drawn uniformly
    from [start, end].

    start defaults to 0 and end to log2(w * h) of the domain.
    """
    domain.validate()
    s = 0.0 if start is None else start
    e = math.log2(domain.area) if end is None else end
    if s > e:
        raise ValueError(f"empty minimum distance range [{s}, {e}]")

    rng = rng if rng is not None else np.random.default_rng()
    return float(rng.uniform(s, e))


def calculate_radius(
    domain: Rect,
    start: float | None = None,
    rng: np.random.Generator | None = None,
) -> float:
    return calculate_min_distance(domain, start, None, rng=rng)


def poisson_disc_2d(
    bounds: Bounds,
    radius: float,
    n_points: int | None = None,
    k: int = 30,
    seed: int | None = None,
) -> list[Vec2]:
    """
    Poisson disc sampling in 2D using Bridson's algorithm.

    bounds   : (xmin, ymin, xmax, ymax)
    radius   : minimum distance between points
    n_points : stop once this many points are accepted (optional)
    k        : attempts per active point
    seed     : RNG seed (optional)

    returns: list of (x, y), the seed point first
    """
    sampler = PoissonDiscSampler(Rect.from_bounds(bounds), radius, k, seed=seed)

    while not sampler.is_finished():
        if n_points is not None and len(sampler.grid) >= n_points:
            break
        sampler.sample()

    return list(sampler.accepted_points)
