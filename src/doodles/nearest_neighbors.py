import numpy as np
from scipy.spatial import cKDTree

from doodles.common import Vec2


class NearestNeighbors:
    """KD-tree queries over a sampled point set."""

    def __init__(self, points):
        self.points = np.asarray(points, dtype=float).reshape(-1, 2)
        self.tree = cKDTree(self.points)

    def nearest_distances(self) -> np.ndarray:
        """Distance from every point to its closest other point."""
        if len(self) < 2:
            return np.full(len(self), np.inf)

        d, _ = self.tree.query(self.points, 2)
        # the closest hit is the point itself
        return d[:, 1]

    def min_distance(self) -> float:
        if len(self) < 2:
            return float("inf")
        return float(np.min(self.nearest_distances()))

    def nearest(self, point: Vec2, k: int = 1) -> list[Vec2]:
        k = min(k, len(self))
        _, idx = self.tree.query(np.asarray(point, dtype=float), k)
        idx = np.atleast_1d(idx)
        return [(float(x), float(y)) for x, y in self.points[idx]]

    def pairs_closer_than(self, r: float) -> set[tuple[int, int]]:
        # query_pairs is inclusive of r, strict spacing only rejects d < r
        return {
            (i, j) for i, j in self.tree.query_pairs(r)
            if np.linalg.norm(self.points[i] - self.points[j]) < r
        }

    def __len__(self):
        return len(self.points)
