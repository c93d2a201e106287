import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from doodles.camera import RenderContext, DrawLayer, draw_circle, draw_rect
from doodles.common import Vec2, Color, Rect
from doodles.nearest_neighbors import NearestNeighbors
from doodles.poisson import PoissonDiscSampler, calculate_min_distance

logger = logging.getLogger(__name__)

COLOR_MARKER = (255, 255, 255)
COLOR_SEED = (255, 255, 0)
COLOR_ACTIVE = (0, 255, 0)
COLOR_CELL = (60, 60, 90)
COLOR_WORLD_EDGE = (150, 0, 0)


@dataclass
class PoissonWorldConfig:
    width: int = 1024
    height: int = 640
    tile_size: float = 32.
    seed: int | None = None
    rejection_limit: int = 30
    minimum_radius: float = 3.0
    maximum_radius: float | None = None
    samples_per_frame: int = 1
    marker_color: Color = COLOR_MARKER


class PoissonWorld:
    """Fills the window with Poisson-disc samples, a step per frame."""

    def __init__(self, cfg: PoissonWorldConfig):
        self.width = cfg.width
        self.height = cfg.height
        self.cfg = cfg
        self.domain = Rect(0, cfg.width, 0, cfg.height)
        self.rng = np.random.default_rng(cfg.seed)

        self.reset()

    def reset(self) -> None:
        self.r = calculate_min_distance(
            self.domain, self.cfg.minimum_radius, self.cfg.maximum_radius, rng=self.rng
        )
        self.sampler = PoissonDiscSampler(self.domain, self.r, self.cfg.rejection_limit, rng=self.rng)
        self.points: list[Vec2] = list(self.sampler.accepted_points)
        self._reported = False
        logger.debug("new sampling with r=%.3f", self.r)

    @property
    def finished(self) -> bool:
        return self.sampler.is_finished()

    def update(self) -> None:
        for _ in range(self.cfg.samples_per_frame):
            if self.sampler.is_finished():
                break
            p = self.sampler.sample()
            if p is not None:
                self.points.append(p)

        if self.sampler.is_finished() and not self._reported:
            self._reported = True
            logger.info(
                "sampling finished: %d points, r=%.3f, closest pair %.3f",
                len(self.points), self.r, NearestNeighbors(self.points).min_distance(),
            )

    def status(self) -> str:
        state = "done" if self.finished else f"active={len(self.sampler.active_points)}"
        return f"r={self.r:.2f}  points={len(self.points)}  {state}"

    def get_layers(self, which: Iterable[int]) -> list[DrawLayer]:
        return [
            DrawLayer(z=10, label="border", draw=self._draw_world_border),
            DrawLayer(z=20, label="points", draw=self._draw_points),
        ]

    def debug_layers(self) -> list[DrawLayer]:
        return [
            DrawLayer(z=20, label="grid cells", draw=self._draw_cells),
            DrawLayer(z=30, label="active points", draw=self._draw_active),
        ]

    def _draw_points(self, ctx: RenderContext) -> None:
        for p in self.points:
            draw_circle(ctx, p, self.r / 4, self.cfg.marker_color)

    def _draw_active(self, ctx: RenderContext) -> None:
        self._draw_points(ctx)
        for p in self.sampler.active_points:
            draw_circle(ctx, p, self.r / 4, COLOR_ACTIVE, 0)
        draw_circle(ctx, self.points[0], self.r / 2, COLOR_SEED)

    def _draw_cells(self, ctx: RenderContext) -> None:
        grid = self.sampler.grid
        cs = grid.cell_size
        for row in range(grid.rows):
            for col in range(grid.cols):
                if grid.get(col, row) is None:
                    continue
                left = self.domain.left + col * cs
                top = self.domain.top - row * cs
                cell = Rect(left, min(left + cs, self.domain.right), max(top - cs, self.domain.bottom), top)
                draw_rect(ctx, cell, COLOR_CELL)
        self._draw_points(ctx)

    def _draw_world_border(self, ctx: RenderContext) -> None:
        draw_rect(ctx, self.domain, COLOR_WORLD_EDGE, 3)
