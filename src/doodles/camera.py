from dataclasses import dataclass
from typing import Callable

import pygame

from doodles.common import Vec2, GVec2, Color, Rect


@dataclass(frozen=True)
class InputState:
    mouse_screen: Vec2
    mouse_world: Vec2


@dataclass
class RenderContext:
    screen: pygame.Surface
    camera: "Camera2D"
    input: InputState
    debug: bool


@dataclass(frozen=True)
class DrawLayer:
    z: int
    label: str
    draw: Callable[[RenderContext], None]


class Camera2D:
    """
    Maps world points (y up) to screen pixels (y down).

    `height` is the world height mapped to the top of the screen at zoom 1.
    """

    def __init__(self, offset=pygame.Vector2(0, 0), zoom: float = 1.0, height: float = 0.0):
        self.offset = pygame.Vector2(offset)
        self.zoom = zoom
        self.height = height

    def world_to_screen(self, p: Vec2) -> GVec2:
        v = pygame.Vector2(p[0], self.height - p[1]) * self.zoom + self.offset
        return int(v.x), int(v.y)

    def screen_to_world(self, p: GVec2) -> Vec2:
        v = (pygame.Vector2(p[0], p[1]) - self.offset) / self.zoom
        return float(v.x), float(self.height - v.y)

    def zoom_at(self, screen_pos: GVec2, zoom_factor: float) -> None:
        """Zoom keeping the world point under cursor fixed."""
        before = pygame.Vector2(self.screen_to_world(screen_pos))
        self.zoom = max(0.05, min(50.0, self.zoom * zoom_factor))
        after = pygame.Vector2(self.screen_to_world(screen_pos))
        delta = after - before
        self.offset += pygame.Vector2(delta.x, -delta.y) * self.zoom


def draw_rect(ctx: RenderContext, rect: Rect, color: Color, width: int = 0) -> None:
    p0 = ctx.camera.world_to_screen((rect.left, rect.top))
    p1 = ctx.camera.world_to_screen((rect.right, rect.bottom))
    pygame.draw.rect(ctx.screen, color, pygame.Rect(p0[0], p0[1], p1[0] - p0[0], p1[1] - p0[1]), width)


def draw_circle(ctx: RenderContext, center: Vec2, radius: float, color: Color, width: int = 1) -> None:
    r = max(1, int(round(radius * ctx.camera.zoom)))
    pygame.draw.circle(ctx.screen, color, ctx.camera.world_to_screen(center), r, width)
