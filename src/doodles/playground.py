import math
import sys
from datetime import datetime
from typing import Protocol

import pygame

from doodles.camera import Camera2D, RenderContext, DrawLayer, InputState


class CfgLike(Protocol):
    width: int
    height: int
    tile_size: float


class WorldLike(Protocol):
    cfg: CfgLike

    def update(self) -> None:
        ...

    def reset(self) -> None:
        ...

    def status(self) -> str:
        ...

    def get_layers(self, layers: list[int]) -> list[DrawLayer]:
        ...

    def debug_layers(self) -> list[DrawLayer]:
        ...


HUD_FONT_NAME = "consolas"
HUD_FONT_SIZE = 16
HUD_FONT_COLOR_2 = (160, 160, 160)
HUD_FONT_COLOR = (220, 220, 220)

FILL_COLOR = (0, 0, 0)
COLOR_GRID = (40, 40, 40)
COLOR_AXES = (90, 90, 90)


class Playground2D:
    def __init__(self, world: WorldLike, name="Poisson-disc Sampling") -> None:
        pygame.init()
        pygame.display.set_caption(name)
        w, h = world.cfg.width, world.cfg.height
        self.screen = pygame.display.set_mode((w, h))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(HUD_FONT_NAME, HUD_FONT_SIZE)
        self.name = name

        self.cam = Camera2D(offset=pygame.Vector2(0, 0), zoom=1.0, height=h)
        self.world = world

        self.tile_size = world.cfg.tile_size
        self.show_grid = False
        self.show_axes = False
        self.show_hud = True
        self.debug = False
        self.debug_layers = self.world.debug_layers()
        self.current_layer = 0
        self.running = True

        self._panning = False
        self._pan_anchor = pygame.Vector2(0, 0)
        self._cam_anchor = pygame.Vector2(0, 0)

    def _draw_grid(self, ctx: RenderContext) -> None:
        w, h = ctx.screen.get_size()

        # visible world bounds
        x0, y0 = ctx.camera.screen_to_world((0, 0))
        x1, y1 = ctx.camera.screen_to_world((w, h))
        ts = self.tile_size

        gx0 = int(math.floor(min(x0, x1) / ts)) - 1
        gx1 = int(math.floor(max(x0, x1) / ts)) + 1
        gy0 = int(math.floor(min(y0, y1) / ts)) - 1
        gy1 = int(math.floor(max(y0, y1) / ts)) + 1

        for gx in range(gx0, gx1 + 1):
            a = ctx.camera.world_to_screen((gx * ts, gy0 * ts))
            b = ctx.camera.world_to_screen((gx * ts, (gy1 + 1) * ts))
            pygame.draw.line(ctx.screen, COLOR_GRID, a, b, 1)

        for gy in range(gy0, gy1 + 1):
            a = ctx.camera.world_to_screen((gx0 * ts, gy * ts))
            b = ctx.camera.world_to_screen(((gx1 + 1) * ts, gy * ts))
            pygame.draw.line(ctx.screen, COLOR_GRID, a, b, 1)

    def _draw_axes(self, ctx: RenderContext) -> None:
        w, h = ctx.screen.get_size()
        origin = ctx.camera.world_to_screen((0, 0))
        pygame.draw.line(ctx.screen, COLOR_AXES, (0, origin[1]), (w, origin[1]), 1)  # x-axis
        pygame.draw.line(ctx.screen, COLOR_AXES, (origin[0], 0), (origin[0], h), 1)  # y-axis

    def _draw_hud(self, ctx: RenderContext) -> None:
        wx, wy = ctx.input.mouse_world
        current_layer = "  layer=" + self.debug_layers[self.current_layer].label if self.debug else ""
        text = f"{self.world.status()}  zoom={ctx.camera.zoom:.3f}  world=({wx:.1f},{wy:.1f}){current_layer}"
        ctx.screen.blit(self.font.render(text, True, HUD_FONT_COLOR), (10, 10))

        help1 = "LMB drag: pan | Wheel: zoom | R: restart | G: grid | A: axes | D: debug | TAB: debug layers | H: hud | S: save | ESC: quit"
        ctx.screen.blit(self.font.render(help1, True, HUD_FONT_COLOR_2), (10, 30))

    # --- events ---
    def _handle_event(self, e: pygame.event.Event) -> None:
        if e.type == pygame.QUIT:
            self.running = False

        if e.type == pygame.KEYDOWN:
            if e.key == pygame.K_ESCAPE:
                self.running = False
            if e.key == pygame.K_r:
                self.world.reset()
            if e.key == pygame.K_g:
                self.show_grid = not self.show_grid
            if e.key == pygame.K_a:
                self.show_axes = not self.show_axes
            if e.key == pygame.K_h:
                self.show_hud = not self.show_hud
            if e.key == pygame.K_d:
                self.debug = not self.debug
            if e.key == pygame.K_TAB:
                self.current_layer = (self.current_layer + 1) % len(self.debug_layers)
            if e.key == pygame.K_s:
                self.save()

        if e.type == pygame.MOUSEBUTTONDOWN:
            if e.button == 1:
                self._panning = True
                self._pan_anchor = pygame.Vector2(e.pos)
                self._cam_anchor = self.cam.offset.copy()

            if e.button == 4:  # wheel up
                self.cam.zoom_at(e.pos, 1.15)
            if e.button == 5:  # wheel down
                self.cam.zoom_at(e.pos, 1 / 1.15)

        if e.type == pygame.MOUSEBUTTONUP:
            if e.button == 1:
                self._panning = False

        if e.type == pygame.MOUSEMOTION and self._panning:
            delta = pygame.Vector2(e.pos) - self._pan_anchor
            self.cam.offset = self._cam_anchor + delta

    def _layers(self) -> list[DrawLayer]:
        layers = []
        if self.show_hud:
            layers.append(DrawLayer(z=2000, label="hud", draw=self._draw_hud))
        if self.show_grid:
            layers.append(DrawLayer(z=1000, label="grid", draw=self._draw_grid))
        if self.show_axes:
            layers.append(DrawLayer(z=1001, label="axes", draw=self._draw_axes))

        if self.debug:
            layers.append(self.debug_layers[self.current_layer])
        else:
            layers.extend(self.world.get_layers([]))
        return sorted(layers, key=lambda x: x.z)

    def render(self, surface: pygame.Surface, camera: Camera2D, layers: list[DrawLayer]) -> None:
        ms = pygame.mouse.get_pos()
        ctx = RenderContext(
            screen=surface,
            camera=camera,
            input=InputState(mouse_world=camera.screen_to_world(ms), mouse_screen=ms),
            debug=self.debug,
        )
        surface.fill(FILL_COLOR)
        for layer in layers:
            layer.draw(ctx)

    def save(self) -> str:
        w, h = self.world.cfg.width, self.world.cfg.height
        surface = pygame.Surface((w, h))
        layers = sorted(self.world.get_layers([]), key=lambda x: x.z)
        self.render(surface, Camera2D(zoom=1.0, height=h), layers)

        now = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{self.name.replace(' ', '_')}_{now}.jpg"
        pygame.image.save(surface, filename)
        return filename

    def step(self) -> None:
        for e in pygame.event.get():
            self._handle_event(e)

        self.world.update()
        self.render(self.screen, self.cam, self._layers())
        pygame.display.flip()

    def run(self, fps: int = 60) -> None:
        while self.running:
            self.step()
            self.clock.tick(fps)

        pygame.quit()
        sys.exit(0)
