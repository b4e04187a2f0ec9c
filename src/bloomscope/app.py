"""
Interactive pygame window for the flower garden.

Controls:
    drop    load the dropped audio files
    click   play a clip and bloom its flower
    G       (re)generate the garden from the loaded clips
    P       cycle palette
    E       export the current frame as PNG
    Esc     quit
"""

from pathlib import Path
from typing import Iterable, Optional

import pygame

from bloomscope.config import GardenConfig
from bloomscope.core.interaction import CURSOR_POINTER
from bloomscope.io.exporter import LayoutExporter
from bloomscope.pipeline import GardenPipeline
from bloomscope.visualizers.garden import GardenRenderer
from bloomscope.visualizers.palette import PaletteName

PALETTE_CYCLE = [p.value for p in PaletteName]


class GardenApp:
    """
    Event loop around a GardenPipeline.

    Frames are redrawn continuously only while the animation scheduler
    is running; otherwise the loop blocks on input and redraws once per
    event that changes the picture.
    """

    def __init__(
        self,
        pipeline: GardenPipeline,
        renderer: Optional[GardenRenderer] = None,
        exporter: Optional[LayoutExporter] = None,
    ):
        self.pipeline = pipeline
        self.config: GardenConfig = pipeline.config
        self.renderer = renderer or GardenRenderer(self.config, rng=pipeline.rng)
        self.exporter = exporter or LayoutExporter()
        self.screen: Optional[pygame.Surface] = None
        self.running = False
        self._dropped: list[Path] = []

    def _update_caption(self):
        pygame.display.set_caption(f"bloomscope: {self.pipeline.session.status}")

    def _set_cursor(self, name: str):
        cursor = pygame.SYSTEM_CURSOR_HAND if name == CURSOR_POINTER else pygame.SYSTEM_CURSOR_ARROW
        pygame.mouse.set_cursor(cursor)

    def cycle_palette(self):
        idx = PALETTE_CYCLE.index(self.config.palette) if self.config.palette in PALETTE_CYCLE else -1
        self.config.palette = PALETTE_CYCLE[(idx + 1) % len(PALETTE_CYCLE)]
        self.pipeline.set_status(f"Palette: {self.config.palette}")

    def export(self) -> Path:
        frame = self.renderer.surface_to_array(self.screen)
        path = self.exporter.export_png(frame, self.config.export_name)
        self.pipeline.set_status(f"Exported {path}")
        return path

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Apply one input event.

        Returns:
            True if the frame needs redrawing.
        """
        if event.type == pygame.QUIT:
            self.running = False
            return False

        if event.type == pygame.VIDEORESIZE:
            self.config.width, self.config.height = event.w, event.h
            self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
            return True

        if event.type == pygame.DROPBEGIN:
            self._dropped = []
            return False

        if event.type == pygame.DROPFILE:
            self._dropped.append(Path(event.file))
            return False

        if event.type == pygame.DROPCOMPLETE:
            paths, self._dropped = self._dropped, []
            if paths:
                self.pipeline.load(paths)
            return bool(paths)

        if event.type == pygame.MOUSEMOTION:
            self._set_cursor(self.pipeline.hover(*event.pos))
            return False

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            return self.pipeline.click(*event.pos) is not None

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_g:
                self.pipeline.generate(self.config.width, self.config.height)
                return True
            elif event.key == pygame.K_p:
                self.cycle_palette()
                return True
            elif event.key == pygame.K_e:
                try:
                    self.export()
                except OSError as e:
                    self.pipeline.set_status(f"Export failed: {e}")
        return False

    def draw(self):
        self.renderer.render_frame(
            self.pipeline.session.glyphs,
            time_ms=self.pipeline.animator.clock(),
            surface=self.screen,
        )
        pygame.display.flip()
        self._update_caption()

    def run(self, paths: Iterable[Path] = ()):
        """Open the window and loop until the user quits."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.config.width, self.config.height), pygame.RESIZABLE
        )
        clock = pygame.time.Clock()

        paths = list(paths)
        if paths and self.pipeline.load(paths):
            self.pipeline.generate(self.config.width, self.config.height)

        self.running = True
        self.draw()
        try:
            while self.running:
                if self.pipeline.scheduler.running:
                    events = pygame.event.get()
                else:
                    events = [pygame.event.wait()] + pygame.event.get()

                dirty = False
                for event in events:
                    dirty = self.handle_event(event) or dirty

                if self.pipeline.scheduler.running:
                    self.pipeline.tick()
                    dirty = True
                    clock.tick(self.config.fps)

                if dirty and self.running:
                    self.draw()
        finally:
            pygame.quit()
