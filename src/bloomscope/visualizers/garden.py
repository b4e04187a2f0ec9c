"""
Garden renderer.

Draws the glyph list onto a pygame Surface:
- Closed glyphs → bud button (ring, soft discs, play marker)
- Opening/open glyphs → 4 layers of curved petals + centre pattern
- Glyph size → paint order (small flowers first)
- Clip name → palette colour
"""

import math
from typing import Optional, Sequence

import numpy as np
import pygame

from bloomscope.config import GardenConfig
from bloomscope.core.bloom import N_LAYERS, GlyphFrame, glyph_frame
from bloomscope.core.glyphs import GlyphDescriptor, lerp
from bloomscope.core.interaction import draw_order
from bloomscope.visualizers.palette import RGB, glyph_color, lerp_color

WHITE = (255, 255, 255)
PLACEHOLDER_TEXT = ("Drop audio files here, then press G", "to grow the garden")


class GardenRenderer:
    """
    Renders glyphs and their bloom state.

    Rendering is a pure function of the glyph list, the clock and the
    position jitter drawn from ``rng``.
    """

    def __init__(
        self,
        config: Optional[GardenConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the renderer.

        Args:
            config: Garden configuration. Uses defaults if None.
            rng: Random generator for per-frame position jitter.
        """
        self.config = config or GardenConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._font: Optional[pygame.font.Font] = None

    def _get_font(self, size: int) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, size)
        return self._font

    def _background(self, surface: pygame.Surface):
        cfg = self.config
        r, g, b = cfg.background_color
        k = 1 - cfg.overlay_alpha / 255
        surface.fill((int(r * k), int(g * k), int(b * k)))

    def _render_placeholder(self, surface: pygame.Surface):
        font = self._get_font(26)
        w, h = surface.get_size()
        line_h = font.get_linesize()
        top = h / 2 - line_h * len(PLACEHOLDER_TEXT) / 2
        for i, line in enumerate(PLACEHOLDER_TEXT):
            text = font.render(line, True, (150, 170, 190))
            text.set_alpha(90)
            rect = text.get_rect(center=(w / 2, top + line_h * (i + 0.5)))
            surface.blit(text, rect)

    def glyph_extent(self, glyph: GlyphDescriptor) -> float:
        """Radius of a square that contains the glyph at any progress."""
        petal = glyph.size * glyph.petal_length * 1.6 * 1.05
        return max(glyph.bud_radius * 0.6, petal, glyph.size * 1.1) + 8

    def _draw_shadow(self, layer: pygame.Surface, c: float, frame: GlyphFrame):
        width = lerp(frame.bud_radius * 0.6, frame.size * 1.1, frame.progress)
        rect = pygame.Rect(0, 0, max(1, int(width)), max(1, int(width * 0.45)))
        rect.center = (int(c + 6), int(c + frame.size * 0.35))
        pygame.draw.ellipse(layer, (10, 10, 10, 40), rect)

    def _draw_bud(self, layer: pygame.Surface, c: float, frame: GlyphFrame, color: RGB):
        diameter = frame.bud_radius
        center = (int(c), int(c))

        for i in range(5):
            r = diameter * (0.5 + i * 0.12) / 2
            disc = pygame.Surface(layer.get_size(), pygame.SRCALPHA)
            pygame.draw.circle(disc, (*color, 12 * (6 - i)), center, max(1, int(r)))
            layer.blit(disc, (0, 0))

        pygame.draw.circle(layer, (*color, 110), center, max(1, int(diameter / 2)), 3)

        highlight = lerp_color(WHITE, color, 0.12)
        pygame.draw.circle(
            layer, (*highlight, 255), (int(c - 3), int(c - 3)), max(1, int(diameter * 0.24))
        )

        # Play marker
        s = max(5.0, diameter * 0.06)
        x0 = c + diameter * 0.02
        marker = [(x0 - s * 0.45, c - s * 0.55), (x0 - s * 0.45, c + s * 0.55), (x0 + s * 0.55, c)]
        pygame.draw.polygon(layer, (30, 30, 30, 220), marker)

    def _draw_petals(
        self,
        layer: pygame.Surface,
        c: float,
        frame: GlyphFrame,
        glyph: GlyphDescriptor,
        color: RGB,
    ):
        sharp = max(0.0, min(1.0, glyph.sharpness))
        edge_alpha = 80 + sharp * 60
        edge_width = max(1, int(round(0.6 + sharp * 0.8)))

        for layer_index in range(N_LAYERS):
            layer_t = layer_index / N_LAYERS
            alpha = lerp(0.24, 0.92, 1 - layer_t) * frame.alpha
            fill = (*lerp_color(color, WHITE, 0.06 + layer_t * 0.06), int(255 * alpha))
            stroke = (0, 0, 0, max(0, int(edge_alpha * (0.6 - layer_t * 0.25))))

            petal_layer = pygame.Surface(layer.get_size(), pygame.SRCALPHA)
            for petal in frame.petals:
                if petal.layer != layer_index:
                    continue
                points = [(c + px, c + py) for px, py in petal.rotated_outline()]
                pygame.draw.polygon(petal_layer, fill, points)
                pygame.draw.polygon(petal_layer, stroke, points, edge_width)
            layer.blit(petal_layer, (0, 0))

    def _draw_center(self, layer: pygame.Surface, c: float, frame: GlyphFrame, color: RGB):
        for i in range(6):
            r = frame.size * 0.12 * (1 + i * 0.22) / 2
            disc_color = lerp_color(WHITE, color, 0.12 + i * 0.02)
            disc = pygame.Surface(layer.get_size(), pygame.SRCALPHA)
            pygame.draw.circle(
                disc, (*disc_color, int((180 - i * 20) * frame.alpha)), (int(c), int(c)), max(1, int(r))
            )
            layer.blit(disc, (0, 0))

        rect = pygame.Rect(0, 0, max(1, int(frame.size * 0.06)), max(1, int(frame.size * 0.04)))
        rect.center = (int(c - frame.size * 0.04), int(c - frame.size * 0.06))
        pygame.draw.ellipse(layer, (255, 255, 255, int(170 * frame.alpha)), rect)

    def render_glyph(
        self,
        glyph: GlyphDescriptor,
        color: RGB,
        time_ms: float = 0.0,
    ) -> pygame.Surface:
        """Draw one glyph onto its own transparent square, centred."""
        extent = self.glyph_extent(glyph)
        side = int(math.ceil(extent * 2))
        c = side / 2
        layer = pygame.Surface((side, side), pygame.SRCALPHA)

        frame = glyph_frame(glyph, time_ms)
        self._draw_shadow(layer, c, frame)
        if frame.is_bud:
            self._draw_bud(layer, c, frame, color)
        else:
            self._draw_petals(layer, c, frame, glyph, color)
            self._draw_center(layer, c, frame, color)
        return layer

    def render_frame(
        self,
        glyphs: Sequence[GlyphDescriptor],
        time_ms: float = 0.0,
        surface: Optional[pygame.Surface] = None,
    ) -> pygame.Surface:
        """
        Render a full frame.

        Args:
            glyphs: Current glyph list.
            time_ms: Animation clock, drives petal wobble.
            surface: Target surface. A new one is created if None.

        Returns:
            Rendered pygame Surface.
        """
        cfg = self.config
        if surface is None:
            surface = pygame.Surface((cfg.width, cfg.height))
        self._background(surface)

        if not glyphs:
            self._render_placeholder(surface)
            return surface

        palette = cfg.get_palette()
        jitter = cfg.jitter
        for glyph in draw_order(glyphs):
            dx, dy = self.rng.uniform(-jitter, jitter, 2) if jitter > 0 else (0.0, 0.0)
            layer = self.render_glyph(glyph, glyph_color(palette, glyph.name), time_ms)
            half = layer.get_width() / 2
            surface.blit(layer, (int(glyph.x + dx - half), int(glyph.y + dy - half)))

        return surface

    def surface_to_array(self, surface: pygame.Surface) -> np.ndarray:
        """Convert pygame surface to a (height, width, 3) numpy array."""
        arr = pygame.surfarray.array3d(surface)
        return np.transpose(arr, (1, 0, 2))
