"""
Pointer interaction: hit-testing, hover cursor and click-to-bloom.
"""

import logging
import math
from typing import Callable, Optional, Sequence

from bloomscope.core.bloom import BUD_THRESHOLD, BloomAnimator
from bloomscope.core.errors import PlaybackFailure
from bloomscope.core.glyphs import GlyphDescriptor

logger = logging.getLogger(__name__)

CURSOR_POINTER = "pointer"
CURSOR_DEFAULT = "default"


def hit_radius(glyph: GlyphDescriptor) -> float:
    """Small fixed radius while budded, 40-100% of bloomed size once opening."""
    op = glyph.open_progress
    if op < BUD_THRESHOLD:
        return glyph.bud_radius * 0.6
    return glyph.size * (0.4 + 0.6 * op)


def is_hit(glyph: GlyphDescriptor, x: float, y: float) -> bool:
    return math.hypot(x - glyph.x, y - glyph.y) < hit_radius(glyph)


def draw_order(glyphs: Sequence[GlyphDescriptor]) -> list[GlyphDescriptor]:
    """Glyphs in paint order: smallest first, list order breaks ties."""
    return sorted(glyphs, key=lambda g: g.size)


def hit_test(glyphs: Sequence[GlyphDescriptor], x: float, y: float) -> Optional[GlyphDescriptor]:
    """
    Find the glyph under the pointer.

    Overlaps resolve to the topmost glyph on screen, i.e. the last one
    painted.
    """
    for glyph in reversed(draw_order(glyphs)):
        if is_hit(glyph, x, y):
            return glyph
    return None


class InteractionLayer:
    """
    Routes pointer events to playback and the bloom animator.

    Playback failures are reported through ``on_status`` and never stop
    the bloom.
    """

    def __init__(
        self,
        animator: BloomAnimator,
        play: Optional[Callable] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.animator = animator
        self.play = play
        self.on_status = on_status

    def _report_playback_error(self, glyph: GlyphDescriptor):
        if self.on_status:
            self.on_status(f"Playback error: {glyph.name}")

    def cursor_for(self, glyphs: Sequence[GlyphDescriptor], x: float, y: float) -> str:
        return CURSOR_POINTER if hit_test(glyphs, x, y) is not None else CURSOR_DEFAULT

    def click(
        self,
        glyphs: Sequence[GlyphDescriptor],
        x: float,
        y: float,
        now: Optional[float] = None,
    ) -> Optional[GlyphDescriptor]:
        """
        Play and bloom the glyph under the pointer.

        Returns:
            The glyph that was hit, or None.
        """
        glyph = hit_test(glyphs, x, y)
        if glyph is None:
            return None

        if self.play is not None and glyph.clip is not None:
            try:
                self.play(glyph.clip)
            except PlaybackFailure as e:
                logger.error("Playback failed for %s: %s", glyph.name, e)
                self._report_playback_error(glyph)
            except Exception:
                logger.exception("Unexpected playback error for %s", glyph.name)
                self._report_playback_error(glyph)

        self.animator.trigger(glyph, now)
        return glyph
