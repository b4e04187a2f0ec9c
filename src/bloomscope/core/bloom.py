"""
Bloom animation engine.

Each glyph is a one-shot state machine:

    CLOSED --trigger--> OPENING --elapsed >= duration--> OPEN

Opening progress follows a cubic ease-out of elapsed time. Petal
geometry is derived per frame from that progress: every petal starts
late by its own phase offset and its Bezier control points travel
nonlinearly, so petals bend strongly early on and straighten as they
open.
"""

import enum
import math
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import numpy as np

from bloomscope.core.glyphs import (
    BASE_OPEN_DURATION_MS,
    MAX_DURATION,
    GlyphDescriptor,
    clamp,
    lerp,
)

ORGANICNESS = 0.9
N_LAYERS = 4
BUD_THRESHOLD = 0.02


class BloomState(enum.Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"


def ease_out_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1 - (1 - t) ** 3


def bloom_state(glyph: GlyphDescriptor) -> BloomState:
    if glyph.is_opening:
        return BloomState.OPENING
    if glyph.open_progress >= 1.0:
        return BloomState.OPEN
    return BloomState.CLOSED


def monotonic_ms() -> float:
    """Default animation clock, in milliseconds."""
    return time.monotonic() * 1000.0


class BloomAnimator:
    """
    Drives the open/opening/closed transitions of a glyph list.

    The clock is shared by every glyph so that a frame sees one
    consistent "now".
    """

    def __init__(
        self,
        base_open_duration: float = BASE_OPEN_DURATION_MS,
        clock: Callable[[], float] = monotonic_ms,
    ):
        """
        Initialize the animator.

        Args:
            base_open_duration: Nominal bloom duration in milliseconds.
            clock: Callable returning the current time in milliseconds.
        """
        self.base_open_duration = base_open_duration
        self.clock = clock

    def open_duration_for(self, duration: float) -> float:
        """Longer clips bloom more slowly."""
        return self.base_open_duration * (
            0.6 + 0.8 * (math.log(duration + 1) / math.log(MAX_DURATION + 1))
        )

    def trigger(self, glyph: GlyphDescriptor, now: Optional[float] = None) -> bool:
        """
        Start the bloom of a closed glyph.

        Returns:
            True if the glyph started opening, False if it was already
            opening or open (the glyph is left untouched).
        """
        if bloom_state(glyph) is not BloomState.CLOSED:
            return False

        glyph.open_duration = self.open_duration_for(glyph.duration)
        glyph.open_start = self.clock() if now is None else now
        glyph.is_opening = True
        return True

    def advance(self, glyph: GlyphDescriptor, now: float):
        """Update one opening glyph to time ``now``."""
        if not glyph.is_opening:
            return
        elapsed = clamp((now - glyph.open_start) / max(glyph.open_duration, 1e-9), 0.0, 1.0)
        glyph.open_progress = ease_out_cubic(elapsed)
        if elapsed >= 1.0:
            glyph.open_progress = 1.0
            glyph.is_opening = False

    def tick(self, glyphs: Iterable[GlyphDescriptor], now: Optional[float] = None) -> bool:
        """
        Advance every opening glyph.

        Returns:
            True while at least one glyph was opening during this tick.
        """
        now = self.clock() if now is None else now
        any_opening = False
        for glyph in glyphs:
            if glyph.is_opening:
                any_opening = True
                self.advance(glyph, now)
        return any_opening


class AnimationScheduler:
    """
    Explicit on/off switch for the continuous redraw loop.

    The frame loop redraws every frame only while the scheduler is
    running; otherwise it waits for input events and renders statically.
    """

    def __init__(self):
        self.running = False

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def should_run(self, glyphs: Iterable[GlyphDescriptor]) -> bool:
        return any(g.is_opening for g in glyphs)


@dataclass(frozen=True)
class PetalCurve:
    """
    One petal in glyph-local coordinates, before rotation.

    The outline runs centre → tip along (cp1, cp2) and back along the
    mirrored control points.
    """

    index: int
    layer: int
    angle: float  # degrees
    progress: float
    cp1: tuple[float, float]
    cp2: tuple[float, float]
    tip: tuple[float, float]

    def outline(self, steps: int = 12) -> np.ndarray:
        """Sampled closed outline, (2 * steps + 1, 2) in local coordinates."""
        origin = (0.0, 0.0)
        upper = cubic_bezier(origin, self.cp1, self.cp2, self.tip, steps)
        lower = cubic_bezier(
            self.tip,
            (self.cp2[0], -self.cp2[1]),
            (self.cp1[0], -self.cp1[1]),
            origin,
            steps,
        )
        return np.vstack([upper, lower[1:]])

    def rotated_outline(self, steps: int = 12) -> np.ndarray:
        """Outline rotated by ``angle`` around the glyph centre."""
        theta = math.radians(self.angle)
        rot = np.array([
            [math.cos(theta), -math.sin(theta)],
            [math.sin(theta), math.cos(theta)],
        ])
        return self.outline(steps) @ rot.T


@dataclass(frozen=True)
class GlyphFrame:
    """Everything needed to draw one glyph at one instant."""

    progress: float
    is_bud: bool
    size: float
    petal_length: float
    alpha: float
    bud_radius: float
    petals: tuple[PetalCurve, ...] = ()


def cubic_bezier(p0, p1, p2, p3, steps: int = 12) -> np.ndarray:
    """Sample a cubic Bezier curve at ``steps + 1`` evenly spaced parameters."""
    t = np.linspace(0.0, 1.0, steps + 1)[:, None]
    pts = np.array([p0, p1, p2, p3], dtype=np.float64)
    return (
        (1 - t) ** 3 * pts[0]
        + 3 * (1 - t) ** 2 * t * pts[1]
        + 3 * (1 - t) * t ** 2 * pts[2]
        + t ** 3 * pts[3]
    )


def petal_progress(glyph: GlyphDescriptor, k: int) -> float:
    """Eased progress of petal ``k``, delayed by its phase offset."""
    params = glyph.petal_params[k % len(glyph.petal_params)]
    duration = max(glyph.open_duration, 1e-9)
    delay = params.offset * duration
    local_t = clamp((glyph.open_progress * duration - delay) / duration, 0.0, 1.0)
    return ease_out_cubic(local_t)


def petal_curve(
    glyph: GlyphDescriptor,
    k: int,
    layer: int,
    size: float,
    petal_length: float,
    time_ms: float = 0.0,
) -> PetalCurve:
    """
    Geometry of petal ``k`` in ``layer`` for the current frame.

    Higher sharpness gives longer, narrower petals. Early in the opening
    the first control point sits far off-axis and the tip curls upward;
    both relax as the petal opens.
    """
    params = glyph.petal_params[k % len(glyph.petal_params)]
    sharp = clamp(glyph.sharpness, 0.0, 1.0)
    pet_op = petal_progress(glyph, k)
    layer_t = layer / N_LAYERS

    tip_stretch = 1 + sharp * 0.6
    length = size * petal_length * tip_stretch * (1 - layer_t * 0.06)
    width = size * (0.36 * (1 - 0.45 * sharp)) * (1 - layer_t * 0.06)

    bend = params.bend * (0.6 + 0.8 * ORGANICNESS) * (0.6 + 0.4 * (1 - pet_op))
    twist = params.twist * (1 - 0.5 * pet_op)
    time_base = time_ms * 0.0008
    wobble = math.sin(time_base * (1 + params.jitter * 6) + k * 0.7) * (2.0 * params.jitter)

    cp1 = (length * (0.18 + 0.12 * (1 - pet_op)), -width * (0.7 * bend) * (1 - 0.5 * pet_op))
    cp2 = (length * (0.55 + 0.25 * pet_op), -width * (0.06 + 0.18 * (1 - pet_op)))
    tip = (length * (0.9 + 0.15 * pet_op), -length * 0.08 * ORGANICNESS * (1 - pet_op))

    return PetalCurve(
        index=k,
        layer=layer,
        angle=(360.0 / glyph.petals) * k + twist + wobble,
        progress=pet_op,
        cp1=cp1,
        cp2=cp2,
        tip=tip,
    )


def glyph_frame(glyph: GlyphDescriptor, time_ms: float = 0.0) -> GlyphFrame:
    """
    Derive the drawable state of a glyph from its open progress.

    Below BUD_THRESHOLD the glyph is a closed bud and carries no petals.
    Petals are ordered back-to-front: layer 0 first.
    """
    op = clamp(glyph.open_progress, 0.0, 1.0)
    size = lerp(glyph.bud_size, glyph.size, op)
    petal_length = lerp(glyph.petal_length * 0.12, glyph.petal_length, op)

    if op < BUD_THRESHOLD:
        return GlyphFrame(
            progress=op,
            is_bud=True,
            size=size,
            petal_length=petal_length,
            alpha=op,
            bud_radius=glyph.bud_radius,
        )

    petals = tuple(
        petal_curve(glyph, k, layer, size, petal_length, time_ms)
        for layer in range(N_LAYERS)
        for k in range(glyph.petals)
    )
    return GlyphFrame(
        progress=op,
        is_bud=False,
        size=size,
        petal_length=petal_length,
        alpha=op,
        bud_radius=glyph.bud_radius,
        petals=petals,
    )
