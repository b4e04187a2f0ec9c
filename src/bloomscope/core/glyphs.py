"""
Glyph parameter builder.

Maps each clip's features, duration and layout coordinate into a
self-contained flower descriptor:
- Spectral centroid → petal count & petal length
- RMS energy → base size
- Duration → size multiplier (log scale)
- Flatness → fuzz
- Centroid, flatness, ZCR → sharpness
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

# Duration range mapped onto SIZE_SCALE_RANGE (seconds)
MIN_DURATION = 0.3
MAX_DURATION = 12.0
SIZE_SCALE_RANGE = (0.6, 2.2)

NORMALIZE_CENTROID = 8000.0
SHARP_WEIGHTS = {"centroid": 0.6, "flatness": 0.25, "zcr": 0.15}

CANVAS_MARGIN = 80.0
BASE_OPEN_DURATION_MS = 700.0


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a * (1 - t) + b * t


@dataclass(frozen=True)
class PetalParams:
    """Per-petal organic variation, sampled once per glyph."""

    offset: float  # opening delay, fraction of the open duration
    bend: float    # curvature factor
    twist: float   # rotation offset in degrees
    jitter: float  # control-point wobble magnitude


@dataclass
class GlyphDescriptor:
    """Rendering contract for one clip."""

    name: str
    x: float
    y: float
    petals: int
    base_size: float
    size_multiplier: float
    size: float  # final bloomed size
    petal_length: float
    fuzz: float
    sharpness: float
    zcr: float
    duration: float  # clamped to [MIN_DURATION, MAX_DURATION]
    petal_params: tuple[PetalParams, ...]
    clip: Any = field(default=None, repr=False, compare=False)

    # Animation state, mutated by the bloom engine
    open_progress: float = 0.0
    is_opening: bool = False
    open_start: float = 0.0
    open_duration: float = BASE_OPEN_DURATION_MS

    @property
    def bud_size(self) -> float:
        return self.base_size * 0.18

    @property
    def bud_radius(self) -> float:
        return self.bud_size * 10


def petal_count(centroid_mean: float) -> int:
    """Brighter clips get more petals; never fewer than 3."""
    if not math.isfinite(centroid_mean):
        centroid_mean = 0.0
    return max(3, int(math.floor(3 + (centroid_mean / 1000.0) * 9 + 0.5)))


def size_multiplier(duration: float) -> float:
    """
    Log-scale map of clip duration onto SIZE_SCALE_RANGE.

    Durations outside [MIN_DURATION, MAX_DURATION] are clamped.
    """
    dur = clamp(duration if duration and math.isfinite(duration) else MIN_DURATION,
                MIN_DURATION, MAX_DURATION)
    log_norm = (math.log(dur) - math.log(MIN_DURATION)) / (
        math.log(MAX_DURATION) - math.log(MIN_DURATION)
    )
    lo, hi = SIZE_SCALE_RANGE
    return lerp(lo, hi, clamp(log_norm, 0.0, 1.0))


def sharpness_score(centroid_mean: float, flatness_mean: float, zcr_mean: float) -> float:
    """Weighted blend of brightness, noisiness and crossing rate in [0, 1]."""
    norm_centroid = clamp(centroid_mean / NORMALIZE_CENTROID, 0.0, 1.0)
    return clamp(
        SHARP_WEIGHTS["centroid"] * norm_centroid
        + SHARP_WEIGHTS["flatness"] * flatness_mean
        + SHARP_WEIGHTS["zcr"] * zcr_mean,
        0.0,
        1.0,
    )


def normalize_axis(values: Sequence[float]) -> np.ndarray:
    """Min/max normalize to [0, 1]; a flat axis maps everything to 0."""
    arr = np.asarray(values, dtype=np.float64)
    if len(arr) == 0:
        return arr
    span = arr.max() - arr.min()
    return (arr - arr.min()) / (span or 1.0)


class GlyphBuilder:
    """
    Builds the full glyph list for one generation run.

    All randomness is drawn from the injected generator, so a fixed seed
    reproduces petal params and open durations exactly.
    """

    def __init__(
        self,
        size_scale: float = 1.0,
        base_open_duration: float = BASE_OPEN_DURATION_MS,
        margin: float = CANVAS_MARGIN,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the builder.

        Args:
            size_scale: Multiplier on the energy-driven part of base size.
            base_open_duration: Nominal bloom duration in milliseconds.
            margin: Canvas margin kept free on every side, in pixels.
            rng: Random generator for organic variation.
        """
        self.size_scale = size_scale
        self.base_open_duration = base_open_duration
        self.margin = margin
        self.rng = rng if rng is not None else np.random.default_rng()

    def sample_petal_params(self, petals: int) -> tuple[PetalParams, ...]:
        """Draw one PetalParams per petal."""
        params = []
        for _ in range(petals):
            r = self.rng.random(5)
            params.append(
                PetalParams(
                    offset=float(r[0] * 0.18 * (0.6 + r[1] * 0.6)),
                    bend=float(0.4 + r[2] * 0.9),
                    twist=float((r[3] - 0.5) * 18.0),
                    jitter=float(r[4] * 0.25),
                )
            )
        return tuple(params)

    def canvas_positions(
        self,
        embeddings: Sequence[Sequence[float]],
        width: float,
        height: float,
    ) -> list[tuple[float, float]]:
        """Map raw embedding coordinates into the canvas interior."""
        if len(embeddings) == 0:
            return []
        coords = np.asarray(embeddings, dtype=np.float64).reshape(len(embeddings), 2)
        nx = normalize_axis(coords[:, 0])
        ny = normalize_axis(coords[:, 1])
        m = self.margin
        return [
            (lerp(m, width - m, float(ux)), lerp(m, height - m, float(uy)))
            for ux, uy in zip(nx, ny)
        ]

    def build_glyph(self, clip, position: tuple[float, float]) -> GlyphDescriptor:
        """Build the descriptor for one clip placed at ``position``."""
        stats = clip.features.stats
        energy = stats["rms"].mean
        centroid = stats["spectral_centroid"].mean
        flatness = stats["spectral_flatness"].mean
        zcr = stats["zcr"].mean

        petals = petal_count(centroid)
        base_size = 18 + energy * 200 * self.size_scale
        multiplier = size_multiplier(clip.duration)
        duration = clamp(clip.duration or MIN_DURATION, MIN_DURATION, MAX_DURATION)

        return GlyphDescriptor(
            name=clip.name,
            x=position[0],
            y=position[1],
            petals=petals,
            base_size=base_size,
            size_multiplier=multiplier,
            size=base_size * multiplier,
            petal_length=0.6 + (centroid / 3000.0) * 1.8,
            fuzz=clamp(flatness * 6, 0.0, 1.0),
            sharpness=sharpness_score(centroid, flatness, zcr),
            zcr=zcr,
            duration=duration,
            petal_params=self.sample_petal_params(petals),
            clip=clip,
            open_duration=self.base_open_duration * (0.85 + self.rng.random() * 0.35),
        )

    def build(self, clips, width: float, height: float) -> list[GlyphDescriptor]:
        """
        Build glyphs for every clip with Features and an embedding.

        Args:
            clips: SampleClips in layout order.
            width: Canvas width in pixels.
            height: Canvas height in pixels.

        Returns:
            A new list of GlyphDescriptors in clip order.
        """
        positions = self.canvas_positions([c.embedding for c in clips], width, height)
        return [self.build_glyph(clip, pos) for clip, pos in zip(clips, positions)]
