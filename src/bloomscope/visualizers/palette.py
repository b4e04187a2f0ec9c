"""
Colour palettes and per-glyph colour selection.
"""

import colorsys
import enum
from dataclasses import dataclass

RGB = tuple[int, int, int]


class PaletteName(enum.Enum):
    ANIMALS = "animals"
    PASTEL = "pastel"
    DEEP = "deep"
    MONOCHROME = "monochrome"
    CUSTOM = "custom"


PRESET_COLORS = {
    PaletteName.ANIMALS: ("#2B2D42", "#8D99AE", "#EF233C", "#D90429", "#FFD166"),
    PaletteName.PASTEL: ("#ffadad", "#ffd6a5", "#fdffb6", "#caffbf", "#9bf6ff"),
    PaletteName.DEEP: ("#0b2d4a", "#104e8b", "#1f8a70", "#6bd3d5", "#ffcf5c"),
    PaletteName.MONOCHROME: ("#222222", "#7f7f7f", "#dcdcdc", "#f6d365", "#ffb199"),
}


def hex_to_rgb(value: str) -> RGB:
    """Parse ``#rrggbb`` (or ``rrggbb``) into an RGB tuple."""
    h = value.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    if len(h) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


@dataclass(frozen=True)
class Palette:
    """A named preset, or a custom palette of exactly three colours."""

    name: PaletteName
    colors: tuple[RGB, ...]

    @classmethod
    def preset(cls, name) -> "Palette":
        name = PaletteName(name)
        if name is PaletteName.CUSTOM:
            raise ValueError("custom palettes need three colours; use Palette.custom()")
        return cls(name, tuple(hex_to_rgb(c) for c in PRESET_COLORS[name]))

    @classmethod
    def custom(cls, c1: str, c2: str, c3: str) -> "Palette":
        return cls(PaletteName.CUSTOM, (hex_to_rgb(c1), hex_to_rgb(c2), hex_to_rgb(c3)))

    @classmethod
    def from_config(cls, name: str, custom_colors=None) -> "Palette":
        if PaletteName(name) is PaletteName.CUSTOM:
            if not custom_colors or len(custom_colors) != 3:
                return cls.preset(PaletteName.ANIMALS)
            return cls.custom(*custom_colors)
        return cls.preset(name)


def hash_string_to_01(s: str) -> float:
    """32-bit FNV-1a hash of the UTF-16 code units of ``s``, folded onto [0, 1) in steps of 0.001."""
    h = 2166136261
    units = s.encode("utf-16-le")
    for i in range(0, len(units), 2):
        h = ((h ^ int.from_bytes(units[i:i + 2], "little")) * 16777619) & 0xFFFFFFFF
    return (h % 1000) / 1000


def shift_hue(color: RGB, degrees: float) -> RGB:
    """Rotate the hue of an RGB colour, keeping saturation and brightness."""
    r, g, b = (c / 255 for c in color)
    h, s, v = colorsys.rgb_to_hsv(r, g, b)
    h = (h + degrees / 360.0) % 1.0
    r, g, b = colorsys.hsv_to_rgb(h, s, v)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def lerp_color(a: RGB, b: RGB, t: float) -> RGB:
    t = max(0.0, min(1.0, t))
    return tuple(int(round(ca + (cb - ca) * t)) for ca, cb in zip(a, b))


def glyph_color(palette: Palette, name: str) -> RGB:
    """
    Stable colour for a clip name.

    The name picks a palette entry; a second hash nudges its hue by up
    to ±15° so neighbouring clips of the same entry stay distinguishable.
    """
    n = len(palette.colors)
    base = palette.colors[int(hash_string_to_01(name) * n) % n]
    return shift_hue(base, (hash_string_to_01(name + "h") - 0.5) * 30)
