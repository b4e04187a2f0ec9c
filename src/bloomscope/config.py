"""
Configuration for the flower garden.
"""

from dataclasses import dataclass
from typing import Optional

from bloomscope.visualizers.palette import Palette


@dataclass
class GardenConfig:
    """Settings shared by the pipeline, the renderer and the app."""

    width: int = 1280
    height: int = 800
    fps: int = 60

    # Layout & shape
    size_scale: float = 1.0
    jitter: float = 6.0  # per-frame position jitter, pixels
    base_open_duration: float = 700.0  # ms

    # Palette: "animals", "pastel", "deep", "monochrome" or "custom"
    palette: str = "animals"
    custom_colors: tuple[str, ...] = ("#ff6b6b", "#4ecdc4", "#ffe66d")

    # Rendering
    background_color: tuple[int, int, int] = (18, 20, 29)
    overlay_alpha: int = 80

    # Audio
    master_gain: float = 0.9

    # None seeds from OS entropy
    seed: Optional[int] = None

    export_name: str = "umap-flowers"

    def get_palette(self) -> Palette:
        return Palette.from_config(self.palette, self.custom_colors)
