"""
Garden export module.

Saves the rendered frame as a PNG and the glyph layout as a JSON
manifest that describes every flower independently of the renderer.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence, Union

import numpy as np
from PIL import Image

from bloomscope.core.bloom import bloom_state
from bloomscope.core.glyphs import GlyphDescriptor


@dataclass
class LayoutMetadata:
    """Metadata header for the layout manifest."""

    width: int
    height: int
    palette: str
    n_glyphs: int
    schema_version: str = "1.0"


class LayoutExporter:
    """Exports glyph layouts to JSON and rendered frames to PNG."""

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        """Round to configured precision."""
        return round(float(value), self.precision)

    def _build_glyph(self, index: int, glyph: GlyphDescriptor) -> dict[str, Any]:
        return {
            "index": index,
            "name": glyph.name,
            "x": self._round(glyph.x),
            "y": self._round(glyph.y),
            "petals": glyph.petals,
            "base_size": self._round(glyph.base_size),
            "size_multiplier": self._round(glyph.size_multiplier),
            "size": self._round(glyph.size),
            "petal_length": self._round(glyph.petal_length),
            "fuzz": self._round(glyph.fuzz),
            "sharpness": self._round(glyph.sharpness),
            "duration": self._round(glyph.duration),
            "open_duration": self._round(glyph.open_duration),
            "open_progress": self._round(glyph.open_progress),
            "state": bloom_state(glyph).value,
            "petal_params": [
                {
                    "offset": self._round(p.offset),
                    "bend": self._round(p.bend),
                    "twist": self._round(p.twist),
                    "jitter": self._round(p.jitter),
                }
                for p in glyph.petal_params
            ],
        }

    def build_manifest(
        self,
        glyphs: Sequence[GlyphDescriptor],
        width: int,
        height: int,
        palette: str = "animals",
    ) -> dict[str, Any]:
        """
        Build the complete layout dictionary.

        Args:
            glyphs: Current glyph list.
            width: Canvas width.
            height: Canvas height.
            palette: Active palette name.

        Returns:
            Manifest dictionary ready for serialization.
        """
        metadata = LayoutMetadata(
            width=width,
            height=height,
            palette=palette,
            n_glyphs=len(glyphs),
        )
        return {
            "metadata": {
                "width": metadata.width,
                "height": metadata.height,
                "palette": metadata.palette,
                "n_glyphs": metadata.n_glyphs,
                "schema_version": metadata.schema_version,
            },
            "glyphs": [self._build_glyph(i, g) for i, g in enumerate(glyphs)],
        }

    def export_json(
        self,
        glyphs: Sequence[GlyphDescriptor],
        output_path: Union[str, Path],
        width: int,
        height: int,
        palette: str = "animals",
        indent: int = 2,
    ) -> Path:
        """Write the layout manifest to a JSON file."""
        manifest = self.build_manifest(glyphs, width, height, palette)
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=indent)

        return output_path

    def export_png(
        self,
        frame: np.ndarray,
        output_path: Union[str, Path] = "umap-flowers",
    ) -> Path:
        """
        Save a rendered frame as PNG.

        Args:
            frame: (H, W, 3) uint8 RGB array.
            output_path: Target path; ``.png`` is appended when missing.

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)
        if output_path.suffix.lower() != ".png":
            output_path = output_path.with_name(output_path.name + ".png")

        Image.fromarray(np.ascontiguousarray(frame, dtype=np.uint8)).save(output_path)
        return output_path
