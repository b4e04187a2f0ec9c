"""Audio clips grown into a UMAP-laid-out garden of blooming flowers."""

from bloomscope.config import GardenConfig
from bloomscope.core.analyzer import FeatureAnalyzer, Features
from bloomscope.core.bloom import AnimationScheduler, BloomAnimator
from bloomscope.core.decoder import AudioDecoder, SampleClip
from bloomscope.core.embedding import EmbeddingStage, UMAPProjector
from bloomscope.core.glyphs import GlyphBuilder, GlyphDescriptor
from bloomscope.io.exporter import LayoutExporter
from bloomscope.pipeline import GardenPipeline, GardenSession

__version__ = "0.1.0"
__all__ = [
    "AnimationScheduler",
    "AudioDecoder",
    "BloomAnimator",
    "EmbeddingStage",
    "FeatureAnalyzer",
    "Features",
    "GardenConfig",
    "GardenPipeline",
    "GardenSession",
    "GlyphBuilder",
    "GlyphDescriptor",
    "LayoutExporter",
    "SampleClip",
    "UMAPProjector",
]
