"""Core feature, layout and animation modules."""

from bloomscope.core.analyzer import FeatureAnalyzer
from bloomscope.core.bloom import BloomAnimator
from bloomscope.core.decoder import AudioDecoder
from bloomscope.core.embedding import EmbeddingStage
from bloomscope.core.glyphs import GlyphBuilder
from bloomscope.core.interaction import InteractionLayer

__all__ = [
    "AudioDecoder",
    "BloomAnimator",
    "EmbeddingStage",
    "FeatureAnalyzer",
    "GlyphBuilder",
    "InteractionLayer",
]
