"""
Main garden pipeline.

Orchestrates the flow from uploaded audio files to animated glyphs and
routes pointer input back into the bloom animation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import numpy as np

from bloomscope.config import GardenConfig
from bloomscope.core.analyzer import FeatureAnalyzer
from bloomscope.core.bloom import AnimationScheduler, BloomAnimator, monotonic_ms
from bloomscope.core.decoder import AudioDecoder, SampleClip
from bloomscope.core.embedding import EmbeddingStage, Projector, UMAPProjector
from bloomscope.core.errors import DecodeFailure, EmptyInput
from bloomscope.core.glyphs import GlyphBuilder, GlyphDescriptor
from bloomscope.core.interaction import InteractionLayer

logger = logging.getLogger(__name__)

STATUS_READY = "Select audio files, then generate"
STATUS_LOADING = "Loading files..."
STATUS_NO_CLIPS = "No files loaded. Select some audio files first"
STATUS_GENERATING = "Extracting features and running UMAP..."
STATUS_DONE = "Done. Click a bud to play it and watch it bloom"
STATUS_GENERATE_FAILED = "An error occurred during generation (see log)"

_USE_DEFAULT = object()


@dataclass
class GardenSession:
    """
    Mutable state of one garden.

    ``clips`` and ``glyphs`` are only ever replaced wholesale; the
    animator and interaction layer mutate glyph fields in place.
    """

    clips: list[SampleClip] = field(default_factory=list)
    glyphs: list[GlyphDescriptor] = field(default_factory=list)
    status: str = STATUS_READY
    generation: int = 0


class GardenPipeline:
    """
    Upload → features → layout → glyphs → animation, in one object.

    Every failure is reported through the session status; none of them
    propagate out of ``load``, ``generate`` or ``click``.
    """

    def __init__(
        self,
        config: Optional[GardenConfig] = None,
        projector: Optional[Projector] = _USE_DEFAULT,
        player: Optional[Callable] = None,
        clock: Callable[[], float] = monotonic_ms,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Garden configuration. Uses defaults if None.
            projector: Layout projector. Defaults to UMAP; None forces the
                random fallback layout.
            player: Callable playing a SampleClip, e.g. a ClipPlayer.
            clock: Animation clock in milliseconds.
            on_status: Callback receiving every status message.
        """
        self.config = config or GardenConfig()
        self.player = player
        self.on_status = on_status
        self.session = GardenSession()

        self.rng = np.random.default_rng(self.config.seed)
        if projector is _USE_DEFAULT:
            projector = UMAPProjector()

        self.decoder = AudioDecoder()
        self.analyzer = FeatureAnalyzer()
        self.embedding = EmbeddingStage(projector=projector, rng=self.rng)
        self.builder = GlyphBuilder(
            size_scale=self.config.size_scale,
            base_open_duration=self.config.base_open_duration,
            rng=self.rng,
        )
        self.animator = BloomAnimator(
            base_open_duration=self.config.base_open_duration,
            clock=clock,
        )
        self.scheduler = AnimationScheduler()
        self.interaction = InteractionLayer(
            self.animator,
            play=player,
            on_status=self.set_status,
        )

    def set_status(self, message: str):
        self.session.status = message
        if self.on_status:
            self.on_status(message)

    # --- Upload ---

    def load_clips(self, clips: Iterable[SampleClip]):
        """Replace the clip list with already-decoded clips."""
        self.session.clips = list(clips)
        # Cached sounds belong to the previous batch
        clear_cache = getattr(self.player, "clear", None)
        if clear_cache is not None:
            clear_cache()
        self.set_status(f"Loaded {len(self.session.clips)} files. Now generate")

    def load(self, paths: Iterable[Union[str, Path]]) -> bool:
        """
        Decode an upload batch.

        On failure the clip list is left empty: a batch is never partially
        loaded.

        Returns:
            True if every file decoded.
        """
        paths = list(paths)
        if not paths:
            return False

        self.set_status(STATUS_LOADING)
        self.session.clips = []
        try:
            clips = self.decoder.load_batch(paths)
        except DecodeFailure as e:
            logger.error("%s", e)
            self.set_status(f"Failed to load files: {e.path}")
            return False

        self.load_clips(clips)
        return True

    # --- Generation ---

    def extract(self, clips: list[SampleClip]):
        for clip in clips:
            if clip.features is None:
                self.analyzer.analyze_clip(clip)

    def require_clips(self) -> list[SampleClip]:
        if not self.session.clips:
            raise EmptyInput(STATUS_NO_CLIPS)
        return self.session.clips

    def generate(self, width: Optional[int] = None, height: Optional[int] = None) -> bool:
        """
        Run extraction, layout and glyph building for the loaded clips.

        The glyph list is replaced only when the whole run succeeds. Runs
        are synchronous, so the latest call always wins.

        Returns:
            True if a new glyph list was committed.
        """
        width = width or self.config.width
        height = height or self.config.height
        try:
            clips = self.require_clips()
        except EmptyInput as e:
            self.set_status(str(e))
            return False

        self.session.generation += 1
        self.set_status(STATUS_GENERATING)

        try:
            self.extract(clips)
            self.embedding.embed_clips(clips)
            glyphs = self.builder.build(clips, width, height)
        except Exception:
            logger.exception("Generation failed")
            self.set_status(STATUS_GENERATE_FAILED)
            return False

        self.scheduler.stop()
        self.session.glyphs = glyphs
        self.set_status(STATUS_DONE)
        return True

    # --- Interaction & animation ---

    def hover(self, x: float, y: float) -> str:
        """Cursor name for the pointer position."""
        return self.interaction.cursor_for(self.session.glyphs, x, y)

    def click(self, x: float, y: float, now: Optional[float] = None) -> Optional[GlyphDescriptor]:
        """Play and bloom the glyph under the pointer, if any."""
        if not self.session.glyphs:
            return None
        glyph = self.interaction.click(self.session.glyphs, x, y, now)
        if glyph is not None and self.scheduler.should_run(self.session.glyphs):
            self.scheduler.start()
        return glyph

    def bloom_all(self):
        """Jump every glyph straight to fully open."""
        for glyph in self.session.glyphs:
            glyph.open_progress = 1.0
            glyph.is_opening = False
        self.scheduler.stop()

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Advance all opening glyphs by one frame.

        Returns:
            True while the scheduler should keep redrawing.
        """
        self.animator.tick(self.session.glyphs, now)
        if not self.scheduler.should_run(self.session.glyphs):
            self.scheduler.stop()
        return self.scheduler.running
