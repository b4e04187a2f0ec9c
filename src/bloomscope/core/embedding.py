"""
2D projection of clip feature vectors.

Lays the batch out with UMAP and falls back to a uniform random layout
whenever the projection cannot run.
"""

import logging
from typing import Optional, Protocol, Sequence

import numpy as np

from bloomscope.core.errors import ProjectionFailure

logger = logging.getLogger(__name__)


class Projector(Protocol):
    """Anything that maps an (n, d) matrix to n 2D points."""

    def fit(self, matrix: np.ndarray) -> Sequence[Sequence[float]]:
        ...


class UMAPProjector:
    """Neighbor-graph projection backed by umap-learn."""

    def __init__(
        self,
        n_components: int = 2,
        n_neighbors: int = 8,
        min_dist: float = 0.2,
    ):
        self.n_components = n_components
        self.n_neighbors = n_neighbors
        self.min_dist = min_dist

    def fit(self, matrix: np.ndarray) -> np.ndarray:
        # umap pulls in numba; only pay the import cost when a layout is fitted
        import umap

        model = umap.UMAP(
            n_components=self.n_components,
            n_neighbors=self.n_neighbors,
            min_dist=self.min_dist,
        )
        return model.fit_transform(np.asarray(matrix, dtype=np.float64))


class EmbeddingStage:
    """
    Produces one layout coordinate per clip, in input order.

    A missing projector or a failed fit is not an error for the caller:
    every clip gets an independent uniform point in [0, 1] x [0, 1].
    """

    def __init__(
        self,
        projector: Optional[Projector] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the stage.

        Args:
            projector: Projection capability. None forces the random layout.
            rng: Generator used for the fallback layout.
        """
        self.projector = projector
        self.rng = rng if rng is not None else np.random.default_rng()

    def random_layout(self, n: int) -> list[tuple[float, float]]:
        """Independent uniform points in the unit square."""
        points = self.rng.random((n, 2))
        return [(float(x), float(y)) for x, y in points]

    def project(self, matrix: np.ndarray) -> list[tuple[float, float]]:
        """
        Run the projector and validate its output.

        Raises:
            ProjectionFailure: No projector, the fit raised, or the result
                does not hold one finite 2D point per row.
        """
        if self.projector is None:
            raise ProjectionFailure("no projection capability available")

        try:
            result = np.asarray(self.projector.fit(matrix), dtype=np.float64)
        except Exception as e:
            raise ProjectionFailure(f"projection fit failed: {e}") from e

        if result.shape != (len(matrix), 2) or not np.all(np.isfinite(result)):
            raise ProjectionFailure(
                f"projection returned shape {result.shape} for {len(matrix)} rows"
            )
        return [(float(x), float(y)) for x, y in result]

    def embed(self, vectors: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
        """
        Lay out a batch of feature vectors.

        Args:
            vectors: One feature vector per clip.

        Returns:
            One (x, y) coordinate per vector, same order.
        """
        n = len(vectors)
        if n == 0:
            return []

        matrix = np.asarray(vectors, dtype=np.float64).reshape(n, -1)
        try:
            return self.project(matrix)
        except ProjectionFailure as e:
            logger.warning("%s; using random fallback layout", e)
            return self.random_layout(n)

    def embed_clips(self, clips) -> list[tuple[float, float]]:
        """Embed clips with populated Features and attach the coordinates."""
        coords = self.embed([clip.features.vector for clip in clips])
        for clip, coord in zip(clips, coords):
            clip.embedding = coord
        return coords
