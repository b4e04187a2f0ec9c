"""
Feature extraction module for clip layout.

Reduces a mono clip to coarse framewise statistics: RMS energy,
spectral centroid, spectral flatness and zero-crossing rate.
"""

from dataclasses import dataclass

import librosa
import numpy as np


@dataclass(frozen=True)
class FeatureStat:
    """Mean and standard deviation of one framewise scalar."""

    mean: float = 0.0
    std: float = 0.0


@dataclass(frozen=True)
class Features:
    """Per-clip descriptor vector plus the summary stats it was built from."""

    vector: tuple[float, ...]
    stats: dict[str, FeatureStat]

    @property
    def rms(self) -> FeatureStat:
        return self.stats["rms"]

    @property
    def spectral_centroid(self) -> FeatureStat:
        return self.stats["spectral_centroid"]

    @property
    def spectral_flatness(self) -> FeatureStat:
        return self.stats["spectral_flatness"]

    @property
    def zcr(self) -> FeatureStat:
        return self.stats["zcr"]


def _finite(value: float) -> float:
    value = float(value)
    return value if np.isfinite(value) else 0.0


class FeatureAnalyzer:
    """
    Extracts the layout descriptor of a single clip.

    The spectral measures are magnitude-sum approximations computed on
    the raw frame, not on an FFT spectrum.
    """

    FEATURE_KEYS = ("rms", "spectral_centroid", "spectral_flatness", "zcr")
    VECTOR_SIZE = 8

    def __init__(
        self,
        frame_size: int = 1024,
        hop_length: int = 512,
        n_bins: int = 32,
        epsilon: float = 1e-12,
    ):
        """
        Initialize the analyzer.

        Args:
            frame_size: Analysis window length in samples.
            hop_length: Distance between window starts in samples.
            n_bins: Number of coarse bins for the centroid estimate.
            epsilon: Magnitude floor for the flatness logarithm.
        """
        self.frame_size = frame_size
        self.hop_length = hop_length
        self.n_bins = n_bins
        self.epsilon = epsilon

    def frame(self, y: np.ndarray) -> np.ndarray:
        """
        Slice a signal into overlapping analysis frames.

        A frame starting at ``i`` is kept only while ``i + frame_size`` is
        strictly inside the buffer, so a buffer of ``frame_size`` samples
        or fewer yields no frames.

        Returns:
            (n_frames, frame_size) array.
        """
        y = np.asarray(y, dtype=np.float64)
        usable = y[:-1] if len(y) else y
        if len(usable) < self.frame_size:
            return np.zeros((0, self.frame_size))
        frames = librosa.util.frame(
            np.ascontiguousarray(usable),
            frame_length=self.frame_size,
            hop_length=self.hop_length,
        )
        return frames.T

    def compute_rms(self, frames: np.ndarray) -> np.ndarray:
        """Root-mean-square energy per frame."""
        if len(frames) == 0:
            return np.zeros(0)
        return np.sqrt(np.mean(frames ** 2, axis=1))

    def compute_spectral_centroid(self, frames: np.ndarray, sr: int) -> np.ndarray:
        """Energy-weighted mean coarse bin, scaled to Hz by the Nyquist frequency."""
        if len(frames) == 0:
            return np.zeros(0)

        n = frames.shape[1]
        bin_size = max(1, n // self.n_bins)
        usable = min(n, bin_size * self.n_bins)
        mags = np.abs(frames[:, :usable])

        # Trailing bins stay empty when the frame is shorter than n_bins
        n_filled = usable // bin_size
        bins = np.zeros((len(frames), self.n_bins))
        bins[:, :n_filled] = mags.reshape(len(frames), n_filled, bin_size).sum(axis=2)

        numer = bins @ np.arange(self.n_bins)
        denom = bins.sum(axis=1)
        centroid_bin = np.divide(
            numer, denom, out=np.zeros_like(numer), where=denom > 0
        )
        return centroid_bin / self.n_bins * (sr / 2)

    def compute_spectral_flatness(self, frames: np.ndarray) -> np.ndarray:
        """
        Geometric over arithmetic mean of sample magnitudes.

        Near 1 for noise-like frames, near 0 for tonal ones. A frame with
        no energy at all has flatness 0.
        """
        if len(frames) == 0:
            return np.zeros(0)

        vals = np.abs(frames) + self.epsilon
        geom = np.exp(np.mean(np.log(vals), axis=1))
        arith = np.mean(vals, axis=1)
        flatness = geom / arith

        silent = ~np.any(frames != 0, axis=1)
        flatness[silent] = 0.0
        return flatness

    def compute_zcr(self, frames: np.ndarray) -> np.ndarray:
        """Fraction of adjacent sample pairs whose sign changes."""
        if len(frames) == 0:
            return np.zeros(0)
        positive = frames > 0
        crossings = np.count_nonzero(positive[:, 1:] != positive[:, :-1], axis=1)
        return crossings / frames.shape[1]

    def _stat(self, values: np.ndarray) -> FeatureStat:
        if len(values) == 0:
            return FeatureStat()
        return FeatureStat(mean=_finite(np.mean(values)), std=_finite(np.std(values)))

    def analyze(self, y: np.ndarray, sr: int) -> Features:
        """
        Perform feature extraction on one mono buffer.

        Never raises for silent, short or empty input; every missing
        statistic defaults to 0.

        Args:
            y: Mono audio signal.
            sr: Sample rate.

        Returns:
            Features with an 8-dim vector and the per-feature stats.
        """
        frames = self.frame(y)

        stats = {
            "rms": self._stat(self.compute_rms(frames)),
            "spectral_centroid": self._stat(self.compute_spectral_centroid(frames, sr)),
            "spectral_flatness": self._stat(self.compute_spectral_flatness(frames)),
            "zcr": self._stat(self.compute_zcr(frames)),
        }

        vector = (
            np.log1p(stats["rms"].mean),
            np.log1p(stats["rms"].std),
            np.log1p(stats["spectral_centroid"].mean),
            np.log1p(stats["spectral_centroid"].std),
            stats["spectral_flatness"].mean,
            stats["spectral_flatness"].std,
            stats["zcr"].mean,
            stats["zcr"].std,
        )

        return Features(
            vector=tuple(_finite(v) for v in vector),
            stats=stats,
        )

    def analyze_clip(self, clip) -> Features:
        """Extract and attach Features to a SampleClip."""
        clip.features = self.analyze(clip.samples, clip.sample_rate)
        return clip.features
