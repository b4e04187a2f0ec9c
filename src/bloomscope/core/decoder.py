"""
Audio decoding module.

Loads uploaded files into immutable mono sample buffers. Multi-channel
audio is downmixed by averaging the first two channels.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Union

import librosa
import numpy as np

from bloomscope.core.errors import DecodeFailure

if TYPE_CHECKING:
    from bloomscope.core.analyzer import Features


@dataclass
class SampleClip:
    """One uploaded clip: a mono buffer plus derived features and layout."""

    name: str
    samples: np.ndarray
    sample_rate: int
    duration: float
    features: Optional["Features"] = field(default=None, repr=False)
    embedding: Optional[tuple[float, float]] = None

    def __post_init__(self):
        self.samples = np.ascontiguousarray(self.samples, dtype=np.float32)
        self.samples.flags.writeable = False

    @property
    def n_samples(self) -> int:
        """Total number of samples in the buffer."""
        return len(self.samples)


def downmix(y: np.ndarray) -> np.ndarray:
    """
    Reduce a (channels, samples) array to mono.

    Only the first two channels contribute, each weighted by one half.
    """
    y = np.asarray(y, dtype=np.float32)
    if y.ndim == 1:
        return y
    if y.shape[0] == 1:
        return y[0]
    return 0.5 * (y[0] + y[1])


class AudioDecoder:
    """
    Decodes audio files into SampleClips.

    The native sample rate is preserved so that clip durations and the
    spectral centroid scale stay faithful to the source file.
    """

    def __init__(self, sample_rate: Optional[int] = None):
        """
        Initialize the decoder.

        Args:
            sample_rate: Target sample rate. None preserves the original.
        """
        self.sample_rate = sample_rate

    def clip_from_array(
        self,
        y: np.ndarray,
        sr: int,
        name: str = "clip",
    ) -> SampleClip:
        """
        Wrap an in-memory signal as a SampleClip.

        Args:
            y: Mono signal or (channels, samples) array.
            sr: Sample rate.
            name: Display name.

        Returns:
            SampleClip holding the mono buffer.
        """
        mono = downmix(y)
        duration = len(mono) / sr if sr > 0 else 0.0
        return SampleClip(
            name=name,
            samples=mono,
            sample_rate=int(sr),
            duration=float(duration),
        )

    def load_clip(self, audio_path: Union[str, Path]) -> SampleClip:
        """
        Decode a single audio file.

        Raises:
            DecodeFailure: The file is missing or not decodable as audio.
        """
        audio_path = Path(audio_path)
        try:
            y, sr = librosa.load(audio_path, sr=self.sample_rate, mono=False)
        except Exception as e:
            raise DecodeFailure(audio_path, str(e)) from e

        if y.size == 0:
            raise DecodeFailure(audio_path, "no audio samples")

        return self.clip_from_array(y, sr, name=audio_path.name)

    def load_batch(self, paths: Iterable[Union[str, Path]]) -> list[SampleClip]:
        """
        Decode every file of an upload batch, in order.

        The first failure aborts the whole batch; no partial list is returned.
        """
        return [self.load_clip(p) for p in paths]
