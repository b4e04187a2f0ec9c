"""Pytest configuration and shared fixtures."""

import os

# Headless pygame for renderer and app tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from bloomscope.core.analyzer import FeatureStat, Features
from bloomscope.core.decoder import SampleClip

# Default sample rate for test audio
TEST_SR = 22050


def make_features(
    rms: float = 0.0,
    centroid: float = 0.0,
    flatness: float = 0.0,
    zcr: float = 0.0,
) -> Features:
    """Features with the given means and zero spread."""
    stats = {
        "rms": FeatureStat(mean=rms),
        "spectral_centroid": FeatureStat(mean=centroid),
        "spectral_flatness": FeatureStat(mean=flatness),
        "zcr": FeatureStat(mean=zcr),
    }
    vector = (
        float(np.log1p(rms)), 0.0,
        float(np.log1p(centroid)), 0.0,
        flatness, 0.0,
        zcr, 0.0,
    )
    return Features(vector=vector, stats=stats)


def make_clip(
    name: str = "clip.wav",
    duration: float = 1.0,
    embedding=(0.0, 0.0),
    sr: int = TEST_SR,
    **feature_means,
) -> SampleClip:
    """A silent clip of ``duration`` seconds with injected features."""
    clip = SampleClip(
        name=name,
        samples=np.zeros(int(sr * duration), dtype=np.float32),
        sample_rate=sr,
        duration=duration,
    )
    clip.features = make_features(**feature_means)
    clip.embedding = embedding
    return clip


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


class FixedProjector:
    """Projector returning a prepared layout."""

    def __init__(self, points):
        self.points = np.asarray(points, dtype=np.float64)
        self.calls = 0

    def fit(self, matrix):
        self.calls += 1
        return self.points[: len(matrix)]


class FailingProjector:
    """Projector whose fit always raises."""

    def fit(self, matrix):
        raise RuntimeError("neighbor graph could not be built")


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def white_noise(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate white noise.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    rng = np.random.default_rng(42)
    y = rng.standard_normal(int(sample_rate * 2.0)).astype(np.float32) * 0.3
    return y, sample_rate


@pytest.fixture
def silence(sample_rate: int) -> tuple[np.ndarray, int]:
    """Generate 0.3 seconds of digital silence."""
    return np.zeros(int(sample_rate * 0.3), dtype=np.float32), sample_rate


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary mono audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "sine.wav"
    sf.write(audio_path, y, sr)
    return audio_path


@pytest.fixture
def temp_stereo_file(tmp_path, pure_sine, white_noise):
    """Create a temporary stereo file: sine on the left, quiet noise on the right."""
    import soundfile as sf

    left, sr = pure_sine
    right = 0.5 * white_noise[0]
    audio_path = tmp_path / "stereo.wav"
    sf.write(audio_path, np.stack([left, right], axis=1), sr)
    return audio_path


@pytest.fixture
def bogus_audio_file(tmp_path):
    """A file with an audio extension but no audio in it."""
    path = tmp_path / "broken.wav"
    path.write_text("definitely not a RIFF header")
    return path
