"""Tests for the FeatureAnalyzer module."""

import numpy as np
import pytest

from bloomscope.core.analyzer import FeatureAnalyzer
from bloomscope.core.decoder import AudioDecoder


class TestFraming:
    """Tests for frame slicing."""

    @pytest.mark.parametrize(
        "n_samples, expected",
        [(0, 0), (1024, 0), (1025, 1), (2048, 2), (2049, 3)],
    )
    def test_frame_count(self, n_samples, expected):
        """A frame at i exists only while i + 1024 < n."""
        frames = FeatureAnalyzer().frame(np.ones(n_samples))
        assert frames.shape == (expected, 1024)

    def test_frames_follow_hop(self):
        y = np.arange(2049, dtype=np.float64)
        frames = FeatureAnalyzer().frame(y)
        assert frames[1, 0] == 512
        assert frames[2, 0] == 1024


class TestFrameFeatures:
    """Tests for the per-frame measures."""

    def test_rms_of_constant(self):
        frames = np.full((2, 1024), 0.5)
        np.testing.assert_allclose(FeatureAnalyzer().compute_rms(frames), [0.5, 0.5])

    def test_zcr_alternating_signal(self):
        frame = np.tile([1.0, -1.0], 512)[None, :]
        zcr = FeatureAnalyzer().compute_zcr(frame)
        assert zcr[0] == pytest.approx(1023 / 1024)

    def test_flatness_of_constant_magnitude(self):
        frames = np.tile([0.3, -0.3], 512)[None, :]
        flatness = FeatureAnalyzer().compute_spectral_flatness(frames)
        assert flatness[0] == pytest.approx(1.0)

    def test_flatness_of_silent_frame_is_zero(self):
        flatness = FeatureAnalyzer().compute_spectral_flatness(np.zeros((1, 1024)))
        assert flatness[0] == 0.0

    def test_centroid_of_energy_in_first_bin(self, sample_rate):
        frames = np.zeros((1, 1024))
        frames[0, :32] = 1.0
        centroid = FeatureAnalyzer().compute_spectral_centroid(frames, sample_rate)
        assert centroid[0] == 0.0

    def test_centroid_of_energy_in_last_bin(self, sample_rate):
        frames = np.zeros((1, 1024))
        frames[0, -32:] = 1.0
        centroid = FeatureAnalyzer().compute_spectral_centroid(frames, sample_rate)
        assert centroid[0] == pytest.approx(31 / 32 * sample_rate / 2)


class TestAnalyze:
    """Tests for whole-clip analysis."""

    def test_vector_shape_and_finiteness(self, pure_sine):
        y, sr = pure_sine
        features = FeatureAnalyzer().analyze(y, sr)

        assert len(features.vector) == 8
        assert all(np.isfinite(features.vector))

    def test_sine_rms(self, pure_sine):
        y, sr = pure_sine
        features = FeatureAnalyzer().analyze(y, sr)

        assert features.rms.mean == pytest.approx(0.5 / np.sqrt(2), abs=1e-2)
        assert features.vector[0] == pytest.approx(np.log1p(features.rms.mean))

    def test_noise_crosses_zero_more_than_sine(self, pure_sine, white_noise):
        analyzer = FeatureAnalyzer()
        sine = analyzer.analyze(*pure_sine)
        noise = analyzer.analyze(*white_noise)

        assert noise.zcr.mean > 5 * sine.zcr.mean
        assert noise.zcr.mean == pytest.approx(0.5, abs=0.05)

    def test_silence_is_all_zero(self, silence):
        features = FeatureAnalyzer().analyze(*silence)
        assert features.vector == (0.0,) * 8

    def test_short_buffer_does_not_raise(self, sample_rate):
        features = FeatureAnalyzer().analyze(np.ones(512, dtype=np.float32), sample_rate)
        assert features.vector == (0.0,) * 8

    def test_empty_buffer_does_not_raise(self, sample_rate):
        features = FeatureAnalyzer().analyze(np.zeros(0, dtype=np.float32), sample_rate)
        assert features.vector == (0.0,) * 8

    def test_analyze_clip_attaches_features(self, pure_sine):
        clip = AudioDecoder().clip_from_array(*pure_sine, name="tone")
        features = FeatureAnalyzer().analyze_clip(clip)

        assert clip.features is features
        assert set(features.stats) == set(FeatureAnalyzer.FEATURE_KEYS)
