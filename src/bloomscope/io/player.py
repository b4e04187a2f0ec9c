"""
Clip playback through the pygame mixer.

Playback is fire-and-forget: each click starts a new voice on a free
mixer channel, so clips may overlap freely.
"""

import librosa
import numpy as np
import pygame

from bloomscope.core.errors import PlaybackFailure


class ClipPlayer:
    """Plays SampleClips, resampled to the mixer rate on first use."""

    def __init__(
        self,
        frequency: int = 44100,
        master_gain: float = 0.9,
        voice_gain: float = 0.95,
        n_channels: int = 32,
    ):
        """
        Initialize the player. The mixer itself opens lazily on first play.

        Args:
            frequency: Mixer output sample rate.
            master_gain: Gain applied to every voice.
            voice_gain: Per-voice gain.
            n_channels: Maximum number of simultaneous voices.
        """
        self.frequency = frequency
        self.master_gain = master_gain
        self.voice_gain = voice_gain
        self.n_channels = n_channels
        self._sounds: dict[int, tuple[object, pygame.mixer.Sound]] = {}

    def _ensure_mixer(self) -> tuple[int, int]:
        if not pygame.mixer.get_init():
            pygame.mixer.init(frequency=self.frequency, size=-16, channels=2)
            pygame.mixer.set_num_channels(self.n_channels)
        frequency, _, channels = pygame.mixer.get_init()
        return frequency, channels

    def to_pcm(self, samples: np.ndarray, sr: int, frequency: int, channels: int) -> np.ndarray:
        """Resample, apply gain and convert to interleaved int16."""
        y = np.asarray(samples, dtype=np.float32)
        if sr != frequency and len(y) > 0:
            y = librosa.resample(y, orig_sr=sr, target_sr=frequency)
        y = np.clip(y * self.master_gain * self.voice_gain, -1.0, 1.0)
        pcm = (y * 32767).astype(np.int16)
        if channels > 1:
            pcm = np.repeat(pcm[:, None], channels, axis=1)
        return np.ascontiguousarray(pcm)

    def _sound_for(self, clip) -> pygame.mixer.Sound:
        cached = self._sounds.get(id(clip))
        if cached is not None and cached[0] is clip:
            return cached[1]
        frequency, channels = self._ensure_mixer()
        pcm = self.to_pcm(clip.samples, clip.sample_rate, frequency, channels)
        sound = pygame.sndarray.make_sound(pcm)
        self._sounds[id(clip)] = (clip, sound)
        return sound

    def play(self, clip):
        """
        Start playback of a clip without waiting for it.

        Raises:
            PlaybackFailure: The mixer could not be opened or the clip
                could not be turned into a sound.
        """
        try:
            self._sound_for(clip).play()
        except Exception as e:
            raise PlaybackFailure(f"could not play {clip.name}: {e}") from e

    def clear(self):
        """Drop cached sounds, e.g. after a new upload batch."""
        self._sounds.clear()

    __call__ = play
