"""Export and playback."""
