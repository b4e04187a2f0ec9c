"""Tests for palettes and glyph colours."""

import pytest

from bloomscope.config import GardenConfig
from bloomscope.visualizers.palette import (
    PRESET_COLORS,
    Palette,
    PaletteName,
    glyph_color,
    hash_string_to_01,
    hex_to_rgb,
    lerp_color,
    shift_hue,
)


class TestHexParsing:
    """Tests for colour parsing."""

    def test_six_digit(self):
        assert hex_to_rgb("#ff6b6b") == (255, 107, 107)
        assert hex_to_rgb("4ECDC4") == (78, 205, 196)

    def test_three_digit(self):
        assert hex_to_rgb("#fa0") == (255, 170, 0)

    def test_invalid(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#12345")


class TestPalette:
    """Tests for palette construction."""

    @pytest.mark.parametrize("name", ["animals", "pastel", "deep", "monochrome"])
    def test_presets(self, name):
        palette = Palette.preset(name)
        assert palette.name is PaletteName(name)
        assert len(palette.colors) == len(PRESET_COLORS[PaletteName(name)])

    def test_custom_has_three_colors(self):
        palette = Palette.custom("#000000", "#ffffff", "#ff0000")
        assert palette.name is PaletteName.CUSTOM
        assert palette.colors == ((0, 0, 0), (255, 255, 255), (255, 0, 0))

    def test_custom_preset_rejected(self):
        with pytest.raises(ValueError):
            Palette.preset("custom")

    def test_custom_without_colors_falls_back(self):
        palette = Palette.from_config("custom", ("#000000",))
        assert palette.name is PaletteName.ANIMALS

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            Palette.from_config("neon")

    def test_config_palette(self):
        config = GardenConfig(palette="custom", custom_colors=("#111111", "#222222", "#333333"))
        assert config.get_palette().colors[2] == (51, 51, 51)


class TestGlyphColor:
    """Tests for name → colour selection."""

    def test_hash_range_and_stability(self):
        for name in ["", "a", "dog.wav", "Übergang.flac"]:
            value = hash_string_to_01(name)
            assert 0.0 <= value < 1.0
            assert value == hash_string_to_01(name)

    def test_hash_uses_utf16_code_units(self):
        # U+1F338 is the surrogate pair D83C DF38
        h = 2166136261
        for unit in (0xD83C, 0xDF38):
            h = ((h ^ unit) * 16777619) & 0xFFFFFFFF
        assert hash_string_to_01("\U0001F338") == (h % 1000) / 1000

    def test_hash_of_empty_string(self):
        # FNV-1a offset basis 2166136261
        assert hash_string_to_01("") == pytest.approx(0.261)

    def test_color_is_stable(self):
        palette = Palette.preset("pastel")
        assert glyph_color(palette, "cat.wav") == glyph_color(palette, "cat.wav")

    def test_full_turn_keeps_color(self):
        for channel_a, channel_b in zip(shift_hue((200, 40, 90), 360.0), (200, 40, 90)):
            assert abs(channel_a - channel_b) <= 1

    def test_lerp_color(self):
        assert lerp_color((0, 0, 0), (255, 255, 255), 0.5) == (128, 128, 128)
        assert lerp_color((10, 20, 30), (0, 0, 0), 2.0) == (0, 0, 0)
