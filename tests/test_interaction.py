"""Tests for hit-testing and click handling."""

import numpy as np
import pytest

from bloomscope.core.bloom import BloomAnimator, BloomState, bloom_state
from bloomscope.core.errors import PlaybackFailure
from bloomscope.core.glyphs import GlyphBuilder
from bloomscope.core.interaction import (
    CURSOR_DEFAULT,
    CURSOR_POINTER,
    InteractionLayer,
    draw_order,
    hit_radius,
    hit_test,
)
from conftest import make_clip


def _glyphs(*clips):
    return GlyphBuilder(rng=np.random.default_rng(0)).build(list(clips), 1000, 1000)


@pytest.fixture
def small_and_large():
    """Two glyphs stacked on the same spot, the second one larger."""
    return _glyphs(
        make_clip(name="small.wav", duration=0.5, embedding=(0.0, 0.0)),
        make_clip(name="large.wav", duration=10.0, embedding=(0.0, 0.0), rms=0.3),
    )


class TestHitRadius:
    """Tests for the state-dependent hit radius."""

    def test_closed_radius(self):
        glyph = _glyphs(make_clip())[0]
        assert hit_radius(glyph) == pytest.approx(glyph.bud_radius * 0.6)
        assert hit_radius(glyph) == pytest.approx(18 * 0.18 * 10 * 0.6)

    def test_grows_with_progress(self):
        glyph = _glyphs(make_clip())[0]
        glyph.open_progress = 0.5
        assert hit_radius(glyph) == pytest.approx(glyph.size * 0.7)
        glyph.open_progress = 1.0
        assert hit_radius(glyph) == pytest.approx(glyph.size)


class TestHitTest:
    """Tests for pointer → glyph resolution."""

    def test_hit_and_miss(self):
        glyph = _glyphs(make_clip())[0]
        r = hit_radius(glyph)

        assert hit_test([glyph], glyph.x + r * 0.9, glyph.y) is glyph
        assert hit_test([glyph], glyph.x + r * 1.01, glyph.y) is None
        assert hit_test([glyph], glyph.x + r * 3, glyph.y) is None

    def test_empty_list(self):
        assert hit_test([], 10.0, 10.0) is None

    def test_draw_order_small_first(self, small_and_large):
        small, large = small_and_large
        assert draw_order([large, small]) == [small, large]

    def test_overlap_resolves_to_topmost(self, small_and_large):
        small, large = small_and_large
        assert hit_test([small, large], small.x, small.y) is large
        assert hit_test([large, small], small.x, small.y) is large


class TestInteractionLayer:
    """Tests for click-to-play-and-bloom."""

    def test_click_plays_and_triggers(self):
        glyph = _glyphs(make_clip(name="frog.wav"))[0]
        played = []
        layer = InteractionLayer(BloomAnimator(), play=played.append)

        hit = layer.click([glyph], glyph.x, glyph.y, now=10.0)

        assert hit is glyph
        assert played == [glyph.clip]
        assert bloom_state(glyph) is BloomState.OPENING
        assert glyph.open_start == 10.0

    def test_click_on_empty_space(self):
        glyph = _glyphs(make_clip())[0]
        played = []
        layer = InteractionLayer(BloomAnimator(), play=played.append)

        assert layer.click([glyph], glyph.x + 500, glyph.y + 500) is None
        assert played == []
        assert bloom_state(glyph) is BloomState.CLOSED

    def test_repeat_click_replays_without_restarting_bloom(self):
        glyph = _glyphs(make_clip())[0]
        played = []
        layer = InteractionLayer(BloomAnimator(), play=played.append)

        layer.click([glyph], glyph.x, glyph.y, now=0.0)
        layer.click([glyph], glyph.x, glyph.y, now=50.0)

        assert len(played) == 2
        assert glyph.open_start == 0.0

    def test_playback_failure_still_blooms(self, caplog):
        glyph = _glyphs(make_clip(name="owl.wav"))[0]
        statuses = []

        def broken_player(clip):
            raise PlaybackFailure("no audio device")

        layer = InteractionLayer(BloomAnimator(), play=broken_player, on_status=statuses.append)
        hit = layer.click([glyph], glyph.x, glyph.y, now=0.0)

        assert hit is glyph
        assert bloom_state(glyph) is BloomState.OPENING
        assert statuses == ["Playback error: owl.wav"]
        assert "owl.wav" in caplog.text

    def test_unexpected_player_error_still_blooms(self, caplog):
        glyph = _glyphs(make_clip(name="toad.wav"))[0]
        statuses = []

        def unplugged_player(clip):
            raise RuntimeError("device gone")

        layer = InteractionLayer(BloomAnimator(), play=unplugged_player, on_status=statuses.append)
        hit = layer.click([glyph], glyph.x, glyph.y, now=0.0)

        assert hit is glyph
        assert bloom_state(glyph) is BloomState.OPENING
        assert statuses == ["Playback error: toad.wav"]
        assert "device gone" in caplog.text

    def test_cursor(self):
        glyph = _glyphs(make_clip())[0]
        layer = InteractionLayer(BloomAnimator())

        assert layer.cursor_for([glyph], glyph.x, glyph.y) == CURSOR_POINTER
        assert layer.cursor_for([glyph], glyph.x + 400, glyph.y) == CURSOR_DEFAULT
