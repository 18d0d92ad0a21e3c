"""
Unit tests for wooshlib.regions: trim/fade range resolution and hit-testing.
"""

import itertools

import pytest

from wooshlib.regions import TrimFadeRanges, hit_test, resolve


class TestResolve:

    def test_no_trim_full_extent(self):
        r = resolve(100, 0, 0, True, 0, 0)
        assert r.visible == (0, 100)

    def test_trimmed_clip_view(self):
        r = resolve(100, 10, 90, False, 0, 0)
        assert r.visible == (10, 90)

    def test_full_extent_ignores_trim(self):
        r = resolve(100, 10, 90, True)
        assert r.visible == (0, 100)
        assert (r.active_start, r.active_end) == (10, 90)

    def test_fades_capped_at_half_the_active_region(self):
        r = resolve(100, 10, 90, False, 1000, 1000)
        assert r.fade_in == (10, 50)
        assert r.fade_out == (50, 90)

    def test_empty_clip(self):
        r = resolve(0, 0, 0, True, 10, 10)
        assert r == TrimFadeRanges()
        assert r.visible == (0, 0)

    def test_trim_end_zero_means_clip_end(self):
        assert resolve(100, 5, 0).active_end == 100

    def test_trim_end_past_clip_is_clamped(self):
        assert resolve(100, 0, 500).active_end == 100

    def test_inverted_trim_keeps_one_frame(self):
        r = resolve(100, 80, 20)
        assert r.active_length == 1
        assert r.active_end == 20

    def test_negative_inputs_are_zero(self):
        r = resolve(100, -5, -5, False, -3, -3)
        assert (r.active_start, r.active_end) == (0, 100)
        assert r.fade_in == (0, 0)
        assert r.fade_out == (100, 100)

    def test_properties_hold_for_all_inputs(self):
        """Ranges stay inside the clip and fades never cross."""
        values = (-10, 0, 1, 2, 7, 49, 50, 51, 99, 100, 150)
        for fc in (0, 1, 2, 3, 100):
            for ts, te, fi, fo in itertools.product(values, repeat=4):
                for full in (False, True):
                    r = resolve(fc, ts, te, full, fi, fo)
                    for v in (r.visible_start, r.visible_end, r.fade_in_start,
                              r.fade_in_end, r.fade_out_start, r.fade_out_end):
                        assert 0 <= v <= fc
                    assert r.visible_start <= r.visible_end
                    assert r.fade_in_start <= r.fade_in_end <= r.fade_out_start <= r.fade_out_end
                    if fc > 0:
                        assert r.active_length >= 1
                        assert r.fade_in_end - r.fade_in_start <= r.active_length // 2
                        assert r.fade_out_end - r.fade_out_start <= r.active_length // 2
                    if full:
                        assert r.visible == (0, fc)


class TestHitTest:

    @pytest.fixture
    def ranges(self):
        return resolve(1000, 100, 900, False, 200, 100)

    def test_handles(self, ranges):
        assert hit_test(ranges, 100) == "trim_start"
        assert hit_test(ranges, 900) == "trim_end"
        assert hit_test(ranges, 300) == "fade_in"
        assert hit_test(ranges, 800) == "fade_out"

    def test_tolerance(self, ranges):
        assert hit_test(ranges, 305) is None
        assert hit_test(ranges, 305, tolerance=5) == "fade_in"
        assert hit_test(ranges, 500, tolerance=10) is None

    def test_trim_edges_grabbable_without_fades(self):
        r = resolve(1000, 100, 900)
        assert hit_test(r, 100) == "trim_start"
        assert hit_test(r, 900) == "trim_end"
        assert hit_test(r, 100, tolerance=5) == "trim_start"
        assert hit_test(r, 897, tolerance=5) == "trim_end"

    def test_zero_length_fade_only_on_its_own_side(self):
        r = resolve(1000, 100, 900, False, 0, 50)
        assert hit_test(r, 100, tolerance=5) == "trim_start"
        assert hit_test(r, 852, tolerance=5) == "fade_out"

    def test_nonzero_fade_wins_tie(self):
        r = resolve(1000, 0, 0, False, 10, 0)
        assert hit_test(r, 5, tolerance=5) == "fade_in"
        assert hit_test(r, 4, tolerance=5) == "trim_start"

    def test_nearest_handle_wins(self):
        r = resolve(1000, 0, 0, False, 10, 0)
        assert hit_test(r, 2, tolerance=20) == "trim_start"
        assert hit_test(r, 8, tolerance=20) == "fade_in"

    def test_empty_clip(self):
        assert hit_test(resolve(0), 0, tolerance=100) is None
