"""Tests for clipmerge.common utilities."""

from fractions import Fraction

import pytest

from clipmerge.common import (
    format_seconds,
    load_clip,
    resolve_path_vars,
    to_rational,
)


class TestToRational:
    def test_fraction_passes_through(self):
        f = Fraction(1001, 30000)
        assert to_rational(f) is f

    def test_int(self):
        assert to_rational(3) == Fraction(3)

    def test_float_snaps_to_timescale(self):
        assert to_rational(2.5) == Fraction(5, 2)
        assert to_rational(0.1 + 0.2) == Fraction(3, 10)

    def test_custom_timescale(self):
        assert to_rational(1.26, timescale=10) == Fraction(13, 10)

    def test_sums_are_exact(self):
        total = sum(to_rational(0.1) for _ in range(10))
        assert total == 1


class TestFormatSeconds:
    def test_three_decimals(self):
        assert format_seconds(Fraction(5, 2)) == "2.500s"


class TestResolvePathVars:
    def test_single_var(self):
        result = resolve_path_vars("${clips}/a.mp4", {"clips": "/data/clips"})
        assert result == "/data/clips/a.mp4"

    def test_multiple_vars(self):
        paths = {"clips": "/data/clips", "out": "/data/out"}
        result = resolve_path_vars("${clips}/a and ${out}/b", paths)
        assert result == "/data/clips/a and /data/out/b"

    def test_no_vars(self):
        assert resolve_path_vars("/plain/path", {}) == "/plain/path"

    def test_unknown_var_raises(self):
        with pytest.raises(ValueError, match="Unknown path variable"):
            resolve_path_vars("${missing}/x", {})


class TestLoadClip:
    def test_loads_video_without_audio(self, source_video):
        with load_clip(source_video) as clip:
            assert clip.audio is None
            assert tuple(clip.size) == (64, 48)

    def test_resamples_fps(self, source_video):
        with load_clip(source_video, target_fps=30) as clip:
            assert clip.fps == 30
