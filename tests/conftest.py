"""Shared test fixtures for clipmerge tests."""

import subprocess

import pytest
import imageio_ffmpeg

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


@pytest.fixture
def make_video(tmp_path):
    """Factory for small solid-color test videos, created with ffmpeg.

    Usage: make_video("red.mp4", color="red", size=(64, 48), duration=1)
    """
    def _make(name, color="blue", size=(64, 48), duration=1, fps=10):
        out = tmp_path / name
        subprocess.run(
            [
                _FFMPEG, "-y",
                "-f", "lavfi",
                "-i", f"color=c={color}:s={size[0]}x{size[1]}:d={duration}:r={fps}",
                "-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p",
                str(out),
            ],
            check=True,
            capture_output=True,
        )
        return out
    return _make


@pytest.fixture
def source_video(make_video):
    """A 2-second 64x48 blue clip."""
    return make_video("source.mp4", duration=2)
