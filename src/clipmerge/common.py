"""clipmerge.common — shared utilities for the merge pipeline.

Contains: rational time conversion, path variable resolution, and clip
loading.
"""

import re
from fractions import Fraction
from pathlib import Path

from moviepy import VideoFileClip


# ── Rational time ──────────────────────────────────────────────────
# Durations are kept as exact fractions of a second so that offsets
# summed across many clips never drift. 600 ticks per second divides
# evenly into every common frame rate (24, 25, 30, 50, 60).

DEFAULT_TIMESCALE = 600


def to_rational(seconds, timescale: int = DEFAULT_TIMESCALE) -> Fraction:
    """Convert seconds (float, int or Fraction) to a Fraction.

    Fractions pass through unchanged. Floats are snapped to the nearest
    tick of `timescale` so that values decoded from containers (which
    are never exact in binary floating point) compare cleanly.
    """
    if isinstance(seconds, Fraction):
        return seconds
    if isinstance(seconds, int):
        return Fraction(seconds)
    return Fraction(round(float(seconds) * timescale), timescale)


def format_seconds(t: Fraction) -> str:
    """Render a rational time as e.g. '2.500s' for logs and CLI output."""
    return f"{float(t):.3f}s"


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Clip loading ───────────────────────────────────────────────────

def load_clip(path: str | Path, target_fps: int | None = None) -> VideoFileClip:
    """Load a single clip, video track only, optionally resampled.

    Audio is never read: merged output carries no audio track.
    """
    clip = VideoFileClip(str(path), audio=False)
    if target_fps and clip.fps != target_fps:
        clip = clip.with_fps(target_fps)
    return clip
