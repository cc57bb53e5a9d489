"""Video sources and the ordered registry the user builds them into.

A VideoSource wraps one decodable file. Its duration and natural size
can be supplied up front or resolved lazily by probing the file the
first time they are needed. Decoding goes through moviepy (ffmpeg).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path

from PIL import Image

from .common import format_seconds, load_clip, to_rational
from .errors import DecodeError, SourceReadError

logger = logging.getLogger(__name__)

# Anything the ffmpeg reader raises when a file is missing, truncated,
# or has no video stream.
_DECODE_FAILURES = (OSError, ValueError, IndexError, KeyError)


def probe_source(path: str | Path) -> tuple[Fraction, tuple[int, int]]:
    """Read duration and natural size from a media file.

    Raises:
        DecodeError: The file is missing or ffmpeg cannot read it.
    """
    if not Path(path).exists():
        raise DecodeError(f"Video file not found: {path}")
    try:
        with load_clip(path) as clip:
            duration = clip.duration
            width, height = clip.size
    except _DECODE_FAILURES as e:
        raise DecodeError(f"Cannot decode {path}: {e}") from e

    if duration is None:
        raise DecodeError(f"No duration reported for {path}")
    return to_rational(duration), (int(width), int(height))


@dataclass(eq=False)
class VideoSource:
    """One clip picked by the user.

    Sources compare by identity: picking the same file twice yields two
    independent entries on the timeline.
    """

    path: str
    duration: Fraction | None = None
    natural_size: tuple[int, int] | None = None

    @property
    def is_resolved(self) -> bool:
        return self.duration is not None and self.natural_size is not None

    def resolve(self) -> VideoSource:
        """Fill in duration and natural size, probing the file if needed.

        Raises:
            SourceReadError: Probing failed, or the resolved values are
                not strictly positive.
        """
        if not self.is_resolved:
            try:
                duration, size = probe_source(self.path)
            except DecodeError as e:
                raise SourceReadError(self.path, str(e)) from e
            if self.duration is None:
                self.duration = duration
            if self.natural_size is None:
                self.natural_size = size
            logger.info(
                "Probed %s: %s, %dx%d",
                self.path, format_seconds(self.duration), *self.natural_size,
            )

        try:
            duration = to_rational(self.duration)
            w, h = self.natural_size
        except (TypeError, ValueError, OverflowError) as e:
            raise SourceReadError(self.path, f"unusable duration or size: {e}") from e
        if duration <= 0:
            raise SourceReadError(
                self.path, f"duration must be > 0, got {duration}"
            )
        self.duration = duration
        if w <= 0 or h <= 0:
            raise SourceReadError(
                self.path, f"natural size must be positive, got {w}x{h}"
            )
        return self

    def open(self):
        """Open the video track for reading.

        Raises:
            DecodeError: ffmpeg cannot read the file.
        """
        try:
            return load_clip(self.path)
        except _DECODE_FAILURES as e:
            raise DecodeError(f"Cannot decode {self.path}: {e}") from e

    def thumbnail(self, at: float = 0.0) -> Image.Image:
        """Grab a single frame as a Pillow image.

        Raises:
            DecodeError: The file cannot be read or the frame grab fails.
        """
        clip = self.open()
        try:
            t = min(max(at, 0.0), max(clip.duration - 1.0 / clip.fps, 0.0))
            frame = clip.get_frame(t)
        except _DECODE_FAILURES as e:
            raise DecodeError(f"Cannot grab thumbnail from {self.path}: {e}") from e
        finally:
            clip.close()
        return Image.fromarray(frame)


class SourceRegistry:
    """Ordered, mutable list of picked sources.

    Single writer: the owner mutates it between exports. The export
    driver only ever reads a snapshot.
    """

    def __init__(self, sources=None):
        self._sources: list[VideoSource] = []
        for source in sources or ():
            self.append(source)

    def append(self, source: VideoSource) -> None:
        if source is None:
            raise TypeError("source must not be None")
        self._sources.append(source)

    def remove_last(self) -> bool:
        """Drop the most recently added source. No-op on an empty registry."""
        if not self._sources:
            return False
        self._sources.pop()
        return True

    def list(self) -> tuple[VideoSource, ...]:
        return tuple(self._sources)

    snapshot = list

    def count(self) -> int:
        return len(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(tuple(self._sources))
