"""CLI for inspecting clips before a merge.

Lists each clip with its position, duration and natural size, and can
write one thumbnail PNG per clip.

Usage:
    clipmerge probe a.mp4 b.mp4
    clipmerge probe a.mp4 b.mp4 --thumbnails thumbs/
"""

import argparse
import sys
from pathlib import Path

from .common import format_seconds
from .errors import ClipMergeError
from .sources import VideoSource


def probe_clips(clip_paths, thumbnail_dir=None) -> list[VideoSource]:
    """Resolve every clip and optionally save thumbnails.

    Raises:
        ClipMergeError: A clip cannot be read.
    """
    sources = [VideoSource(str(p)).resolve() for p in clip_paths]

    if thumbnail_dir:
        out_dir = Path(thumbnail_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        for i, source in enumerate(sources, start=1):
            source.thumbnail().save(out_dir / f"video-{i:02d}.png")

    return sources


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Show duration and size of clips.",
    )
    parser.add_argument("clips", nargs="+", help="Clip paths")
    parser.add_argument(
        "--thumbnails", default=None,
        help="Write a thumbnail PNG per clip into this directory",
    )
    parsed = parser.parse_args(args)

    try:
        sources = probe_clips(parsed.clips, parsed.thumbnails)
    except ClipMergeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for i, source in enumerate(sources, start=1):
        w, h = source.natural_size
        print(f"Video# {i}  {format_seconds(source.duration)}  {w}x{h}  {source.path}")
    if parsed.thumbnails:
        print(f"Thumbnails in: {parsed.thumbnails}")


if __name__ == "__main__":
    main()
