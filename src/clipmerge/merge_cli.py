"""CLI for merging — concatenate clips into one video file.

Clips come either from the command line or from a YAML merge manifest.
Each clip plays in full, in order, with a hard cut to the next. The
canvas takes the size of the last clip.

Usage:
    clipmerge merge a.mp4 b.mp4 c.mp4 --output-dir merged/

    clipmerge merge --manifest merge.yaml --output-dir merged/ \
        --save-to ~/Videos/library

    # Validate only (no encoding)
    clipmerge merge --manifest merge.yaml --validate
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .common import format_seconds
from .errors import ClipMergeError
from .export import ExportDriver
from .merge_manifest import (
    load_merge_manifest,
    settings_from_manifest,
    validate_clip_paths,
)
from .settings import QUALITY_PRESETS, VALID_CONTAINERS, ExportSettings
from .sinks import DirectorySink
from .sources import SourceRegistry, VideoSource


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _apply_overrides(settings: ExportSettings, parsed) -> ExportSettings:
    """Return settings with any CLI flags applied on top."""
    return replace(
        settings,
        fps=parsed.fps or settings.fps,
        container=parsed.container or settings.container,
        quality=parsed.quality or settings.quality,
        optimize_for_network=settings.optimize_for_network and not parsed.no_faststart,
    )


def merge(clip_paths, output_dir, settings=None, save_to=None) -> str:
    """Merge clips into one file under output_dir and return its path.

    Blocks until the export finishes.

    Raises:
        ClipMergeError: Any build, encode or persist failure.
    """
    registry = SourceRegistry(VideoSource(str(p)) for p in clip_paths)
    sink = DirectorySink(save_to) if save_to else None

    with ExportDriver(output_dir, settings=settings, sink=sink) as driver:
        job = driver.export(registry)
        if job.timeline is not None:
            print(f"Merging {len(job.timeline)} clips "
                  f"({format_seconds(job.timeline.total_duration)}, "
                  f"{job.timeline.render_size[0]}x{job.timeline.render_size[1]})")
            print(f"Writing to: {job.output_path}")
        return job.wait()


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Merge clips into one video, in order.",
    )
    parser.add_argument(
        "clips", nargs="*",
        help="Clip paths, in playback order (or use --manifest)",
    )
    parser.add_argument(
        "--manifest", default=None,
        help="Path to YAML merge manifest",
    )
    parser.add_argument(
        "--output-dir", default=None,
        help="Directory for the merged file (required unless --validate)",
    )
    parser.add_argument(
        "--save-to", default=None,
        help="Also copy the finished file into this library directory",
    )
    parser.add_argument("--fps", type=int, default=None, help="Output frame rate")
    parser.add_argument(
        "--quality", choices=sorted(QUALITY_PRESETS), default=None,
        help="Encoder quality preset (default: highest)",
    )
    parser.add_argument(
        "--container", choices=sorted(VALID_CONTAINERS), default=None,
        help="Output container (default: mov)",
    )
    parser.add_argument(
        "--no-faststart", action="store_true",
        help="Do not optimize the output for network playback",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate inputs only — check paths, don't encode",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parsed = parser.parse_args(args)

    _configure_logging(parsed.verbose)

    if parsed.manifest and parsed.clips:
        parser.error("Give clips either on the command line or in --manifest, not both")

    if parsed.manifest:
        config = load_merge_manifest(parsed.manifest)
        settings = settings_from_manifest(config)
        output_dir = parsed.output_dir or config["output_dir"]
        save_to = parsed.save_to or config["save_to"]
    elif parsed.clips:
        config = {"clips": [{"path": p} for p in parsed.clips]}
        settings = ExportSettings()
        output_dir = parsed.output_dir
        save_to = parsed.save_to
    else:
        parser.error("No clips given (pass clip paths or --manifest)")

    validate_clip_paths(config)
    clip_paths = [c["path"] for c in config["clips"]]

    if parsed.validate:
        print(f"Merge inputs valid: {len(clip_paths)} clips")
        for i, p in enumerate(clip_paths):
            print(f"  {i}: {p}")
        print("All paths verified.")
        return

    if not output_dir:
        parser.error("--output-dir is required (unless using --validate)")

    settings = _apply_overrides(settings, parsed)
    try:
        output = merge(clip_paths, output_dir, settings=settings, save_to=save_to)
    except ClipMergeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"\nDone: {output}")
    if save_to:
        print(f"Saved to: {Path(save_to) / Path(output).name}")


if __name__ == "__main__":
    main()
