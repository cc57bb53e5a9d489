"""Merge manifest loader — which clips to merge and how to encode them.

Merge manifest schema:
  video:
    fps: 30                       # default 30
    container: mov                # "mov", "mp4" or "mkv"
    quality: highest              # "highest", "high", "medium", "low"
    optimize_for_network: true
    filename_prefix: mergeVideo
  paths:
    clips: "/path/to/clips"
  clips:
    - "${clips}/first.mp4"        # plain path
    - path: "${clips}/second.mov" # or mapping with a path
  output_dir: "${clips}/merged"   # optional, CLI flag overrides
  save_to: "/path/to/library"     # optional, CLI flag overrides
"""

from pathlib import Path

import yaml

from .common import resolve_path_vars
from .settings import QUALITY_PRESETS, VALID_CONTAINERS, ExportSettings

DEFAULT_VIDEO = {
    "fps": 30,
    "container": "mov",
    "quality": "highest",
    "optimize_for_network": True,
    "filename_prefix": "mergeVideo",
}


def load_merge_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a merge manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Apply defaults to video settings and validate them.
      3. Resolve ${path} variables in clip paths, output_dir and save_to.
      4. Normalize every clip entry to {"path": ...}.

    Args:
        manifest_path: Path to the YAML merge manifest.

    Returns:
        Normalized config dict with resolved paths and applied defaults.

    Raises:
        ValueError: Missing/invalid fields.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Merge manifest: top level must be a mapping")

    video = {**DEFAULT_VIDEO, **(raw.get("video") or {})}

    fps = video["fps"]
    if not isinstance(fps, int) or isinstance(fps, bool) or fps <= 0:
        raise ValueError(f"Merge manifest: video.fps must be a positive integer, got {fps!r}")
    if video["container"] not in VALID_CONTAINERS:
        raise ValueError(
            f"Merge manifest: invalid video.container '{video['container']}'. "
            f"Valid: {sorted(VALID_CONTAINERS)}"
        )
    if video["quality"] not in QUALITY_PRESETS:
        raise ValueError(
            f"Merge manifest: invalid video.quality '{video['quality']}'. "
            f"Valid: {sorted(QUALITY_PRESETS)}"
        )

    paths = raw.get("paths") or {}
    config = {"video": video}

    clips = []
    for i, entry in enumerate(raw.get("clips") or []):
        if isinstance(entry, str):
            path = entry
        elif isinstance(entry, dict) and "path" in entry:
            path = entry["path"]
        else:
            raise ValueError(f"Merge clip {i}: missing required field 'path'")
        clips.append({"path": resolve_path_vars(str(path), paths)})

    if not clips:
        raise ValueError("Merge manifest: 'clips' must list at least one clip")
    config["clips"] = clips

    for key in ("output_dir", "save_to"):
        value = raw.get(key)
        config[key] = resolve_path_vars(str(value), paths) if value else None

    return config


def validate_clip_paths(config: dict) -> None:
    """Check that all clip paths exist on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = [c["path"] for c in config["clips"] if not Path(c["path"]).exists()]

    if missing:
        msg = f"Missing {len(missing)} clip file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)


def settings_from_manifest(config: dict) -> ExportSettings:
    """Build ExportSettings from a normalized manifest's video section."""
    video = config["video"]
    return ExportSettings(
        fps=video["fps"],
        container=video["container"],
        quality=video["quality"],
        optimize_for_network=bool(video["optimize_for_network"]),
        filename_prefix=video["filename_prefix"],
    )
