"""Export settings for the encoder."""

from dataclasses import dataclass, field

# quality name -> (x264 preset, extra ffmpeg params)
QUALITY_PRESETS = {
    "highest": ("slow", ["-crf", "12"]),
    "high": ("medium", ["-crf", "18"]),
    "medium": ("medium", ["-crf", "23"]),
    "low": ("veryfast", ["-crf", "28"]),
}

VALID_CONTAINERS = {"mov", "mp4", "mkv"}


@dataclass
class ExportSettings:
    fps: int = 30
    container: str = "mov"
    codec: str = "libx264"
    quality: str = "highest"
    optimize_for_network: bool = True
    filename_prefix: str = "mergeVideo"
    extra_ffmpeg_params: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.quality not in QUALITY_PRESETS:
            raise ValueError(
                f"Unknown quality '{self.quality}'. Valid: {sorted(QUALITY_PRESETS)}"
            )
        if self.container not in VALID_CONTAINERS:
            raise ValueError(
                f"Unknown container '{self.container}'. Valid: {sorted(VALID_CONTAINERS)}"
            )
        if self.fps <= 0:
            raise ValueError(f"fps must be > 0, got {self.fps!r}")

    def ffmpeg_params(self) -> list[str]:
        """Extra ffmpeg arguments for the configured quality and flags."""
        _, params = QUALITY_PRESETS[self.quality]
        params = [*params, "-pix_fmt", "yuv420p"]
        if self.optimize_for_network:
            # Move the moov atom to the front so playback can start early.
            params += ["-movflags", "+faststart"]
        return params + list(self.extra_ffmpeg_params)

    @property
    def preset(self) -> str:
        return QUALITY_PRESETS[self.quality][0]
