"""Composition and encoding — turn an instruction set into a video file.

Takes the compiled layers (one per source, in timeline order) and places
each opened clip on a shared CompositeVideoClip:
  - Each clip starts at its timeline offset.
  - A clip with a fade point is only visible for [0, fade_point) local
    time. Past that it contributes nothing, which is how its opacity
    drops to zero.
  - The last clip has no fade point and stays visible to the end of the
    master range.

The canvas uses the instruction set's render size. Clips are drawn at
the top-left corner without scaling, so a clip smaller than the canvas
leaves black borders and a larger one is cropped.
"""

from __future__ import annotations

import logging
from pathlib import Path

from moviepy import CompositeVideoClip

from .instructions import InstructionSet
from .settings import ExportSettings

logger = logging.getLogger(__name__)


def compose_video(
    instructions: InstructionSet,
    clips: list,
    fps: float | None = None,
) -> CompositeVideoClip:
    """Place opened clips on one timeline according to their layers.

    Args:
        instructions: Compiled instruction set.
        clips: moviepy clips, one per layer, in layer order.
        fps: Output frame rate. Defaults to 1 / frame_duration.

    Returns:
        CompositeVideoClip spanning the master time range.

    Raises:
        ValueError: Clip count does not match the layer count.
    """
    layers = instructions.layers
    if len(clips) != len(layers):
        raise ValueError(
            f"Expected {len(layers)} clips for {len(layers)} layers, got {len(clips)}"
        )

    master_end = instructions.time_range[1]
    placed = []
    for layer, clip in zip(layers, clips):
        if layer.fade_point is not None:
            visible = layer.fade_point
        else:
            visible = master_end - layer.start
        clip = clip.with_duration(float(visible)).with_start(float(layer.start))
        placed.append(clip)

    return (
        CompositeVideoClip(placed, size=instructions.render_size, bg_color=(0, 0, 0))
        .with_duration(float(instructions.duration))
        .with_fps(fps or instructions.fps)
    )


class MoviepyEncoder:
    """Default encoder: compose with moviepy, write with ffmpeg.

    Called from the export driver's worker thread as
    `encoder(instructions, output_path, settings)`. Returns the output
    path once the container is fully written; raises on any failure.
    """

    def __call__(
        self,
        instructions: InstructionSet,
        output_path: str | Path,
        settings: ExportSettings,
    ) -> str:
        output_path = str(output_path)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        clips = []
        try:
            for layer in instructions.layers:
                clips.append(layer.source.open())

            final = compose_video(instructions, clips, fps=settings.fps)
            logger.info(
                "Encoding %d clips to %s (%s, %s)",
                len(clips), output_path, settings.codec, settings.quality,
            )
            final.write_videofile(
                output_path,
                fps=settings.fps,
                codec=settings.codec,
                preset=settings.preset,
                audio=False,
                ffmpeg_params=settings.ffmpeg_params(),
                logger=None,
            )
            return output_path
        finally:
            for clip in clips:
                clip.close()
