"""Instruction compiler — per-clip opacity rules over the master timeline.

Every clip except the last carries a fade point equal to its own
duration: it is fully opaque for its whole local range and drops to
zero opacity at its own end. The next clip starts at that same instant,
so the result is a hard cut at frame granularity, not a dissolve. The
last clip has no fade point and stays visible to the end of the master
range.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from .errors import EmptyInputError
from .sources import VideoSource
from .timeline import Timeline

DEFAULT_FRAME_DURATION = Fraction(1, 30)


@dataclass(frozen=True)
class CompositionInstruction:
    index: int
    source: VideoSource
    start: Fraction
    fade_point: Fraction | None = None


@dataclass(frozen=True)
class InstructionSet:
    """The master instruction: layers covering [0, total_duration)."""

    time_range: tuple[Fraction, Fraction]
    layers: tuple[CompositionInstruction, ...]
    render_size: tuple[int, int]
    frame_duration: Fraction = DEFAULT_FRAME_DURATION

    @property
    def duration(self) -> Fraction:
        return self.time_range[1] - self.time_range[0]

    @property
    def fps(self) -> float:
        return float(1 / self.frame_duration)

    @property
    def fade_points(self) -> list[Fraction]:
        return [l.fade_point for l in self.layers if l.fade_point is not None]


def compile_instructions(
    timeline: Timeline,
    frame_duration: Fraction = DEFAULT_FRAME_DURATION,
) -> InstructionSet:
    """Convert a timeline into an ordered instruction set.

    Raises:
        EmptyInputError: The timeline has no entries.
    """
    if not timeline.entries:
        raise EmptyInputError("Cannot compile instructions for an empty timeline")

    last = len(timeline.entries) - 1
    layers = tuple(
        CompositionInstruction(
            index=i,
            source=entry.source,
            start=entry.start,
            fade_point=entry.duration if i < last else None,
        )
        for i, entry in enumerate(timeline.entries)
    )
    return InstructionSet(
        time_range=(Fraction(0), timeline.total_duration),
        layers=layers,
        render_size=timeline.render_size,
        frame_duration=Fraction(frame_duration),
    )
