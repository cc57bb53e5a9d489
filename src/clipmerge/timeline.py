"""Timeline builder — lay sources end to end on one master timeline.

The builder walks the sources left-to-right with a running cursor that
starts at zero. Each source occupies [cursor, cursor + duration) and the
cursor then advances to the end of that range. Durations are exact
fractions, so the final end equals the sum of all durations.

Render size policy: the canvas takes the natural size of the LAST source
("last clip wins"). Sources of other sizes are drawn at the top-left of
that canvas without scaling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction

from .common import format_seconds
from .errors import EmptyInputError
from .sources import VideoSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    source: VideoSource
    start: Fraction
    end: Fraction

    @property
    def duration(self) -> Fraction:
        return self.end - self.start


@dataclass(frozen=True)
class Timeline:
    entries: tuple[TimelineEntry, ...]
    total_duration: Fraction
    render_size: tuple[int, int]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def starts(self) -> list[Fraction]:
        return [e.start for e in self.entries]


def build_timeline(sources) -> Timeline:
    """Build a contiguous timeline from an ordered sequence of sources.

    Args:
        sources: Ordered iterable of VideoSource. Unresolved sources are
            probed on the way through.

    Returns:
        Timeline with one entry per source.

    Raises:
        EmptyInputError: No sources given.
        SourceReadError: A source could not be resolved. No partial
            timeline is returned.
    """
    sources = tuple(sources)
    if not sources:
        raise EmptyInputError("No sources to merge")

    entries = []
    cursor = Fraction(0)
    render_size = None

    for source in sources:
        source.resolve()
        end = cursor + source.duration
        entries.append(TimelineEntry(source=source, start=cursor, end=end))
        cursor = end
        render_size = source.natural_size

    logger.info(
        "Built timeline: %d clips, %s, render size %dx%d",
        len(entries), format_seconds(cursor), *render_size,
    )
    return Timeline(
        entries=tuple(entries),
        total_duration=cursor,
        render_size=tuple(render_size),
    )
