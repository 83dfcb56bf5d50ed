# Half-open time interval helpers in minute offsets.
# Version: 1.0.0
# Overlap tests, merging, clipping and earliest-slot search within calendars.

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True, order=True)
class Interval:
    """A half-open interval ``[start, end)`` in minutes from horizon start.

    Attributes:
        start: Inclusive start offset.
        end: Exclusive end offset.
    """
    start: int
    end: int

    @property
    def length(self) -> int:
        """Interval length in minutes (never negative)."""
        return max(0, self.end - self.start)

    def overlaps(self, other: "Interval") -> bool:
        """Check if this interval overlaps with another in time."""
        return intervals_overlap(self, other)

    def contains(self, start: int, end: int) -> bool:
        """Check if ``[start, end)`` lies entirely inside this interval."""
        return self.start <= start and end <= self.end


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Check whether two half-open intervals overlap.

    Touching intervals (``a.end == b.start``) do not overlap.
    """
    return a.start < b.end and b.start < a.end


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Combine overlapping and adjacent intervals.

    Args:
        intervals: Intervals in any order.

    Returns:
        Sorted, non-overlapping intervals covering the same union. Merging
        an already merged list returns an equal list.
    """
    ordered = sorted(intervals, key=lambda i: i.start)
    if not ordered:
        return []

    combined = [ordered[0]]
    for current in ordered[1:]:
        last = combined[-1]
        if current.start <= last.end:
            combined[-1] = Interval(last.start, max(last.end, current.end))
        else:
            combined.append(current)

    return combined


def clip_intervals(intervals: Iterable[Interval], lower: int, upper: int) -> list[Interval]:
    """Clip intervals to ``[lower, upper]`` and drop the empty ones.

    Args:
        intervals: Intervals to clip.
        lower: Smallest allowed start.
        upper: Largest allowed end.

    Returns:
        Clipped intervals with positive length, in input order.
    """
    clipped = []
    for interval in intervals:
        start = max(lower, interval.start)
        end = min(upper, interval.end)
        if end > start:
            clipped.append(Interval(start, end))
    return clipped


def total_length(intervals: Iterable[Interval]) -> int:
    """Sum of interval lengths in minutes."""
    return sum(interval.length for interval in intervals)


def is_within_calendar(start: int, end: int, calendar: Sequence[Interval]) -> bool:
    """Check if ``[start, end)`` fits entirely inside one calendar window."""
    return any(window.contains(start, end) for window in calendar)


def find_earliest_slot(
    calendar: Sequence[Interval],
    occupied: Iterable[Interval],
    duration: int,
    earliest_start: int
) -> int | None:
    """Find the earliest start offset where ``duration`` minutes fit.

    Walks each calendar window in order, skipping windows that end at or
    before ``earliest_start``, and steps past the occupied intervals that
    intersect the remaining part of the window.

    Args:
        calendar: Merged calendar windows, sorted by start.
        occupied: Busy intervals, in any order (merged internally).
        duration: Required minutes.
        earliest_start: No slot may start before this offset.

    Returns:
        Start offset of the first fitting slot, or None if none exists.
    """
    merged = merge_intervals(occupied)

    for window in calendar:
        if window.end <= earliest_start:
            continue

        current = max(window.start, earliest_start)

        for busy in merged:
            if busy.end <= current:
                continue
            if busy.start >= window.end:
                break

            if current + duration <= busy.start:
                return current

            current = max(current, busy.end)
            if current >= window.end:
                break

        # Remaining tail of the window
        if current + duration <= window.end:
            return current

    return None
