# Placement search for a single operation.
# Version: 1.0.0
# Scans every eligible resource, calendar window and assignment gap.

from dataclasses import dataclass

from .models import SchedulableOperation, NormalizedResource, ChangeoverMatrix
from .resources import ResourcePool


@dataclass(frozen=True)
class Placement:
    """Chosen slot for an operation.

    Attributes:
        resource_id: Resource to run on.
        start: Start offset in minutes (after any changeover).
        end: End offset in minutes.
        changeover: Setup minutes inserted before ``start``.
    """
    resource_id: str
    start: int
    end: int
    changeover: int = 0


@dataclass(frozen=True)
class NearMiss:
    """Largest gap that was too small for the operation.

    Attributes:
        resource_id: Resource owning the gap.
        gap_start: Start of the free gap.
        gap_end: End of the free gap.
        changeover: Setup minutes the gap would have needed.
        needed: Changeover plus processing minutes.
    """
    resource_id: str
    gap_start: int
    gap_end: int
    changeover: int
    needed: int

    @property
    def gap(self) -> int:
        return self.gap_end - self.gap_start

    def describe(self) -> str:
        return (
            f"{self.resource_id}: largest gap {self.gap}min "
            f"({self.gap_start}-{self.gap_end}) < needed {self.needed}min "
            f"(changeover {self.changeover}min)"
        )


@dataclass(frozen=True)
class PlacementSearch:
    """Outcome of a placement search.

    Attributes:
        placement: Best slot found, or None.
        near_miss: Largest rejected gap, kept for diagnostics.
        candidates: Number of gaps that admitted the operation.
    """
    placement: Placement | None
    near_miss: NearMiss | None = None
    candidates: int = 0

    @property
    def found(self) -> bool:
        return self.placement is not None


def projected_tardiness(end: int, due: int) -> int:
    return max(0, end - due)


def find_placement(
    operation: SchedulableOperation,
    eligible: list[NormalizedResource],
    resource_pool: ResourcePool,
    changeovers: ChangeoverMatrix
) -> PlacementSearch:
    """Find the slot minimizing projected tardiness, then end time.

    Every gap before, between and after existing assignments is tried in
    every calendar window of every eligible resource. The changeover for
    a gap is looked up from the family of the assignment immediately
    preceding that gap, so insertions into early gaps are timed against
    their actual predecessor. When that predecessor ran in an earlier
    window, the break between windows counts toward the changeover. A gap
    followed by an assignment must also leave room for the changeover into
    that assignment.

    Args:
        operation: Operation to place.
        eligible: Resources offering the operation's capability.
        resource_pool: Current assignments per resource.
        changeovers: Family changeover lookup.

    Returns:
        PlacementSearch with the best placement (first found wins exact
        ties) or, when nothing fits, the largest near-miss gap.
    """
    best: Placement | None = None
    best_key: tuple[int, int] | None = None
    near_miss: NearMiss | None = None
    candidates = 0

    for resource in eligible:
        assigned = resource_pool.state(resource.id).assignments

        for window in resource.calendar:
            if window.end <= operation.earliest_start:
                continue

            for i in range(len(assigned) + 1):
                prev = assigned[i - 1] if i > 0 else None
                nxt = assigned[i] if i < len(assigned) else None

                gap_start = max(operation.earliest_start, window.start)
                if prev is not None:
                    gap_start = max(gap_start, prev.end)
                gap_end = window.end if nxt is None else min(window.end, nxt.start)

                if gap_end <= gap_start:
                    continue

                setup = changeovers.lookup(
                    prev.family if prev is not None else None,
                    operation.family
                )
                if prev is not None and prev.end < window.start:
                    # Predecessor sits in an earlier window; the break counts toward setup
                    start = max(gap_start, prev.end + setup)
                else:
                    start = gap_start + setup
                changeover = start - gap_start
                end = start + operation.duration

                # The assignment after the gap keeps its start, so it needs
                # its own changeover from this operation's family.
                trailing = 0
                latest_end = gap_end
                if nxt is not None:
                    trailing = changeovers.lookup(operation.family, nxt.family)
                    latest_end = min(gap_end, nxt.start - trailing)

                if end <= latest_end:
                    candidates += 1
                    key = (projected_tardiness(end, operation.due), end)
                    if best_key is None or key < best_key:
                        best_key = key
                        best = Placement(resource.id, start, end, changeover)
                elif near_miss is None or gap_end - gap_start > near_miss.gap:
                    required = changeover
                    if nxt is not None and nxt.start - trailing < gap_end:
                        required += trailing
                    near_miss = NearMiss(
                        resource_id=resource.id,
                        gap_start=gap_start,
                        gap_end=gap_end,
                        changeover=required,
                        needed=required + operation.duration,
                    )

    return PlacementSearch(placement=best, near_miss=near_miss, candidates=candidates)
