# Result compilation and schedule consistency checks.
# Version: 1.0.0
# Turns assignments into timestamped output and KPIs, and re-validates them.

import math
from dataclasses import dataclass, field

from .constants import SCHEMA_VERSION
from .errors import SchedulingError
from .intervals import is_within_calendar
from .models import Assignment, NormalizedProblem
from .time_utils import from_minute_offset, format_timestamp


@dataclass
class ScheduleKPIs:
    """Key performance indicators of a finished schedule.

    Attributes:
        tardiness_minutes: Sum of per-product tardiness.
        changeovers: Adjacent same-resource pairs with differing family.
        makespan_minutes: Latest end minus earliest start.
        utilization: Resource id to percent of calendar capacity in use.
        on_time_jobs: Products finishing by their due date.
        total_jobs: Number of products in the request.
    """
    tardiness_minutes: int = 0
    changeovers: int = 0
    makespan_minutes: int = 0
    utilization: dict[str, int] = field(default_factory=dict)
    on_time_jobs: int = 0
    total_jobs: int = 0

    def to_dict(self) -> dict:
        return {
            "tardiness_minutes": self.tardiness_minutes,
            "changeovers": self.changeovers,
            "makespan_minutes": self.makespan_minutes,
            "utilization": dict(self.utilization),
            "on_time_jobs": self.on_time_jobs,
            "total_jobs": self.total_jobs,
        }


@dataclass
class OutputAssignment:
    """An assignment with absolute timestamps, as returned to callers."""
    product: str
    operation: str
    resource: str
    start: str
    end: str

    def to_dict(self) -> dict:
        return {
            "product": self.product,
            "operation": self.operation,
            "resource": self.resource,
            "start": self.start,
            "end": self.end,
        }


@dataclass
class SuccessResult:
    """Successful scheduling run.

    Attributes:
        assignments: Output assignments sorted by start.
        kpis: Schedule KPIs.
        version: Schema version tag.
        internal: Minute-offset assignments, for reports; not serialized.
    """
    assignments: list[OutputAssignment]
    kpis: ScheduleKPIs
    version: str = SCHEMA_VERSION
    internal: list[Assignment] = field(default_factory=list, repr=False)

    success = True

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "success": True,
            "assignments": [a.to_dict() for a in self.assignments],
            "kpis": self.kpis.to_dict(),
        }


@dataclass
class FailureResult:
    """Failed scheduling run.

    Attributes:
        error: Failure category (e.g. ``cannot_place``).
        why: Human-readable, operation-specific detail lines.
        version: Schema version tag.
    """
    error: str
    why: list[str]
    version: str = SCHEMA_VERSION

    success = False

    @classmethod
    def from_error(cls, error: SchedulingError, version: str = SCHEMA_VERSION) -> "FailureResult":
        return cls(error=error.category, why=error.why, version=version)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "success": False,
            "error": self.error,
            "why": list(self.why),
        }


ScheduleResult = SuccessResult | FailureResult


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def group_by_resource(assignments: list[Assignment]) -> dict[str, list[Assignment]]:
    """Assignments per resource, each list sorted by start."""
    grouped: dict[str, list[Assignment]] = {}
    for a in assignments:
        grouped.setdefault(a.resource_id, []).append(a)
    for items in grouped.values():
        items.sort(key=lambda a: a.start)
    return grouped


def group_by_product(assignments: list[Assignment]) -> dict[str, list[Assignment]]:
    """Assignments per product, each list sorted by route step."""
    grouped: dict[str, list[Assignment]] = {}
    for a in assignments:
        grouped.setdefault(a.product_id, []).append(a)
    for items in grouped.values():
        items.sort(key=lambda a: a.step_index)
    return grouped


def compute_kpis(assignments: list[Assignment], problem: NormalizedProblem) -> ScheduleKPIs:
    """Compute tardiness, changeovers, makespan and utilization.

    Args:
        assignments: Complete set of assignments of the run.
        problem: Normalized problem the assignments belong to.

    Returns:
        ScheduleKPIs for the schedule.
    """
    completions: dict[str, int] = {}
    for a in assignments:
        completions[a.product_id] = max(completions.get(a.product_id, 0), a.end)

    total_tardiness = 0
    on_time = 0
    for product in problem.products:
        tardiness = max(0, completions.get(product.id, 0) - product.due)
        total_tardiness += tardiness
        if tardiness == 0:
            on_time += 1

    by_resource = group_by_resource(assignments)
    changeovers = 0
    utilization = {}
    for resource_id, resource in problem.resources.items():
        items = by_resource.get(resource_id, [])
        busy = sum(a.duration for a in items)
        setup = 0
        for prev, nxt in zip(items, items[1:]):
            if prev.family != nxt.family:
                changeovers += 1
                setup += problem.changeovers.lookup(prev.family, nxt.family)
        utilization[resource_id] = round_half_up(
            (busy + setup) / max(resource.capacity, 1) * 100
        )

    if assignments:
        makespan = max(a.end for a in assignments) - min(a.start for a in assignments)
    else:
        makespan = 0

    return ScheduleKPIs(
        tardiness_minutes=total_tardiness,
        changeovers=changeovers,
        makespan_minutes=makespan,
        utilization=utilization,
        on_time_jobs=on_time,
        total_jobs=len(problem.products),
    )


def validate_schedule(assignments: list[Assignment], problem: NormalizedProblem) -> list[str]:
    """Validate that the schedule doesn't violate hard constraints.

    Checks:
    1. No two assignments overlap on a resource
    2. Route steps of a product run in order without overlap
    3. Each assignment lies inside one calendar window of its resource
    4. Each assignment lies inside the horizon
    5. Adjacent assignments of differing family leave room for the changeover

    Args:
        assignments: Assignments to validate.
        problem: Normalized problem supplying calendars and changeovers.

    Returns:
        List of violation messages (empty if valid).
    """
    violations = []

    for resource_id, items in group_by_resource(assignments).items():
        for prev, nxt in zip(items, items[1:]):
            if nxt.start < prev.end:
                violations.append(
                    f"Resource {resource_id}: overlap between assignments at "
                    f"{prev.start}-{prev.end} and {nxt.start}-{nxt.end}"
                )
            elif prev.family != nxt.family:
                required = problem.changeovers.lookup(prev.family, nxt.family)
                if nxt.start - prev.end < required:
                    violations.append(
                        f"Resource {resource_id}: changeover {prev.family}->{nxt.family} "
                        f"needs {required}min but only {nxt.start - prev.end}min between "
                        f"{prev.end} and {nxt.start}"
                    )

    for product_id, items in group_by_product(assignments).items():
        for prev, nxt in zip(items, items[1:]):
            if nxt.start < prev.end:
                violations.append(
                    f"Product {product_id}: step {nxt.step_index} starts at {nxt.start} "
                    f"but step {prev.step_index} ends at {prev.end}"
                )

    for a in assignments:
        resource = problem.resources.get(a.resource_id)
        if resource is None or not is_within_calendar(a.start, a.end, resource.calendar):
            violations.append(
                f"Product {a.product_id}, step {a.step_index}: {a.start}-{a.end} "
                f"is outside every calendar window of {a.resource_id}"
            )
        if a.start < 0 or a.end > problem.horizon_length:
            violations.append(
                f"Product {a.product_id}, step {a.step_index}: {a.start}-{a.end} "
                f"is outside horizon 0-{problem.horizon_length}"
            )

    return violations


def compile_result(
    assignments: list[Assignment],
    problem: NormalizedProblem,
    version: str = SCHEMA_VERSION
) -> SuccessResult:
    """Convert a finished schedule into the success payload.

    Args:
        assignments: Complete, validated assignments of the run.
        problem: Normalized problem.
        version: Schema version tag.

    Returns:
        SuccessResult with timestamped assignments sorted by start.
    """
    ordered = sorted(assignments, key=lambda a: a.start)
    origin = problem.horizon_start

    output = [
        OutputAssignment(
            product=a.product_id,
            operation=a.operation_name,
            resource=a.resource_id,
            start=format_timestamp(from_minute_offset(a.start, origin)),
            end=format_timestamp(from_minute_offset(a.end, origin)),
        )
        for a in ordered
    ]

    return SuccessResult(
        assignments=output,
        kpis=compute_kpis(assignments, problem),
        version=version,
        internal=ordered,
    )


def empty_result(version: str = SCHEMA_VERSION) -> SuccessResult:
    """Result for a request without products."""
    return SuccessResult(assignments=[], kpis=ScheduleKPIs(), version=version)
