# Infeasibility diagnosis for failed placements.
# Version: 1.0.0
# Builds structured, operation-specific failure reasons.

from .errors import (
    NoEligibleResourceError,
    CannotPlaceError,
    HorizonExceededError,
    PrecedenceDeadlockError,
    DeadlineExceededError,
    IterationCapExceededError,
)
from .intervals import find_earliest_slot
from .models import SchedulableOperation, NormalizedResource
from .operation_pool import OperationPool
from .placement import Placement, PlacementSearch
from .resources import ResourcePool


def diagnose_no_eligible_resource(operation: SchedulableOperation) -> NoEligibleResourceError:
    """No resource has the required capability."""
    return NoEligibleResourceError(
        [f"{operation.label}: No resource has required capability"],
        product_id=operation.product_id,
        step_index=operation.step_index,
    )


def diagnose_cannot_place(
    operation: SchedulableOperation,
    search: PlacementSearch,
    eligible: list[NormalizedResource],
    resource_pool: ResourcePool
) -> CannotPlaceError:
    """Explain why no gap on any eligible resource admits the operation.

    The first line names the operation. The closest rejected gap follows,
    then one line per eligible resource telling whether a slot would
    exist if changeovers were ignored, which separates changeover-blocked
    resources from plainly full ones.

    Args:
        operation: The operation that could not be placed.
        search: Result of the failed placement search.
        eligible: Resources that were searched.
        resource_pool: Current assignments per resource.

    Returns:
        CannotPlaceError ready to be raised.
    """
    reasons = [
        f"{operation.label}: No available time slot found on eligible resources "
        f"(needs {operation.duration}min from {operation.earliest_start}min)"
    ]
    if search.near_miss is not None:
        reasons.append(f"Closest: {search.near_miss.describe()}")

    for resource in eligible:
        slot = find_earliest_slot(
            resource.calendar,
            resource_pool.state(resource.id).occupied(),
            operation.duration,
            operation.earliest_start,
        )
        if slot is None:
            reasons.append(
                f"{resource.id}: no free window of {operation.duration}min "
                f"after {operation.earliest_start}min"
            )
        else:
            reasons.append(
                f"{resource.id}: changeover blocks the free slot at {slot}min"
            )

    return CannotPlaceError(
        reasons,
        product_id=operation.product_id,
        step_index=operation.step_index,
    )


def diagnose_horizon_exceeded(
    operation: SchedulableOperation,
    placement: Placement,
    horizon_length: int
) -> HorizonExceededError:
    return HorizonExceededError(
        [
            f"{operation.label}: would end at {placement.end} min on "
            f"{placement.resource_id}, beyond horizon {horizon_length} min"
        ],
        product_id=operation.product_id,
        step_index=operation.step_index,
    )


def diagnose_precedence_deadlock(pool: OperationPool) -> PrecedenceDeadlockError:
    """No ready operation while some remain; list the blocked ones."""
    remaining = pool.remaining
    reasons = [f"Precedence deadlock detected: {len(remaining)} operation(s) blocked"]
    for op in remaining:
        reasons.append(f"{op.label}: waiting for step {op.step_index - 1}")

    first = remaining[0] if remaining else None
    return PrecedenceDeadlockError(
        reasons,
        product_id=first.product_id if first else None,
        step_index=first.step_index if first else None,
    )


def diagnose_deadline(time_limit_seconds: float, pool: OperationPool) -> DeadlineExceededError:
    return DeadlineExceededError(
        f"settings.time_limit_seconds ({time_limit_seconds:g}s) reached "
        "before completing schedule",
        limit=time_limit_seconds,
        placed=pool.placed_count,
        remaining=len(pool),
    )


def diagnose_iteration_cap(max_iterations: int, pool: OperationPool) -> IterationCapExceededError:
    return IterationCapExceededError(
        f"Maximum iterations ({max_iterations}) exceeded",
        limit=max_iterations,
        placed=pool.placed_count,
        remaining=len(pool),
    )
