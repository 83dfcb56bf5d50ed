# Priority rule for picking the next operation to place.
# Version: 1.0.0
# Earliest due date, then least slack, then shortest duration.

from .models import SchedulableOperation
from .operation_pool import OperationPool


def slack(operation: SchedulableOperation, pool: OperationPool) -> int:
    """Due date minus earliest start minus remaining work of the product."""
    return operation.due - operation.earliest_start - pool.remaining_work(operation)


def priority_key(operation: SchedulableOperation, pool: OperationPool) -> tuple[int, int, int]:
    """Sort key; smaller is more urgent."""
    return (operation.due, slack(operation, pool), operation.duration)


def select_next_operation(
    ready: list[SchedulableOperation],
    pool: OperationPool
) -> SchedulableOperation | None:
    """Choose the single next operation to place.

    Args:
        ready: Ready operations in pool order.
        pool: Pool supplying remaining-work figures.

    Returns:
        The most urgent operation; equal keys keep pool order. None when
        ``ready`` is empty.
    """
    if not ready:
        return None
    # min() returns the first of equal elements
    return min(ready, key=lambda op: priority_key(op, pool))
