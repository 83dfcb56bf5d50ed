# Operation pool and readiness tracking.
# Version: 1.0.0
# Holds unplaced operations and decides which are ready for placement.

from .models import NormalizedProduct, SchedulableOperation, Assignment


class OperationPool:
    """All operations of a run that have not been placed yet.

    Pool order is product order, then route order; it is the final
    tie-break of the priority rule. Readiness is recomputed on demand by
    filtering the remaining operations against recorded assignments.
    """

    def __init__(self, operations: list[SchedulableOperation]) -> None:
        self._remaining: list[SchedulableOperation] = list(operations)
        self._placed: dict[str, dict[int, Assignment]] = {}
        self._remaining_work: dict[tuple[str, int], int] = {}
        self.total = len(self._remaining)

        # Suffix sums of durations per product route
        by_product: dict[str, list[SchedulableOperation]] = {}
        for op in self._remaining:
            by_product.setdefault(op.product_id, []).append(op)
        for ops in by_product.values():
            running = 0
            for op in sorted(ops, key=lambda o: o.step_index, reverse=True):
                running += op.duration
                self._remaining_work[op.key] = running

    @classmethod
    def from_products(cls, products: list[NormalizedProduct]) -> "OperationPool":
        """Flatten every product route into schedulable operations."""
        operations = []
        for product in products:
            for step_index, step in enumerate(product.route):
                operations.append(SchedulableOperation(
                    product_id=product.id,
                    step_index=step_index,
                    capability=step.capability,
                    duration=step.duration,
                    family=product.family,
                    due=product.due,
                ))
        return cls(operations)

    def __len__(self) -> int:
        return len(self._remaining)

    def __bool__(self) -> bool:
        return bool(self._remaining)

    @property
    def remaining(self) -> list[SchedulableOperation]:
        return list(self._remaining)

    @property
    def placed_count(self) -> int:
        return self.total - len(self._remaining)

    def is_ready(self, operation: SchedulableOperation) -> bool:
        """An operation is ready once its product's prior step is placed."""
        if operation.step_index == 0:
            return True
        placed = self._placed.get(operation.product_id, {})
        return operation.step_index - 1 in placed

    def ready_operations(self) -> list[SchedulableOperation]:
        """Ready operations, in pool order."""
        return [op for op in self._remaining if self.is_ready(op)]

    def remaining_work(self, operation: SchedulableOperation) -> int:
        """Minutes of this step plus every later step of the same product."""
        return self._remaining_work.get(operation.key, operation.duration)

    def assignment_for(self, product_id: str, step_index: int) -> Assignment | None:
        return self._placed.get(product_id, {}).get(step_index)

    def record_placement(self, operation: SchedulableOperation, assignment: Assignment) -> None:
        """Remove a placed operation and release its successor.

        Args:
            operation: The operation that was placed (must be in the pool).
            assignment: Its assignment.

        Raises:
            KeyError: If the operation is not in the pool.
        """
        index = next(
            (i for i, op in enumerate(self._remaining) if op.key == operation.key),
            None
        )
        if index is None:
            raise KeyError(f"{operation.label} is not in the pool")
        del self._remaining[index]

        self._placed.setdefault(operation.product_id, {})[operation.step_index] = assignment

        successor = next(
            (
                op for op in self._remaining
                if op.product_id == operation.product_id
                and op.step_index == operation.step_index + 1
            ),
            None
        )
        if successor is not None:
            successor.earliest_start = max(successor.earliest_start, assignment.end)
