# Serial schedule generation for the production scheduling engine.
# Version: 1.0.0
# Places operations one at a time in priority order, without backtracking.

import logging
import time
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from .config import EngineConfig
from .diagnostics import (
    diagnose_no_eligible_resource,
    diagnose_cannot_place,
    diagnose_horizon_exceeded,
    diagnose_precedence_deadlock,
    diagnose_deadline,
    diagnose_iteration_cap,
)
from .errors import SchedulingError, ConstraintViolationError
from .models import Assignment, NormalizedProblem
from .normalizer import normalize_request
from .operation_pool import OperationPool
from .placement import find_placement
from .priority import select_next_operation
from .resources import ResourcePool, create_resource_pool
from .schemas import ScheduleRequest, parse_request, format_schema_errors
from .validator import validate_request
from .solution import (
    ScheduleResult,
    FailureResult,
    compile_result,
    empty_result,
    validate_schedule,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SchedulingRun:
    """Mutable state of one scheduling run.

    Each call to :func:`schedule` builds its own run, so concurrent runs
    share nothing.

    Attributes:
        problem: Normalized, read-only problem.
        pool: Unplaced operations.
        resource_pool: Assignments per resource.
        assignments: Assignments in placement order.
        max_iterations: Hard iteration ceiling.
        iterations: Iterations started so far.
    """

    def __init__(self, problem: NormalizedProblem, clock: Clock = time.monotonic) -> None:
        self.problem = problem
        self.clock = clock
        self.pool = OperationPool.from_products(problem.products)
        self.resource_pool: ResourcePool = create_resource_pool(problem.resources)
        self.assignments: list[Assignment] = []
        self.max_iterations = len(self.pool) * problem.iteration_factor
        self.iterations = 0
        self.deadline = clock() + problem.time_limit_seconds

    def run(self) -> list[Assignment]:
        """Place every operation.

        Returns:
            Assignments in placement order.

        Raises:
            InfeasibleScheduleError: If an operation cannot be placed.
            BudgetExceededError: If the deadline or iteration cap is hit.
        """
        while self.pool:
            if self.clock() > self.deadline:
                raise diagnose_deadline(self.problem.time_limit_seconds, self.pool)

            self.iterations += 1
            if self.iterations > self.max_iterations:
                raise diagnose_iteration_cap(self.max_iterations, self.pool)

            self.step()

        return self.assignments

    def step(self) -> Assignment:
        """Select, place and record a single operation."""
        operation = select_next_operation(self.pool.ready_operations(), self.pool)
        if operation is None:
            raise diagnose_precedence_deadlock(self.pool)

        eligible = self.resource_pool.eligible_resources(operation.capability)
        if not eligible:
            raise diagnose_no_eligible_resource(operation)

        search = find_placement(
            operation, eligible, self.resource_pool, self.problem.changeovers
        )
        if search.placement is None:
            raise diagnose_cannot_place(operation, search, eligible, self.resource_pool)

        placement = search.placement
        if placement.end > self.problem.horizon_length:
            raise diagnose_horizon_exceeded(
                operation, placement, self.problem.horizon_length
            )

        assignment = Assignment(
            product_id=operation.product_id,
            step_index=operation.step_index,
            family=operation.family,
            operation_name=operation.capability,
            resource_id=placement.resource_id,
            start=placement.start,
            end=placement.end,
        )
        self.resource_pool.record(assignment)
        self.pool.record_placement(operation, assignment)
        self.assignments.append(assignment)

        logger.debug(
            "Placed %s on %s at %d-%d (changeover %dmin, %d candidate gaps)",
            operation.label, placement.resource_id, placement.start,
            placement.end, placement.changeover, search.candidates,
        )
        return assignment


def schedule(
    request: ScheduleRequest | dict[str, Any],
    config: EngineConfig | None = None,
    clock: Clock = time.monotonic
) -> ScheduleResult:
    """Schedule every product of a request.

    Args:
        request: Validated request, or a payload that passes the schema.
        config: Engine configuration; defaults apply when omitted.
        clock: Monotonic time source in seconds, injectable for tests.

    Returns:
        SuccessResult, or FailureResult carrying a category and detail
        lines. Infeasibility, budget exhaustion and consistency-check
        failures are all returned, never raised.

    Raises:
        pydantic.ValidationError: If ``request`` is a payload that fails
            the schema.
    """
    config = config or EngineConfig()
    request = parse_request(request)
    problem = normalize_request(request, config)

    if not problem.products:
        logger.info("No products to schedule")
        return empty_result(config.schema_version)

    started = clock()
    run = SchedulingRun(problem, clock=clock)
    logger.info(
        "Scheduling %d operation(s) of %d product(s) on %d resource(s), "
        "horizon %d min, time limit %gs",
        run.pool.total, len(problem.products), len(problem.resources),
        problem.horizon_length, problem.time_limit_seconds,
    )

    try:
        assignments = run.run()

        violations = validate_schedule(assignments, problem)
        if violations:
            raise ConstraintViolationError(violations)
    except SchedulingError as e:
        logger.warning("Scheduling failed (%s): %s", e.category, e)
        return FailureResult.from_error(e, config.schema_version)

    result = compile_result(assignments, problem, config.schema_version)
    logger.info(
        "Scheduled %d operation(s) in %d iteration(s), %.3fs: tardiness %d min, "
        "%d changeover(s), makespan %d min",
        len(assignments), run.iterations, clock() - started,
        result.kpis.tardiness_minutes, result.kpis.changeovers,
        result.kpis.makespan_minutes,
    )
    return result


def schedule_payload(
    payload: Any,
    config: EngineConfig | None = None,
    clock: Clock = time.monotonic
) -> ScheduleResult:
    """Validate a decoded JSON/YAML payload, then schedule it.

    Schema errors and business-rule errors both come back as a
    FailureResult with category ``invalid_input``; warnings are logged by
    the validator and do not block the run.

    Args:
        payload: Decoded request body.
        config: Engine configuration.
        clock: Monotonic time source in seconds.

    Returns:
        ScheduleResult for the payload.
    """
    config = config or EngineConfig()
    try:
        request = parse_request(payload)
    except PydanticValidationError as e:
        why = format_schema_errors(e)
        logger.info("Rejected request: %d schema error(s)", len(why))
        return FailureResult(error="invalid_input", why=why, version=config.schema_version)

    validation = validate_request(request)
    if not validation.is_valid:
        logger.info("Rejected request: %d validation error(s)", len(validation.errors))
        return FailureResult(
            error="invalid_input", why=validation.why, version=config.schema_version
        )

    return schedule(request, config=config, clock=clock)
