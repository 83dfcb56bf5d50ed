# Custom exception hierarchy for the production scheduling engine.
# Version: 1.0.0
# Every terminal outcome of a run carries a category string and detail lines.

from typing import Any


class SchedulingError(Exception):
    """Base exception for all scheduling engine errors.

    All custom exceptions inherit from this class to allow catching
    any scheduling-related error with a single except clause. The engine
    converts any SchedulingError raised during a run into a failure result
    using ``category`` and ``why``.

    Attributes:
        message: Human-readable error description.
        details: Additional context for debugging.
        category: Machine-readable failure category.
    """

    category = "scheduling_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the scheduling error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary of additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def why(self) -> list[str]:
        """Detail lines reported to the caller."""
        return [self.message]

    def __str__(self) -> str:
        """Return formatted error message with details."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message


class ValidationError(SchedulingError):
    """Raised when a request fails a business-rule check.

    Used for problems the request schema cannot express on its own:
    duplicate identifiers, inverted windows, malformed changeover keys.

    Attributes:
        field: Dotted path of the field that failed validation.
        value: The invalid value that was provided.
        reason: Explanation of why the value is invalid.
    """

    category = "invalid_input"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        """Initialize the validation error.

        Args:
            field: Dotted path of the field that failed validation.
            value: The invalid value provided.
            reason: Explanation of why validation failed.
        """
        self.field = field
        self.value = value
        self.reason = reason

        message = f"{field}: {reason}. Got: {value!r}"
        super().__init__(message, {"field": field})


class ConfigurationError(SchedulingError):
    """Raised when engine configuration is invalid.

    Attributes:
        config_source: Name of the configuration source (file, key).
        issue: Description of the configuration problem.
    """

    category = "configuration_error"

    def __init__(self, config_source: str, issue: str) -> None:
        self.config_source = config_source
        self.issue = issue

        message = f"Configuration error in {config_source}: {issue}"
        super().__init__(message, {"source": config_source})


class FileLoadError(SchedulingError):
    """Raised when a required file cannot be loaded.

    Covers file not found, permission denied and unparseable content.

    Attributes:
        filepath: Path to the file that failed to load.
        cause: The underlying exception that caused the failure.
    """

    category = "file_load_error"

    def __init__(self, filepath: str, cause: Exception) -> None:
        """Initialize the file load error.

        Args:
            filepath: Path to the file that failed to load.
            cause: The underlying exception.
        """
        self.filepath = filepath
        self.cause = cause

        # Extract just the filename for cleaner messages
        filename = filepath.split("/")[-1].split("\\")[-1]
        cause_type = type(cause).__name__

        message = f"Failed to load {filename}: {cause_type} - {cause}"
        super().__init__(message, {"filepath": filepath, "cause_type": cause_type})


class InfeasibleScheduleError(SchedulingError):
    """Raised when a well-formed problem cannot be scheduled.

    Infeasibility is an expected, reportable outcome. Subclasses name
    the specific reason and the operation that could not be placed.

    Attributes:
        product_id: Product whose operation failed, if any.
        step_index: Route step that failed, if any.
        reasons: Human-readable detail lines.
    """

    category = "infeasible"

    def __init__(
        self,
        reasons: list[str],
        product_id: str | None = None,
        step_index: int | None = None
    ) -> None:
        """Initialize the infeasible schedule error.

        Args:
            reasons: Detail lines, the first one being the headline.
            product_id: Offending product identifier.
            step_index: Offending route step (0-based).
        """
        self.reasons = list(reasons)
        self.product_id = product_id
        self.step_index = step_index

        details: dict[str, Any] = {}
        if product_id is not None:
            details["product"] = product_id
        if step_index is not None:
            details["step"] = step_index
        super().__init__(self.reasons[0] if self.reasons else self.category, details)

    @property
    def why(self) -> list[str]:
        return list(self.reasons)


class NoEligibleResourceError(InfeasibleScheduleError):
    """No resource offers the capability an operation requires."""

    category = "no_eligible_resource"


class CannotPlaceError(InfeasibleScheduleError):
    """Eligible resources exist but no gap on any of them fits the operation."""

    category = "cannot_place"


class HorizonExceededError(InfeasibleScheduleError):
    """The chosen placement would end after the scheduling horizon."""

    category = "horizon_exceeded"


class PrecedenceDeadlockError(InfeasibleScheduleError):
    """No operation is ready although unplaced operations remain."""

    category = "precedence_deadlock"


class BudgetExceededError(SchedulingError):
    """Raised when a run exhausts its time or iteration budget.

    Reported separately from infeasibility because the problem may in
    fact be feasible.

    Attributes:
        limit: The budget that was exhausted.
        placed: Number of operations placed before giving up.
        remaining: Number of operations still unplaced.
    """

    category = "budget_exceeded"

    def __init__(self, message: str, limit: float, placed: int, remaining: int) -> None:
        self.limit = limit
        self.placed = placed
        self.remaining = remaining
        super().__init__(
            message,
            {"limit": limit, "placed": placed, "remaining": remaining}
        )

    @property
    def why(self) -> list[str]:
        return [
            self.message,
            f"{self.placed} operation(s) placed, {self.remaining} remaining",
        ]


class DeadlineExceededError(BudgetExceededError):
    """The wall-clock time limit elapsed before the schedule was complete."""

    category = "deadline_exceeded"


class IterationCapExceededError(BudgetExceededError):
    """The hard iteration ceiling was reached."""

    category = "iteration_cap_exceeded"


class ConstraintViolationError(SchedulingError):
    """Raised when a finished schedule breaks a hard constraint.

    The final consistency check found overlapping assignments, broken
    precedence or a calendar/changeover violation. This signals a defect
    in the placement search, not a property of the input.

    Attributes:
        violations: One line per violated constraint.
    """

    category = "validation_failed"

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)

        count = len(self.violations)
        message = f"Schedule failed consistency check: {count} violation(s)"
        super().__init__(message, {"violation_count": count})

    @property
    def why(self) -> list[str]:
        return list(self.violations)
