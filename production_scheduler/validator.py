# Business rule validation for scheduling requests.
# Version: 1.0.0
# Cross-field checks the request schema cannot express on its own.

import logging
from dataclasses import dataclass, field

from .constants import CHANGEOVER_KEY_SEPARATOR
from .errors import ValidationError
from .models import ChangeoverMatrix, split_changeover_key
from .schemas import ScheduleRequest

logger = logging.getLogger(__name__)


@dataclass
class ValidationWarning:
    """A non-fatal issue that should be reported but doesn't block scheduling.

    Attributes:
        field: Dotted path of the field related to the warning.
        message: Human-readable warning message.
    """
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Result of validating a scheduling request.

    Attributes:
        is_valid: True if no blocking errors found.
        errors: List of ValidationError exceptions.
        warnings: List of non-blocking ValidationWarning instances.
    """
    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: ValidationWarning) -> None:
        self.warnings.append(warning)

    @property
    def why(self) -> list[str]:
        """Error messages, one per line."""
        return [e.message for e in self.errors]


def validate_request(request: ScheduleRequest) -> ValidationResult:
    """Validate a schema-valid request against business rules.

    Performs validation checks:
    1. Horizon end is after its start
    2. Resource and product ids are unique
    3. Calendar windows do not end before they start
    4. Changeover keys have the form ``from->to``
    5. Warnings for missing changeover pairs, unserved capabilities and
       calendars lying outside the horizon

    Args:
        request: Request that passed the pydantic schema.

    Returns:
        ValidationResult with errors and warnings. Warnings are also logged.
    """
    result = ValidationResult()

    _validate_horizon(request, result)
    _validate_unique_ids(request, result)
    _validate_calendars(request, result)
    _validate_changeover_keys(request, result)

    _check_changeover_coverage(request, result)
    _check_capability_coverage(request, result)

    for warning in result.warnings:
        logger.warning("Request warning: %s", warning)

    return result


def _validate_horizon(request: ScheduleRequest, result: ValidationResult) -> None:
    horizon = request.horizon
    if horizon.end <= horizon.start:
        result.add_error(ValidationError(
            field="horizon.end",
            value=horizon.end.isoformat(),
            reason=f"must be after horizon.start ({horizon.start.isoformat()})"
        ))


def _validate_unique_ids(request: ScheduleRequest, result: ValidationResult) -> None:
    """Duplicate ids would make assignments ambiguous."""
    for collection, items in (("resources", request.resources), ("products", request.products)):
        seen: set[str] = set()
        for index, item in enumerate(items):
            if item.id in seen:
                result.add_error(ValidationError(
                    field=f"{collection}.{index}.id",
                    value=item.id,
                    reason="duplicate id"
                ))
            seen.add(item.id)


def _validate_calendars(request: ScheduleRequest, result: ValidationResult) -> None:
    horizon = request.horizon
    for r_index, resource in enumerate(request.resources):
        inside_horizon = False
        for w_index, (start, end) in enumerate(resource.calendar):
            if end < start:
                result.add_error(ValidationError(
                    field=f"resources.{r_index}.calendar.{w_index}",
                    value=[start.isoformat(), end.isoformat()],
                    reason="window ends before it starts"
                ))
            if start < horizon.end and end > horizon.start and end > start:
                inside_horizon = True

        if not inside_horizon:
            result.add_warning(ValidationWarning(
                field=f"resources.{r_index}.calendar",
                message=f"resource {resource.id} has no working time inside the horizon"
            ))


def _validate_changeover_keys(request: ScheduleRequest, result: ValidationResult) -> None:
    for key in request.changeover_matrix_minutes.values:
        if split_changeover_key(key) is None:
            result.add_error(ValidationError(
                field=f"changeover_matrix_minutes.values.{key}",
                value=key,
                reason=f"key must look like 'familyA{CHANGEOVER_KEY_SEPARATOR}familyB'"
            ))


def _check_changeover_coverage(request: ScheduleRequest, result: ValidationResult) -> None:
    """Missing family pairs silently default to zero minutes; surface them."""
    matrix = ChangeoverMatrix(request.changeover_matrix_minutes.values)
    families = [p.family for p in request.products]
    for previous, following in matrix.missing_pairs(families):
        result.add_warning(ValidationWarning(
            field="changeover_matrix_minutes.values",
            message=(
                f"no entry for '{previous}{CHANGEOVER_KEY_SEPARATOR}{following}', "
                "assuming 0 minutes"
            )
        ))


def _check_capability_coverage(request: ScheduleRequest, result: ValidationResult) -> None:
    offered = {c for r in request.resources for c in r.capabilities}
    for p_index, product in enumerate(request.products):
        for s_index, step in enumerate(product.route):
            if step.capability not in offered:
                result.add_warning(ValidationWarning(
                    field=f"products.{p_index}.route.{s_index}.capability",
                    message=(
                        f"no resource offers '{step.capability}' "
                        f"(product {product.id})"
                    )
                ))
