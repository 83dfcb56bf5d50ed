# Engine-wide constants and type aliases.
# Version: 1.0.0
# Schema version tag, failure categories and default budgets.

from typing import Literal

# Tag carried by every engine response
SCHEMA_VERSION = "1.0.0"

FailureCategory = Literal[
    "invalid_input",
    "no_eligible_resource",
    "cannot_place",
    "horizon_exceeded",
    "precedence_deadlock",
    "deadline_exceeded",
    "iteration_cap_exceeded",
    "validation_failed",
    "internal_error",
]

INFEASIBLE_CATEGORIES: tuple[FailureCategory, ...] = (
    "no_eligible_resource",
    "cannot_place",
    "horizon_exceeded",
    "precedence_deadlock",
)

BUDGET_CATEGORIES: tuple[FailureCategory, ...] = (
    "deadline_exceeded",
    "iteration_cap_exceeded",
)

# Changeover matrix keys look like "standard->premium"
CHANGEOVER_KEY_SEPARATOR = "->"

DEFAULT_TIME_LIMIT_SECONDS = 30.0
DEFAULT_ITERATION_FACTOR = 5
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
