# Production Scheduler - Core Package
# Version: 1.0.0

"""
Production scheduling engine for capability-based manufacturing lines.

Assigns each product's route operations to eligible resources inside
their calendar windows, inserting family changeovers, with a greedy
serial schedule generation scheme that minimizes total tardiness.
"""

__version__ = "1.0.0"

from .errors import (
    SchedulingError,
    ValidationError,
    ConfigurationError,
    FileLoadError,
    InfeasibleScheduleError,
    NoEligibleResourceError,
    CannotPlaceError,
    HorizonExceededError,
    PrecedenceDeadlockError,
    BudgetExceededError,
    DeadlineExceededError,
    IterationCapExceededError,
    ConstraintViolationError,
)

from .constants import (
    SCHEMA_VERSION,
    FailureCategory,
)

from .config import (
    EngineConfig,
    load_config,
    load_config_from_yaml,
    configure_logging,
)

from .intervals import (
    Interval,
    intervals_overlap,
    merge_intervals,
    find_earliest_slot,
)

from .schemas import (
    ScheduleRequest,
    parse_request,
)

from .validator import (
    ValidationResult,
    ValidationWarning,
    validate_request,
)

from .models import (
    Assignment,
    ChangeoverMatrix,
    NormalizedProblem,
    SchedulableOperation,
)

from .normalizer import normalize_request

from .scheduler import (
    SchedulingRun,
    schedule,
    schedule_payload,
)

from .solution import (
    ScheduleResult,
    SuccessResult,
    FailureResult,
    ScheduleKPIs,
    validate_schedule,
)

from .output_generator import (
    generate_text_gantt,
    generate_schedule_summary,
    export_to_json,
    generate_schedule_excel,
)
