# Request schema for the scheduling engine.
# Version: 1.0.0
# Pydantic models that reject malformed requests before the engine runs.

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaValidationError

from .constants import DEFAULT_TIME_LIMIT_SECONDS
from .time_utils import ensure_utc


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class HorizonModel(_RequestModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ResourceModel(_RequestModel):
    id: str = Field(min_length=1)
    capabilities: list[str] = Field(min_length=1)
    calendar: list[tuple[datetime, datetime]] = Field(min_length=1)

    @field_validator("capabilities")
    @classmethod
    def _non_empty_capabilities(cls, value: list[str]) -> list[str]:
        if any(not c for c in value):
            raise ValueError("capability names must not be empty")
        return value

    @field_validator("calendar")
    @classmethod
    def _calendar_to_utc(
        cls, value: list[tuple[datetime, datetime]]
    ) -> list[tuple[datetime, datetime]]:
        return [(ensure_utc(s), ensure_utc(e)) for s, e in value]


class RouteStepModel(_RequestModel):
    capability: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0)


class ProductModel(_RequestModel):
    id: str = Field(min_length=1)
    family: str = Field(min_length=1)
    due: datetime
    route: list[RouteStepModel] = Field(min_length=1)

    @field_validator("due")
    @classmethod
    def _due_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ChangeoverMatrixModel(_RequestModel):
    values: dict[str, int] = Field(default_factory=dict)

    @field_validator("values")
    @classmethod
    def _non_negative(cls, value: dict[str, int]) -> dict[str, int]:
        for key, minutes in value.items():
            if minutes < 0:
                raise ValueError(f"changeover {key!r} must be >= 0, got {minutes}")
        return value


class SettingsModel(_RequestModel):
    time_limit_seconds: float | None = Field(default=None, gt=0)


class ScheduleRequest(_RequestModel):
    """A complete scheduling request.

    Attributes:
        horizon: Scheduling window.
        resources: Machines/lines with capabilities and calendars.
        products: Jobs to schedule, each with a route of operations.
        changeover_matrix_minutes: Family-to-family setup times.
        settings: Run budget; the configured default applies when omitted.
    """
    horizon: HorizonModel
    resources: list[ResourceModel] = Field(min_length=1)
    products: list[ProductModel] = Field(default_factory=list)
    changeover_matrix_minutes: ChangeoverMatrixModel = Field(
        default_factory=ChangeoverMatrixModel
    )
    settings: SettingsModel = Field(default_factory=SettingsModel)

    def time_limit(self, default: float = DEFAULT_TIME_LIMIT_SECONDS) -> float:
        """Requested time limit, or ``default`` when none was given."""
        if self.settings.time_limit_seconds is None:
            return default
        return self.settings.time_limit_seconds


def parse_request(payload: Any) -> ScheduleRequest:
    """Validate a decoded JSON/YAML payload against the request schema.

    Raises:
        pydantic.ValidationError: If the payload is malformed.
    """
    if isinstance(payload, ScheduleRequest):
        return payload
    return ScheduleRequest.model_validate(payload)


def format_schema_errors(exc: SchemaValidationError) -> list[str]:
    """Render pydantic errors as ``path: message`` lines."""
    lines = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        lines.append(f"{path}: {error['msg']}" if path else error["msg"])
    return lines
