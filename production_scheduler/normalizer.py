# Convert a validated request into minute-offset domain types.
# Version: 1.0.0
# Merges and clips calendars, converts due dates and flattens routes.

from datetime import datetime

from .config import EngineConfig
from .intervals import Interval, merge_intervals, clip_intervals
from .models import (
    RouteStep,
    NormalizedResource,
    NormalizedProduct,
    NormalizedProblem,
    ChangeoverMatrix,
)
from .schemas import ScheduleRequest, ResourceModel, ProductModel
from .time_utils import to_minute_offset


def normalize_request(
    request: ScheduleRequest,
    config: EngineConfig | None = None
) -> NormalizedProblem:
    """Normalize a validated request.

    Args:
        request: Request that passed schema and business-rule validation.
        config: Engine configuration supplying default budgets.

    Returns:
        NormalizedProblem with every time expressed in minutes from the
        horizon start.
    """
    config = config or EngineConfig()
    origin = request.horizon.start
    horizon_length = to_minute_offset(request.horizon.end, origin)

    resources = {}
    for resource in request.resources:
        resources[resource.id] = normalize_resource(resource, origin, horizon_length)

    products = [normalize_product(p, origin) for p in request.products]

    return NormalizedProblem(
        horizon_start=origin,
        horizon_length=horizon_length,
        resources=resources,
        products=products,
        changeovers=ChangeoverMatrix(request.changeover_matrix_minutes.values),
        time_limit_seconds=request.time_limit(config.default_time_limit_seconds),
        iteration_factor=config.iteration_factor,
    )


def normalize_resource(
    resource: ResourceModel,
    origin: datetime,
    horizon_length: int
) -> NormalizedResource:
    """Convert a resource calendar to merged windows inside ``[0, horizon_length]``."""
    raw = [
        Interval(to_minute_offset(start, origin), to_minute_offset(end, origin))
        for start, end in resource.calendar
    ]
    calendar = clip_intervals(merge_intervals(raw), 0, horizon_length)

    return NormalizedResource(
        id=resource.id,
        capabilities=frozenset(resource.capabilities),
        calendar=tuple(calendar),
    )


def normalize_product(product: ProductModel, origin: datetime) -> NormalizedProduct:
    return NormalizedProduct(
        id=product.id,
        family=product.family,
        due=to_minute_offset(product.due, origin),
        route=tuple(
            RouteStep(capability=step.capability, duration=step.duration_minutes)
            for step in product.route
        ),
    )
