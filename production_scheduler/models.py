# Domain types used during a scheduling run.
# Version: 1.0.0
# Normalized inputs, schedulable operations, assignments and changeover lookup.

from dataclasses import dataclass, field
from datetime import datetime

from .constants import CHANGEOVER_KEY_SEPARATOR
from .intervals import Interval, total_length


@dataclass(frozen=True)
class RouteStep:
    """One entry of a product route.

    Attributes:
        capability: Capability a resource needs to run this step.
        duration: Processing time in minutes.
    """
    capability: str
    duration: int


@dataclass(frozen=True)
class NormalizedResource:
    """A resource with its calendar in minute offsets.

    Attributes:
        id: Unique resource identifier.
        capabilities: Capabilities the resource offers.
        calendar: Merged, clipped, sorted working windows.
    """
    id: str
    capabilities: frozenset[str]
    calendar: tuple[Interval, ...]

    @property
    def capacity(self) -> int:
        """Total working minutes inside the horizon."""
        return total_length(self.calendar)

    def can_run(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class NormalizedProduct:
    """A product with its due date in minute offsets.

    Attributes:
        id: Unique product identifier.
        family: Product family, drives changeovers.
        due: Due date as minutes from horizon start (may be negative).
        route: Ordered steps; step i+1 cannot start before step i ends.
    """
    id: str
    family: str
    due: int
    route: tuple[RouteStep, ...]


class ChangeoverMatrix:
    """Lookup of setup minutes between two product families.

    Keys are ``"from->to"``; entries are not assumed symmetric. A missing
    pair means no changeover is required.
    """

    def __init__(self, values: dict[str, int] | None = None) -> None:
        self._values: dict[tuple[str, str], int] = {}
        for key, minutes in (values or {}).items():
            pair = split_changeover_key(key)
            if pair is not None:
                self._values[pair] = int(minutes)

    def lookup(self, previous_family: str | None, next_family: str) -> int:
        """Minutes of setup before ``next_family`` when ``previous_family`` ran last.

        Returns 0 when nothing ran before or the pair is not listed.
        """
        if not previous_family:
            return 0
        return self._values.get((previous_family, next_family), 0)

    def has_pair(self, previous_family: str, next_family: str) -> bool:
        return (previous_family, next_family) in self._values

    def missing_pairs(self, families: list[str]) -> list[tuple[str, str]]:
        """Ordered family pairs that differ and have no matrix entry."""
        unique = list(dict.fromkeys(families))
        return [
            (a, b)
            for a in unique
            for b in unique
            if a != b and not self.has_pair(a, b)
        ]

    def __len__(self) -> int:
        return len(self._values)


def split_changeover_key(key: str) -> tuple[str, str] | None:
    """Split ``"A->B"`` into ``("A", "B")``; None if the key is malformed."""
    parts = key.split(CHANGEOVER_KEY_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


@dataclass
class SchedulableOperation:
    """A route step waiting in the operation pool.

    ``earliest_start`` is raised to the end of the prior step once that
    step has been placed.

    Attributes:
        product_id: Owning product.
        step_index: Position in the product route (0-based).
        capability: Required capability.
        duration: Minutes of processing.
        family: Product family.
        due: Product due date (minutes).
        earliest_start: Earliest allowed start (minutes).
    """
    product_id: str
    step_index: int
    capability: str
    duration: int
    family: str
    due: int
    earliest_start: int = 0

    @property
    def key(self) -> tuple[str, int]:
        return (self.product_id, self.step_index)

    @property
    def label(self) -> str:
        """Human-readable reference used in diagnostics."""
        return f"Product {self.product_id}, step {self.step_index} ({self.capability})"


@dataclass(frozen=True)
class Assignment:
    """An operation placed on a resource.

    Attributes:
        product_id: Owning product.
        step_index: Route position.
        family: Product family.
        operation_name: Capability name of the step.
        resource_id: Resource running the operation.
        start: Start offset in minutes.
        end: End offset in minutes (``start + duration``).
    """
    product_id: str
    step_index: int
    family: str
    operation_name: str
    resource_id: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass(frozen=True)
class NormalizedProblem:
    """Everything a run needs, in minute offsets.

    Attributes:
        horizon_start: Absolute origin of all offsets.
        horizon_length: Minutes in the horizon; upper bound for every end.
        resources: Resources keyed by id, in request order.
        products: Products in request order.
        changeovers: Changeover lookup.
        time_limit_seconds: Wall-clock budget for the run.
        iteration_factor: Iteration cap multiplier.
    """
    horizon_start: datetime
    horizon_length: int
    resources: dict[str, NormalizedResource]
    products: list[NormalizedProduct]
    changeovers: ChangeoverMatrix
    time_limit_seconds: float
    iteration_factor: int
    product_index: dict[str, NormalizedProduct] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.product_index:
            self.product_index.update({p.id: p for p in self.products})

    def product(self, product_id: str) -> NormalizedProduct:
        return self.product_index[product_id]
