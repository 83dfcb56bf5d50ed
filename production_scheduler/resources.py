# Per-resource state during a scheduling run.
# Version: 1.0.0
# Tracks ordered assignments per resource and answers eligibility queries.

from dataclasses import dataclass, field

from .intervals import Interval
from .models import NormalizedResource, Assignment


@dataclass
class ResourceState:
    """Mutable schedule of one resource.

    Attributes:
        resource_id: Resource identifier.
        assignments: Assignments sorted by start.
        last_family: Family of the most recently recorded assignment.
            Bookkeeping only; gap search derives the preceding family
            from ``assignments``.
    """
    resource_id: str
    assignments: list[Assignment] = field(default_factory=list)
    last_family: str | None = None

    def record(self, assignment: Assignment) -> None:
        """Add an assignment and keep the list ordered by start."""
        self.assignments.append(assignment)
        self.assignments.sort(key=lambda a: a.start)
        self.last_family = assignment.family

    def occupied(self) -> list[Interval]:
        return [a.interval for a in self.assignments]


@dataclass
class ResourcePool:
    """Resources of a run together with their mutable states.

    Attributes:
        resources: Normalized resources keyed by id, in request order.
        states: ResourceState per resource id.
    """
    resources: dict[str, NormalizedResource] = field(default_factory=dict)
    states: dict[str, ResourceState] = field(default_factory=dict)

    def eligible_resources(self, capability: str) -> list[NormalizedResource]:
        """Resources offering ``capability``, in request order."""
        return [r for r in self.resources.values() if r.can_run(capability)]

    def state(self, resource_id: str) -> ResourceState:
        return self.states[resource_id]

    def record(self, assignment: Assignment) -> None:
        self.states[assignment.resource_id].record(assignment)


def create_resource_pool(resources: dict[str, NormalizedResource]) -> ResourcePool:
    """Create a pool with an empty state for every resource."""
    return ResourcePool(
        resources=dict(resources),
        states={rid: ResourceState(resource_id=rid) for rid in resources},
    )
