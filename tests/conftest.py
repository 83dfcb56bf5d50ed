"""Shared test fixtures for production scheduler tests."""

import copy
import json
import os
import sys

import pytest

# Add repository root to Python path
ROOT = os.path.join(os.path.dirname(__file__), '..')
sys.path.insert(0, ROOT)

from production_scheduler.config import EngineConfig
from production_scheduler.intervals import Interval
from production_scheduler.models import (
    ChangeoverMatrix,
    NormalizedProblem,
    NormalizedProduct,
    NormalizedResource,
    RouteStep,
)

HORIZON_START = "2025-11-03T08:00:00Z"
HORIZON_END = "2025-11-03T16:00:00Z"

with open(os.path.join(ROOT, 'data', 'sample_request.json')) as f:
    SAMPLE_REQUEST = json.load(f)


def at(hhmm: str) -> str:
    """Timestamp on the test day, e.g. ``at("12:30")``."""
    return f"2025-11-03T{hhmm}:00Z"


@pytest.fixture
def sample_request():
    """Four resources, four products of two families, 20-minute changeovers."""
    return copy.deepcopy(SAMPLE_REQUEST)


@pytest.fixture
def make_request():
    """Build a request payload with sensible defaults for the horizon."""
    def _make(resources, products, changeovers=None, time_limit=None,
              start=HORIZON_START, end=HORIZON_END):
        payload = {
            'horizon': {'start': start, 'end': end},
            'resources': resources,
            'products': products,
            'changeover_matrix_minutes': {'values': changeovers or {}},
        }
        if time_limit is not None:
            payload['settings'] = {'time_limit_seconds': time_limit}
        return payload
    return _make


def resource(rid, capabilities, calendar=None):
    return {
        'id': rid,
        'capabilities': list(capabilities),
        'calendar': calendar or [[HORIZON_START, HORIZON_END]],
    }


def product(pid, family, due, *steps):
    return {
        'id': pid,
        'family': family,
        'due': due,
        'route': [{'capability': c, 'duration_minutes': d} for c, d in steps],
    }


def build_problem(resources, products, changeovers=None, horizon_length=480,
                  time_limit_seconds=30.0, iteration_factor=5):
    """NormalizedProblem straight from minute offsets.

    ``resources`` maps id to (capabilities, [(start, end), ...]);
    ``products`` is a list of (id, family, due, [(capability, duration), ...]).
    """
    from datetime import datetime, timezone

    return NormalizedProblem(
        horizon_start=datetime(2025, 11, 3, 8, 0, tzinfo=timezone.utc),
        horizon_length=horizon_length,
        resources={
            rid: NormalizedResource(
                id=rid,
                capabilities=frozenset(caps),
                calendar=tuple(Interval(s, e) for s, e in windows),
            )
            for rid, (caps, windows) in resources.items()
        },
        products=[
            NormalizedProduct(
                id=pid,
                family=family,
                due=due,
                route=tuple(RouteStep(c, d) for c, d in steps),
            )
            for pid, family, due, steps in products
        ],
        changeovers=ChangeoverMatrix(changeovers or {}),
        time_limit_seconds=time_limit_seconds,
        iteration_factor=iteration_factor,
    )


@pytest.fixture
def engine_config():
    return EngineConfig()
