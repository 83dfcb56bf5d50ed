"""Tests for the placement search."""

from production_scheduler.models import Assignment, ChangeoverMatrix, SchedulableOperation
from production_scheduler.placement import find_placement, projected_tardiness
from production_scheduler.resources import create_resource_pool

from conftest import build_problem


def make_op(family='B', duration=30, due=1000, earliest_start=0, capability='fill'):
    return SchedulableOperation('P9', 0, capability, duration, family, due, earliest_start)


def busy(resource_id, family, start, end, product_id='P0'):
    return Assignment(product_id, 0, family, 'fill', resource_id, start, end)


def search(problem, op, existing=(), changeovers=None):
    resource_pool = create_resource_pool(problem.resources)
    for a in existing:
        resource_pool.record(a)
    eligible = resource_pool.eligible_resources(op.capability)
    return find_placement(op, eligible, resource_pool, ChangeoverMatrix(changeovers or {}))


class TestFindPlacement:
    """Gap search with calendars and per-gap changeovers."""

    def test_empty_resource_starts_at_earliest_start(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        result = search(problem, make_op(earliest_start=15))
        assert result.found
        assert (result.placement.resource_id, result.placement.start,
                result.placement.end) == ('R1', 15, 45)
        assert result.placement.changeover == 0

    def test_changeover_after_different_family(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        result = search(
            problem, make_op(family='B'),
            existing=[busy('R1', 'A', 0, 60)],
            changeovers={'A->B': 30},
        )
        assert result.placement.start == 90
        assert result.placement.changeover == 30

    def test_same_family_needs_no_changeover(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        result = search(
            problem, make_op(family='A'),
            existing=[busy('R1', 'A', 0, 60)],
            changeovers={'A->B': 30},
        )
        assert result.placement.start == 60

    def test_insert_into_earlier_gap(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        result = search(
            problem, make_op(family='B', duration=30),
            existing=[busy('R1', 'A', 100, 130)],
            changeovers={'B->A': 20, 'A->B': 20},
        )
        # 0-30 leaves 70 minutes before the A job, more than the 20 needed
        assert (result.placement.start, result.placement.end) == (0, 30)

    def test_gap_must_leave_room_for_following_changeover(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        result = search(
            problem, make_op(family='B', duration=70),
            existing=[busy('R1', 'A', 100, 130)],
            changeovers={'B->A': 40, 'A->B': 10},
        )
        # 0-70 would leave only 30 of the 40 minutes before the A job
        assert (result.placement.start, result.placement.end) == (140, 210)

    def test_does_not_span_calendar_break(self):
        problem = build_problem({'R1': (['fill'], [(0, 240), (270, 480)])}, [])
        result = search(problem, make_op(duration=30, earliest_start=220))
        assert (result.placement.start, result.placement.end) == (270, 300)

    def test_calendar_break_covers_changeover(self):
        problem = build_problem({'R1': (['fill'], [(0, 60), (120, 240)])}, [])
        result = search(
            problem, make_op(family='B', duration=120),
            existing=[busy('R1', 'A', 0, 60)],
            changeovers={'A->B': 30},
        )
        # The 60-minute break already exceeds the 30-minute setup
        assert (result.placement.start, result.placement.end) == (120, 240)
        assert result.placement.changeover == 0

    def test_short_break_counts_toward_changeover(self):
        problem = build_problem({'R1': (['fill'], [(0, 60), (70, 240)])}, [])
        result = search(
            problem, make_op(family='B', duration=60),
            existing=[busy('R1', 'A', 0, 60)],
            changeovers={'A->B': 30},
        )
        assert (result.placement.start, result.placement.end) == (90, 150)
        assert result.placement.changeover == 20

    def test_changeover_charged_in_full_within_window(self):
        problem = build_problem({'R1': (['fill'], [(0, 60), (120, 240)])}, [])
        result = search(
            problem, make_op(family='B', duration=30, earliest_start=130),
            existing=[busy('R1', 'A', 120, 130)],
            changeovers={'A->B': 30},
        )
        assert (result.placement.start, result.placement.changeover) == (160, 30)

    def test_picks_resource_with_earliest_end(self):
        problem = build_problem({
            'R1': (['fill'], [(0, 480)]),
            'R2': (['fill'], [(0, 480)]),
        }, [])
        result = search(problem, make_op(), existing=[busy('R1', 'B', 0, 200)])
        assert result.placement.resource_id == 'R2'
        assert result.candidates == 2

    def test_exact_tie_keeps_first_resource(self):
        problem = build_problem({
            'R1': (['fill'], [(0, 480)]),
            'R2': (['fill'], [(0, 480)]),
        }, [])
        result = search(problem, make_op())
        assert result.placement.resource_id == 'R1'

    def test_near_miss_reported_when_nothing_fits(self):
        problem = build_problem({'R1': (['fill'], [(0, 60)])}, [])
        result = search(problem, make_op(duration=90))
        assert not result.found
        near = result.near_miss
        assert (near.resource_id, near.gap, near.needed) == ('R1', 60, 90)
        assert "largest gap 60min" in near.describe()
        assert "needed 90min" in near.describe()

    def test_near_miss_counts_changeover(self):
        problem = build_problem({'R1': (['fill'], [(0, 100)])}, [])
        result = search(
            problem, make_op(family='B', duration=50),
            existing=[busy('R1', 'A', 0, 40)],
            changeovers={'A->B': 20},
        )
        assert not result.found
        assert result.near_miss.gap == 60
        assert result.near_miss.changeover == 20
        assert result.near_miss.needed == 70

    def test_projected_tardiness(self):
        assert projected_tardiness(100, 120) == 0
        assert projected_tardiness(150, 120) == 30
