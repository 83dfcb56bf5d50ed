"""Tests for the scheduling run end to end."""

import pytest

from production_scheduler.errors import (
    HorizonExceededError,
    IterationCapExceededError,
    PrecedenceDeadlockError,
)
from production_scheduler.intervals import is_within_calendar
from production_scheduler.models import SchedulableOperation
from production_scheduler.normalizer import normalize_request
from production_scheduler.operation_pool import OperationPool
from production_scheduler.scheduler import SchedulingRun, schedule, schedule_payload
from production_scheduler.schemas import parse_request
from production_scheduler.solution import FailureResult, SuccessResult

from conftest import at, resource, product, build_problem


class FakeClock:
    """Advances a fixed number of seconds on every read."""

    def __init__(self, step):
        self.now = 0.0
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


class TestScenarios:
    """Small hand-checked problems."""

    def test_single_operation_starts_at_horizon_start(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'])],
            [product('P1', 'A', at('12:00'), ('fill', 30))],
        )
        result = schedule(payload)

        assert result.success
        assert len(result.assignments) == 1
        a = result.assignments[0]
        assert (a.product, a.operation, a.resource) == ('P1', 'fill', 'Fill-1')
        assert (a.start, a.end) == (at('08:00'), at('08:30'))
        assert result.kpis.tardiness_minutes == 0
        assert result.kpis.on_time_jobs == 1

    def test_changeover_between_families(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'])],
            [
                product('P1', 'A', at('14:00'), ('fill', 30)),
                product('P2', 'B', at('15:00'), ('fill', 30)),
            ],
            changeovers={'A->B': 30, 'B->A': 30},
        )
        result = schedule(payload)

        assert result.success
        first, second = result.internal
        assert second.start - first.end >= 30
        assert result.kpis.changeovers == 1

    def test_missing_capability(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'])],
            [product('P1', 'A', at('14:00'), ('fill', 30), ('label', 10))],
        )
        result = schedule(payload)

        assert not result.success
        assert result.error == 'no_eligible_resource'
        assert 'P1' in result.why[0]
        assert 'step 1' in result.why[0]

    def test_operation_longer_than_any_window(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'], [[at('08:00'), at('09:00')]])],
            [product('P1', 'A', at('14:00'), ('fill', 90))],
        )
        result = schedule(payload)

        assert not result.success
        assert result.error == 'cannot_place'
        assert 'P1' in result.why[0]
        assert any('largest gap 60min' in line for line in result.why)
        assert any('Fill-1: no free window' in line for line in result.why)

    @pytest.mark.parametrize('duration, expected_end', [(120, '12:00'), (60, '11:00')])
    def test_family_switch_across_calendar_break(self, make_request, duration, expected_end):
        payload = make_request(
            [resource('Fill-1', ['fill'], [
                [at('08:00'), at('09:00')],
                [at('10:00'), at('12:00')],
            ])],
            [
                product('P1', 'A', at('09:00'), ('fill', 60)),
                product('P2', 'B', at('12:00'), ('fill', duration)),
            ],
            changeovers={'A->B': 30},
        )
        result = schedule(payload)

        assert result.success
        second = result.assignments[1]
        assert (second.product, second.start, second.end) == ('P2', at('10:00'), at(expected_end))
        assert result.kpis.changeovers == 1

    def test_changeover_blocks_free_slot(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'], [[at('08:00'), at('09:00')]])],
            [
                product('P1', 'A', at('08:30'), ('fill', 30)),
                product('P2', 'B', at('09:00'), ('fill', 30)),
            ],
            changeovers={'A->B': 10, 'B->A': 10},
        )
        result = schedule(payload)

        assert result.error == 'cannot_place'
        assert any('changeover blocks the free slot at 30min' in line for line in result.why)


class TestSampleSchedule:
    """Hard constraints on the four-product sample."""

    @pytest.fixture
    def outcome(self, sample_request):
        problem = normalize_request(parse_request(sample_request))
        return schedule(sample_request), problem

    def test_all_operations_scheduled(self, outcome):
        result, problem = outcome
        assert isinstance(result, SuccessResult)
        assert result.version == '1.0.0'
        assert len(result.assignments) == sum(len(p.route) for p in problem.products)
        assert result.kpis.total_jobs == 4

    def test_output_sorted_by_start(self, outcome):
        result, _ = outcome
        starts = [a.start for a in result.assignments]
        assert starts == sorted(starts)
        assert all(s.endswith('Z') for s in starts)

    def test_no_overlap_and_changeover_bound(self, outcome):
        result, problem = outcome
        by_resource = {}
        for a in result.internal:
            by_resource.setdefault(a.resource_id, []).append(a)
        for items in by_resource.values():
            items.sort(key=lambda a: a.start)
            for prev, nxt in zip(items, items[1:]):
                assert nxt.start >= prev.end
                if prev.family != nxt.family:
                    needed = problem.changeovers.lookup(prev.family, nxt.family)
                    assert nxt.start - prev.end >= needed

    def test_precedence(self, outcome):
        result, _ = outcome
        by_product = {}
        for a in result.internal:
            by_product.setdefault(a.product_id, []).append(a)
        for items in by_product.values():
            items.sort(key=lambda a: a.step_index)
            for prev, nxt in zip(items, items[1:]):
                assert nxt.start >= prev.end

    def test_calendar_and_horizon_containment(self, outcome):
        result, problem = outcome
        for a in result.internal:
            assert is_within_calendar(a.start, a.end, problem.resources[a.resource_id].calendar)
            assert 0 <= a.start and a.end <= problem.horizon_length

    def test_kpi_consistency(self, outcome):
        result, problem = outcome
        completions = {}
        for a in result.internal:
            completions[a.product_id] = max(completions.get(a.product_id, 0), a.end)
        late = sum(1 for p in problem.products if completions[p.id] > p.due)

        kpis = result.kpis
        assert kpis.on_time_jobs + late == kpis.total_jobs
        assert kpis.makespan_minutes == (
            max(a.end for a in result.internal) - min(a.start for a in result.internal)
        )
        assert set(kpis.utilization) == {'Fill-1', 'Fill-2', 'Label-1', 'Pack-1'}

    def test_deterministic(self, sample_request):
        assert schedule(sample_request).to_dict() == schedule(sample_request).to_dict()


class TestEmptyInput:
    def test_no_products(self, make_request):
        result = schedule(make_request([resource('Fill-1', ['fill'])], []))

        assert result.success
        assert result.to_dict()['assignments'] == []
        assert result.kpis.to_dict() == {
            'tardiness_minutes': 0,
            'changeovers': 0,
            'makespan_minutes': 0,
            'utilization': {},
            'on_time_jobs': 0,
            'total_jobs': 0,
        }


class TestBudgets:
    """Deadline and iteration cap."""

    def test_deadline_exceeded(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill'])],
            [
                product('P1', 'A', at('12:00'), ('fill', 30)),
                product('P2', 'A', at('13:00'), ('fill', 30)),
            ],
            time_limit=15,
        )
        result = schedule(payload, clock=FakeClock(10.0))

        assert result.error == 'deadline_exceeded'
        assert '15s' in result.why[0]
        assert result.why[1] == '1 operation(s) placed, 1 remaining'

    def test_iteration_cap_exceeded(self):
        problem = build_problem(
            {'R1': (['fill'], [(0, 480)])},
            [('P1', 'A', 100, [('fill', 10), ('fill', 10)])],
        )
        run = SchedulingRun(problem)
        run.max_iterations = 1

        with pytest.raises(IterationCapExceededError) as excinfo:
            run.run()
        assert excinfo.value.category == 'iteration_cap_exceeded'
        assert excinfo.value.placed == 1
        assert excinfo.value.remaining == 1

    def test_iteration_cap_from_factor(self):
        problem = build_problem(
            {'R1': (['fill'], [(0, 480)])},
            [('P1', 'A', 100, [('fill', 10), ('fill', 10)])],
            iteration_factor=3,
        )
        assert SchedulingRun(problem).max_iterations == 6


class TestInfeasibility:
    def test_precedence_deadlock(self):
        problem = build_problem({'R1': (['fill'], [(0, 480)])}, [])
        run = SchedulingRun(problem)
        run.pool = OperationPool([SchedulableOperation('P1', 1, 'fill', 10, 'A', 100)])

        with pytest.raises(PrecedenceDeadlockError) as excinfo:
            run.step()
        assert 'Product P1, step 1' in excinfo.value.why[1]

    def test_horizon_exceeded(self):
        # Calendar deliberately extends past the horizon
        problem = build_problem(
            {'R1': (['fill'], [(0, 600)])},
            [('P1', 'A', 100, [('fill', 500)])],
            horizon_length=480,
        )
        with pytest.raises(HorizonExceededError) as excinfo:
            SchedulingRun(problem).run()
        assert excinfo.value.product_id == 'P1'
        assert 'beyond horizon 480 min' in excinfo.value.why[0]

    def test_consistency_violation_reported(self, make_request, monkeypatch):
        monkeypatch.setattr(
            'production_scheduler.scheduler.validate_schedule',
            lambda assignments, problem: ['Resource Fill-1: overlap'],
        )
        payload = make_request(
            [resource('Fill-1', ['fill'])],
            [product('P1', 'A', at('12:00'), ('fill', 30))],
        )
        result = schedule(payload)

        assert result.error == 'validation_failed'
        assert result.why == ['Resource Fill-1: overlap']


class TestSchedulePayload:
    """Input validation in front of the engine."""

    def test_schema_error(self):
        result = schedule_payload({'horizon': {'start': 'yesterday'}})
        assert isinstance(result, FailureResult)
        assert result.error == 'invalid_input'
        assert result.why

    def test_duplicate_resource_ids(self, make_request):
        payload = make_request(
            [resource('Fill-1', ['fill']), resource('Fill-1', ['label'])],
            [],
        )
        result = schedule_payload(payload)
        assert result.error == 'invalid_input'
        assert result.why[0].startswith('resources.1.id')

    def test_horizon_end_before_start(self, make_request):
        payload = make_request([resource('Fill-1', ['fill'])], [],
                               start=at('16:00'), end=at('08:00'))
        result = schedule_payload(payload)
        assert result.error == 'invalid_input'
        assert result.why[0].startswith('horizon.end')

    def test_valid_payload_scheduled(self, sample_request):
        assert schedule_payload(sample_request).success
