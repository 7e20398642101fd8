"""
Tests for the Dispatcher run loop.

Every test runs on a SimulatedClock, so backoff and service delays cost
nothing and every timestamp is exact.
"""

from collections import defaultdict

import pytest

from jobs.process_model import RandomProcessModel
from models.enums import FailReason, JobStatus
from models.errors import ConfigurationError
from scheduler.engine import Dispatcher
from worker.clock import SimulatedClock
from worker.observers import RunObserver


def _dispatcher(model, clock, collector, jobs, max_retries=2, **kwargs):
    return Dispatcher(
        process_model=model,
        jobs=jobs,
        max_retries=max_retries,
        clock=clock,
        observers=[collector],
        run_id="test-run",
        **kwargs,
    )


def test_fail_fail_succeed_retry_history(clock, collector, scripted_model):
    """Attempts 0 and 1 fail, attempt 2 succeeds: three events, priority aging by one each time."""
    model = scripted_model(priorities=[4], failures=[True, True, False], service_ms=50)
    summary = _dispatcher(model, clock, collector, jobs=1, max_retries=2).run()

    events = [e for e in collector.attempts if e.external_id == 1]
    assert len(events) == 3
    assert [e.attempt for e in events] == [0, 1, 2]
    assert [e.priority for e in events] == [4, 5, 6]
    assert [e.status for e in events] == [JobStatus.FAILED, JobStatus.FAILED, JobStatus.SUCCESS]
    assert [e.fail_reason for e in events] == [
        FailReason.SIMULATED_FAILURE, FailReason.SIMULATED_FAILURE, FailReason.NONE,
    ]

    # enqueue → (backoff) → start → service → end, all on the virtual clock
    assert [(e.enqueue_timestamp, e.start_timestamp, e.end_timestamp) for e in events] == [
        (0, 0, 50),
        (50, 150, 200),
        (200, 400, 450),
    ]
    assert [e.wait_ms for e in events] == [0, 100, 200]
    assert [e.turnaround_ms for e in events] == [50, 150, 250]

    assert summary.successes == 1
    assert summary.terminal_failures == 0
    assert summary.started_at == 0
    assert summary.finished_at == 450
    assert summary.avg_wait_ms == 200.0
    assert summary.avg_service_ms == 50.0
    assert summary.avg_turnaround_ms == 250.0
    assert summary.throughput_jobs_per_second == pytest.approx(1 / 0.45)


def test_zero_retries_goes_straight_to_terminal_failure(clock, collector, scripted_model):
    model = scripted_model(failures=[True, True, True])
    dispatcher = _dispatcher(model, clock, collector, jobs=3, max_retries=0)

    summary = dispatcher.run()

    assert dispatcher.attempts_executed == 3
    assert dispatcher.queue.size() == 0
    assert len(collector.attempts) == 3
    assert all(e.status == JobStatus.FAILED and e.attempt == 0 for e in collector.attempts)
    assert summary.total_jobs == 3
    assert summary.successes == 0
    assert summary.terminal_failures == 3
    assert summary.throughput_jobs_per_second == 0.0


def test_empty_run(clock, collector, scripted_model):
    summary = _dispatcher(scripted_model(), clock, collector, jobs=0).run()

    assert collector.attempts == []
    assert collector.started == [("test-run", 0)]
    assert collector.summaries == [summary]
    assert summary.total_jobs == 0
    assert summary.avg_wait_ms == 0.0
    assert summary.avg_service_ms == 0.0
    assert summary.avg_turnaround_ms == 0.0
    assert summary.throughput_jobs_per_second == 0.0


def test_dispatch_order_follows_priority_then_seed_order(clock, collector, scripted_model):
    model = scripted_model(priorities=[3, 9, 5, 9])
    _dispatcher(model, clock, collector, jobs=4).run()

    assert [e.external_id for e in collector.attempts] == [2, 4, 3, 1]


def test_aged_retry_jumps_ahead_of_same_band(clock, collector, scripted_model):
    """Job 1 fails at priority 5, comes back at 6, and runs before job 2 (still 5)."""
    model = scripted_model(priorities=[5, 5], failures=[True, False, False])
    _dispatcher(model, clock, collector, jobs=2, max_retries=1).run()

    assert [(e.external_id, e.attempt) for e in collector.attempts] == [(1, 0), (1, 1), (2, 0)]


def test_priority_never_exceeds_ten(clock, collector, scripted_model):
    model = scripted_model(priorities=[10], failures=[True, True, True, False])
    _dispatcher(model, clock, collector, jobs=1, max_retries=3).run()

    assert [e.priority for e in collector.attempts] == [10, 10, 10, 10]


def test_exhausted_job_is_not_requeued(clock, collector, scripted_model):
    model = scripted_model(failures=[True, True, True])
    dispatcher = _dispatcher(model, clock, collector, jobs=1, max_retries=2)

    summary = dispatcher.run()

    assert dispatcher.attempts_executed == 3
    assert [e.attempt for e in collector.attempts] == [0, 1, 2]
    assert dispatcher.completed[0].status == JobStatus.FAILED
    assert dispatcher.completed[0].attempt == 2
    assert summary.terminal_failures == 1
    # the final failed attempt's timings count toward the averages
    assert summary.avg_turnaround_ms == collector.attempts[-1].turnaround_ms


def test_wall_clock_is_sum_of_backoff_and_service(clock, collector, scripted_model):
    model = scripted_model(priorities=[5, 5], failures=[True, False, False], service_ms=100)
    summary = _dispatcher(model, clock, collector, jobs=2, max_retries=2).run()

    # 3 attempts x 100ms service + one 100ms backoff
    assert summary.finished_at - summary.started_at == 400
    assert clock.slept_ms == 400


def test_seeded_runs_are_reproducible():
    def run_once():
        collected = []

        class Keep(RunObserver):
            def attempt_completed(self, event):
                collected.append(event)

        summary = Dispatcher(
            process_model=RandomProcessModel(300, 100, seed=7),
            jobs=25,
            max_retries=2,
            clock=SimulatedClock(),
            observers=[Keep()],
            run_id="same",
        ).run()
        return collected, summary

    events_a, summary_a = run_once()
    events_b, summary_b = run_once()

    assert events_a == events_b
    assert summary_a == summary_b


def test_random_run_invariants(clock, collector):
    max_retries = 3
    dispatcher = _dispatcher(
        RandomProcessModel(300, 100, seed=123), clock, collector,
        jobs=200, max_retries=max_retries,
    )
    summary = dispatcher.run()

    by_job = defaultdict(list)
    for event in collector.attempts:
        assert 0 <= event.attempt <= max_retries
        assert 1 <= event.priority <= 10
        assert event.turnaround_ms == event.end_timestamp - event.enqueue_timestamp
        assert event.wait_ms == event.start_timestamp - event.enqueue_timestamp
        assert event.wait_ms >= 0
        by_job[event.external_id].append(event)

    # every seeded job reached exactly one terminal state
    assert sorted(j.external_id for j in dispatcher.completed) == list(range(1, 201))
    assert summary.total_jobs == summary.successes + summary.terminal_failures == 200
    assert dispatcher.queue.size() == 0

    for external_id, events in by_job.items():
        assert [e.attempt for e in events] == list(range(len(events)))
        priorities = [e.priority for e in events]
        assert priorities == sorted(priorities)
        # only the last attempt may be a success
        assert all(e.status == JobStatus.FAILED for e in events[:-1])

    successes = sum(1 for j in dispatcher.completed if j.status == JobStatus.SUCCESS)
    assert successes == summary.successes
    assert len(collector.attempts) == dispatcher.attempts_executed


def test_negative_jobs_rejected(clock, scripted_model):
    with pytest.raises(ConfigurationError):
        Dispatcher(process_model=scripted_model(), jobs=-1, max_retries=2, clock=clock)


def test_negative_max_retries_rejected(clock, scripted_model):
    with pytest.raises(ConfigurationError):
        Dispatcher(process_model=scripted_model(), jobs=1, max_retries=-1, clock=clock)


def test_run_only_once(clock, collector, scripted_model):
    dispatcher = _dispatcher(scripted_model(), clock, collector, jobs=1)
    dispatcher.run()

    with pytest.raises(RuntimeError):
        dispatcher.run()


def test_observer_failure_aborts_run(clock, scripted_model):
    class Broken(RunObserver):
        def attempt_completed(self, event):
            raise OSError("disk full")

    dispatcher = Dispatcher(
        process_model=scripted_model(), jobs=2, max_retries=0,
        clock=clock, observers=[Broken()],
    )
    with pytest.raises(OSError):
        dispatcher.run()
    assert dispatcher.summary is None


def test_default_run_id_is_generated(clock, scripted_model):
    a = Dispatcher(process_model=scripted_model(), jobs=0, max_retries=0, clock=clock)
    b = Dispatcher(process_model=scripted_model(), jobs=0, max_retries=0, clock=clock)
    assert a.run_id != b.run_id


def test_seed_timestamps_record_seed_order(clock, collector, scripted_model):
    """Seeded jobs are stamped 1ms apart ending at the run start, in external_id order."""
    clock.sleep_ms(1000)
    model = scripted_model(priorities=[5, 5, 5, 5])
    summary = _dispatcher(model, clock, collector, jobs=4).run()

    enqueued = {e.external_id: e.enqueue_timestamp for e in collector.attempts}
    assert [enqueued[i] for i in (1, 2, 3, 4)] == [997, 998, 999, 1000]
    assert summary.started_at == 1000
    assert all(e.wait_ms >= 0 for e in collector.attempts)
