"""
Tests for job submission and polling.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.config import SchedulerSettings
from app.core.errors import (
    ErrorKind, JobRejectedError, JobTimeoutError, OptimizerApiError, OptimizerUnreachableError
)
from app.models import JobStatus, OptimizationJob, OptimizationMode, OptimizationRequest
from app.services.job_orchestrator import JobOrchestrator
from fakes import FakeClient, FakeClock, FakeSupervisor, report


def make_orchestrator(statuses=None, running=True, submit_error=None, grace=0):
    client = FakeClient(statuses=statuses or [report(JobStatus.SUCCEEDED, 0, -10)], submit_error=submit_error)
    supervisor = FakeSupervisor(running=running)
    clock = FakeClock()
    orchestrator = JobOrchestrator(
        client, supervisor, SchedulerSettings(poll_grace_seconds=grace), sleep=clock.sleep, clock=clock
    )
    return orchestrator, client, supervisor, clock


def make_request(budget=10, interval=2):
    return OptimizationRequest(schedule_id=1, time_budget_seconds=budget, poll_interval_seconds=interval)


def test_job_status_transitions_are_monotonic():
    print("Testing job state machine...")

    job = OptimizationJob(job_id="job-1")
    assert job.advance(JobStatus.SUBMITTED)
    assert job.advance(JobStatus.RUNNING)
    assert not job.advance(JobStatus.SUBMITTED)
    assert job.status == JobStatus.RUNNING
    assert job.advance(JobStatus.SUCCEEDED)
    # Terminal states are final
    assert not job.advance(JobStatus.FAILED)
    assert not job.advance(JobStatus.RUNNING)
    assert job.status == JobStatus.SUCCEEDED

    rejected = OptimizationJob()
    assert rejected.advance(JobStatus.REJECTED)
    assert rejected.status.is_terminal

    print("[PASS] State machine test passed")


def test_successful_run():
    print("Testing successful job...")

    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[
        report(JobStatus.SUBMITTED),
        report(JobStatus.RUNNING, -2, -50),
        report(JobStatus.SUCCEEDED, 0, -12, elapsed=6.5),
    ])

    result = orchestrator.run(make_request())

    assert result.success
    assert result.job_id == "job-1"
    assert result.hard_score == 0
    assert result.soft_score == -12
    assert result.elapsed_seconds == 6.5
    assert result.error_kind is None
    assert client.status_calls == 3
    assert clock.sleeps == [2, 2, 2]
    assert client.submitted[0].optimization_mode == OptimizationMode.BALANCED

    print("[PASS] Successful job test passed")


def test_timeout_when_job_never_finishes():
    """A job stuck in RUNNING past the budget times out instead of hanging."""
    print("Testing poll timeout...")

    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[report(JobStatus.RUNNING)])

    result = orchestrator.run(make_request(budget=10, interval=2))

    assert not result.success
    assert result.error_kind == ErrorKind.TIMEOUT
    assert result.job_id == "job-1"
    assert result.status == JobStatus.RUNNING
    assert result.elapsed_seconds == 10
    assert client.status_calls == 5

    print("[PASS] Timeout test passed")


def test_poll_until_complete_raises_timeout():
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[report(JobStatus.RUNNING)], grace=4)
    job = OptimizationJob(job_id="job-9", status=JobStatus.SUBMITTED)

    try:
        orchestrator.poll_until_complete(job, 2, 6)
        assert False, "expected JobTimeoutError"
    except JobTimeoutError as e:
        assert e.job_id == "job-9"
        assert e.elapsed_seconds == 10


def test_last_poll_stops_at_deadline():
    """An interval that does not divide the budget shortens the last sleep."""
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[report(JobStatus.RUNNING)])

    result = orchestrator.run(make_request(budget=10, interval=7))

    assert result.error_kind == ErrorKind.TIMEOUT
    assert clock.sleeps == [7, 3]
    assert result.elapsed_seconds == 10
    assert client.status_calls == 2


def test_unexpected_poll_error_does_not_escape_run():
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[
        RuntimeError("status decoder broke"),
    ])

    result = orchestrator.run(make_request())

    assert not result.success
    assert result.job_id == "job-1"
    assert result.status == JobStatus.SUBMITTED
    assert result.error_kind is None
    assert "status decoder broke" in result.message


def test_regressing_status_is_ignored():
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[
        report(JobStatus.RUNNING),
        report(JobStatus.SUBMITTED),
        report(JobStatus.RUNNING),
        report(JobStatus.SUCCEEDED, 0, 0),
    ])
    job = OptimizationJob(job_id="job-1", status=JobStatus.SUBMITTED)

    orchestrator.poll_until_complete(job, 1, 60)

    assert job.status == JobStatus.SUCCEEDED
    assert client.status_calls == 4


def test_poll_errors_are_tolerated():
    print("Testing poll error tolerance...")

    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[
        OptimizerApiError("502 from optimizer", status_code=502),
        OptimizerUnreachableError("connection reset"),
        report(None, raw="WARMING_UP"),
        report(JobStatus.SUCCEEDED, 0, -3),
    ])

    result = orchestrator.run(make_request(budget=60))

    assert result.success
    assert result.soft_score == -3
    assert client.status_calls == 4

    print("[PASS] Poll error tolerance test passed")


def test_rejection_while_polling_is_terminal():
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[
        report(JobStatus.RUNNING),
        JobRejectedError("unknown job id"),
        report(JobStatus.SUCCEEDED),
    ])

    result = orchestrator.run(make_request(budget=60))

    assert not result.success
    assert result.status == JobStatus.REJECTED
    assert result.error_kind == ErrorKind.REJECTED
    assert result.message == "unknown job id"
    assert client.status_calls == 2


def test_failed_job_reports_optimizer_status():
    orchestrator, client, supervisor, clock = make_orchestrator(statuses=[report(JobStatus.FAILED, -5, -100)])

    result = orchestrator.run(make_request())

    assert not result.success
    assert result.status == JobStatus.FAILED
    assert result.hard_score == -5


def test_submit_against_unreachable_optimizer():
    print("Testing submit with optimizer down...")

    orchestrator, client, supervisor, clock = make_orchestrator(running=False)

    try:
        orchestrator.submit(make_request())
        assert False, "expected OptimizerUnreachableError"
    except JobRejectedError as e:
        assert isinstance(e, OptimizerUnreachableError)
        assert "not available" in e.detail

    result = orchestrator.run(make_request())
    assert not result.success
    assert result.job_id is None
    assert result.status == JobStatus.REJECTED
    assert result.error_kind == ErrorKind.UNREACHABLE
    assert client.submitted == []

    print("[PASS] Unreachable submit test passed")


def test_submit_rejected_by_optimizer():
    orchestrator, client, supervisor, clock = make_orchestrator(
        submit_error=JobRejectedError("optimizationTimeSeconds must be positive")
    )

    result = orchestrator.run(make_request())

    assert not result.success
    assert result.error_kind == ErrorKind.REJECTED
    assert "must be positive" in result.message
    assert client.status_calls == 0


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Job Orchestrator Tests")
    print("=" * 60 + "\n")

    test_job_status_transitions_are_monotonic()
    test_successful_run()
    test_timeout_when_job_never_finishes()
    test_poll_until_complete_raises_timeout()
    test_last_poll_stops_at_deadline()
    test_unexpected_poll_error_does_not_escape_run()
    test_regressing_status_is_ignored()
    test_poll_errors_are_tolerated()
    test_rejection_while_polling_is_terminal()
    test_failed_job_reports_optimizer_status()
    test_submit_against_unreachable_optimizer()
    test_submit_rejected_by_optimizer()

    print("\n" + "=" * 60)
    print("All tests passed!")
    print("=" * 60 + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(run_all_tests())
