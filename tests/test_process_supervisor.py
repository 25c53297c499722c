"""
Tests for the optimizer process supervisor.
Uses a fake Popen, a fake clock and a scripted health probe.
"""

import sys
import os
from pathlib import Path

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.config import SchedulerSettings
from app.core.errors import ErrorKind
from app.services.process_supervisor import OptimizerProcessSupervisor
from fakes import FakeClient, FakeClock, FakePopen, FakeProcess

EXECUTABLE = os.path.abspath(__file__)


def make_settings(**overrides):
    values = dict(
        auto_start=True,
        executable_path=EXECUTABLE,
        launcher_path="java",
        startup_timeout_seconds=10,
        health_check_interval_seconds=2,
        shutdown_grace_seconds=1,
    )
    values.update(overrides)
    return SchedulerSettings(**values)


def make_supervisor(health, process=None, popen_error=None, **overrides):
    client = FakeClient(health=health)
    popen = FakePopen(process=process, error=popen_error)
    clock = FakeClock()
    supervisor = OptimizerProcessSupervisor(
        client, make_settings(**overrides), popen=popen, sleep=clock.sleep, clock=clock
    )
    return supervisor, client, popen, clock


def test_healthy_on_first_probe_after_launch():
    """start() returns as soon as the first health check after launch succeeds."""
    print("Testing launch with immediate health...")

    supervisor, client, popen, clock = make_supervisor(health=[False, False, True])

    assert supervisor.ensure_running()
    assert len(popen.calls) == 1
    assert clock.sleeps == []
    assert clock.now < 10

    command, kwargs = popen.calls[0]
    assert command == [EXECUTABLE, "--server.port=8090"]
    assert kwargs["stdout"] is None and kwargs["stderr"] is None

    assert supervisor.is_running()
    assert supervisor.process.pid == 4242
    assert supervisor.process.healthy

    print("[PASS] Immediate health test passed")


def test_already_running_optimizer_is_left_alone():
    supervisor, client, popen, clock = make_supervisor(health=[True])

    assert supervisor.ensure_running()
    assert popen.calls == []
    assert supervisor.process is None


def test_auto_start_disabled():
    print("Testing auto-start disabled...")

    supervisor, client, popen, clock = make_supervisor(health=[False], auto_start=False)

    assert not supervisor.ensure_running()
    assert popen.calls == []
    assert supervisor.last_error is None

    print("[PASS] Auto-start disabled test passed")


def test_missing_executable_is_misconfiguration():
    supervisor, client, popen, clock = make_supervisor(
        health=[False], executable_path="/nonexistent/optimizer.jar"
    )

    assert not supervisor.ensure_running()
    assert popen.calls == []

    supervisor, client, popen, clock = make_supervisor(health=[False], executable_path="")
    assert not supervisor.ensure_running()


def test_process_exits_before_healthy():
    print("Testing early process exit...")

    supervisor, client, popen, clock = make_supervisor(
        health=[False], process=FakeProcess(exit_code=1)
    )

    assert not supervisor.start()
    assert supervisor.last_error.kind == ErrorKind.PROCESS_LAUNCH_FAILED
    assert "exit code 1" in supervisor.last_error.detail
    assert supervisor.process is None
    assert not supervisor.is_running()

    print("[PASS] Early exit test passed")


def test_startup_timeout_stops_process():
    print("Testing startup timeout...")

    process = FakeProcess()
    supervisor, client, popen, clock = make_supervisor(health=[False], process=process)

    assert not supervisor.start()
    assert clock.now == 10
    assert all(s == 2 for s in clock.sleeps)
    assert process.terminated
    assert not supervisor.is_running()
    assert "did not become healthy" in supervisor.last_error.detail

    print("[PASS] Startup timeout test passed")


def test_launch_error_is_reported():
    supervisor, client, popen, clock = make_supervisor(
        health=[False], popen_error=PermissionError("not executable")
    )

    assert not supervisor.start()
    assert "not executable" in supervisor.last_error.detail
    assert supervisor.process is None


def test_start_is_idempotent_when_healthy():
    supervisor, client, popen, clock = make_supervisor(health=[False, False, True])

    assert supervisor.start()
    assert supervisor.start()
    assert len(popen.calls) == 1


def test_stop_is_idempotent():
    print("Testing stop()...")

    supervisor, client, popen, clock = make_supervisor(health=[False, False, True])

    # Nothing owned yet
    supervisor.stop()

    assert supervisor.start()
    process = popen.process

    supervisor.stop()
    supervisor.stop()

    assert process.terminated
    assert not process.killed
    assert process.wait_calls == 1
    assert supervisor.process is None

    print("[PASS] Stop idempotence test passed")


def test_stop_kills_process_that_ignores_terminate():
    process = FakeProcess(ignores_terminate=True)
    supervisor, client, popen, clock = make_supervisor(health=[False, False, True], process=process)

    assert supervisor.start()
    supervisor.stop()

    assert process.terminated
    assert process.killed


def test_stop_skips_process_that_already_exited():
    process = FakeProcess()
    supervisor, client, popen, clock = make_supervisor(health=[False, False, True], process=process)

    assert supervisor.start()
    process.exit_code = 0
    supervisor.stop()

    assert not process.terminated


def test_context_manager_releases_process():
    process = FakeProcess()
    supervisor, client, popen, clock = make_supervisor(health=[False, False, True], process=process)

    with supervisor:
        assert supervisor.start()

    assert process.terminated


def test_jar_artifacts_use_launcher():
    supervisor, client, popen, clock = make_supervisor(health=[True])

    command = supervisor.build_command(Path("/opt/optimizer/optimizer.jar"))
    assert command == ["java", "-jar", "/opt/optimizer/optimizer.jar", "--server.port=8090"]


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Process Supervisor Tests")
    print("=" * 60 + "\n")

    test_healthy_on_first_probe_after_launch()
    test_already_running_optimizer_is_left_alone()
    test_auto_start_disabled()
    test_missing_executable_is_misconfiguration()
    test_process_exits_before_healthy()
    test_startup_timeout_stops_process()
    test_launch_error_is_reported()
    test_start_is_idempotent_when_healthy()
    test_stop_is_idempotent()
    test_stop_kills_process_that_ignores_terminate()
    test_stop_skips_process_that_already_exited()
    test_context_manager_releases_process()
    test_jar_artifacts_use_launcher()

    print("\n" + "=" * 60)
    print("All tests passed!")
    print("=" * 60 + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(run_all_tests())
