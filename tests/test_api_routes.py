"""
Tests for the FastAPI routes with the generation service swapped for a scripted one.
"""

import sys
import os

from fastapi.testclient import TestClient

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.api import routes
from app.main import app
from app.models import JobStatus
from fakes import build_service, report

SOLUTION = {
    "scheduleSlots": [
        {"courseId": 1, "teacherId": 1, "roomId": 1, "timeSlotId": 1, "sectionNumber": "1",
         "enrolledStudentIds": [1, 2]},
    ],
    "hardScore": 0,
    "softScore": -7,
}


def make_client(**kwargs):
    kwargs.setdefault("solution", SOLUTION)
    service, repo, client, supervisor = build_service(**kwargs)
    app.dependency_overrides[routes.get_generation_service] = lambda: service
    return TestClient(app), service, repo


def teardown_function(function):
    app.dependency_overrides.clear()


def test_health():
    http, service, repo = make_client()
    response = http.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_scheduler_status():
    http, service, repo = make_client()
    body = http.get("/api/scheduler/status").json()

    assert body["enabled"]
    assert body["reachable"]
    assert not body["process_running"]
    assert body["pid"] is None
    assert body["export_mode"] == "pull"


def test_generate_schedule():
    print("Testing generate endpoint...")

    http, service, repo = make_client()
    response = http.post("/api/schedule/1/generate", json={"mode": "FULLY_AUTOMATED", "time_budget_seconds": 60})

    assert response.status_code == 200
    body = response.json()
    assert body["success"]
    assert body["mode"] == "FULLY_AUTOMATED"
    assert body["status"] == "SUCCEEDED"
    assert body["students_scheduled"] == 2
    assert body["validation"]["is_valid"]
    assert not body["requires_manual_review"]

    print("[PASS] Generate endpoint test passed")


def test_generate_without_body_uses_defaults():
    http, service, repo = make_client()
    body = http.post("/api/schedule/1/generate").json()

    assert body["success"]
    assert body["mode"] == "AI_ASSISTED"
    assert body["requires_manual_review"]


def test_generate_failure_is_not_http_error():
    http, service, repo = make_client(running=False)
    response = http.post("/api/schedule/1/generate")

    assert response.status_code == 200
    body = response.json()
    assert not body["success"]
    assert "not available" in body["message"]
    assert body["error_kind"] == "UNREACHABLE"


def test_generate_rejects_bad_mode():
    http, service, repo = make_client()
    response = http.post("/api/schedule/1/generate", json={"mode": "SOMETIMES"})

    assert response.status_code == 422


def test_generate_async_queues_task():
    http, service, repo = make_client()

    class QueuedTask:
        id = "task-77"

    class FakeTask:
        calls = []

        def delay(self, *args):
            self.calls.append(args)
            return QueuedTask()

    original = routes.generate_schedule_task
    routes.generate_schedule_task = FakeTask()
    try:
        response = http.post("/api/schedule/3/generate/async", json={"mode": "FULLY_AUTOMATED"})
    finally:
        routes.generate_schedule_task = original

    assert response.status_code == 200
    assert response.json()["task_id"] == "task-77"
    assert FakeTask.calls == [(3, "FULLY_AUTOMATED", None, None)]


def test_compare_schedules():
    print("Testing compare endpoint...")

    http, service, repo = make_client()
    repo.schedules[1].hard_score, repo.schedules[1].soft_score, repo.schedules[1].total_conflicts = 0, -5, 2
    repo.schedules[2].hard_score, repo.schedules[2].soft_score, repo.schedules[2].total_conflicts = -3, -90, 0

    response = http.post("/api/schedule/compare", json={"scheduleAId": 1, "scheduleBId": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["winner_id"] == 2
    assert not body["equivalent"]
    assert body["recommendation"] == "Use Fall 2026 (alt)"

    print("[PASS] Compare endpoint test passed")


def test_compare_unknown_schedule_is_404():
    http, service, repo = make_client()
    response = http.post("/api/schedule/compare", json={"scheduleAId": 1, "scheduleBId": 404})

    assert response.status_code == 404


def test_export_payload_for_pull_mode():
    http, service, repo = make_client()
    response = http.get("/api/scheduler/export/1")

    assert response.status_code == 200
    body = response.json()
    assert body["schoolInfo"]["schoolName"] == "Fall 2026"
    assert body["metadata"]["exportedBy"] == "Optimizer pull"
    assert len(body["studentRequests"]) == 4

    assert http.get("/api/scheduler/export/99").status_code == 404


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running API Route Tests")
    print("=" * 60 + "\n")

    tests = [
        test_health,
        test_scheduler_status,
        test_generate_schedule,
        test_generate_without_body_uses_defaults,
        test_generate_failure_is_not_http_error,
        test_generate_rejects_bad_mode,
        test_generate_async_queues_task,
        test_compare_schedules,
        test_compare_unknown_schedule_is_404,
        test_export_payload_for_pull_mode,
    ]
    for test in tests:
        try:
            test()
        finally:
            teardown_function(test)

    print("\n" + "=" * 60)
    print("All tests passed!")
    print("=" * 60 + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(run_all_tests())
