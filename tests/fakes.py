"""
Hand-written stand-ins for the optimizer, its process and the clock.
Nothing here touches the network, starts a process or sleeps.
"""

import subprocess
from datetime import date, time
from typing import List, Optional

from app.models import (
    Schedule, Student, Course, CourseEnrollmentRequest, Teacher, Room,
    PeriodTimer, LunchPeriod, DistrictSettings, JobStatus, JobStatusReport
)
from app.core.config import SchedulerSettings
from app.services.export_mapper import ScheduleExportMapper
from app.services.generation_service import ScheduleGenerationService
from app.services.job_orchestrator import JobOrchestrator
from app.services.repository import InMemoryScheduleRepository
from app.services.result_reconciler import ResultReconciler
from app.services.schedule_importer import ScheduleImporter


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeClient:
    """
    Scripted optimizer client.

    health and statuses are consumed in order; the last entry repeats once the list
    runs out. A status entry that is an exception instance is raised instead of returned.
    """

    def __init__(self, health=None, statuses=None, job_id: str = "job-1",
                 submit_error: Optional[Exception] = None, solution: Optional[dict] = None,
                 base_url: str = "http://localhost:8090", port: int = 8090):
        self.health = list(health) if health is not None else [True]
        self.statuses = list(statuses or [])
        self.job_id = job_id
        self.submit_error = submit_error
        self.solution = solution or {"scheduleSlots": [], "hardScore": 0, "softScore": 0}
        self.base_url = base_url
        self.port = port
        self.health_checks = 0
        self.submitted = []
        self.status_calls = 0
        self.imported = []
        self.exported_jobs = []

    @staticmethod
    def _next(items):
        return items.pop(0) if len(items) > 1 else items[0]

    def is_healthy(self) -> bool:
        self.health_checks += 1
        return self._next(self.health)

    def submit(self, request) -> str:
        self.submitted.append(request)
        if self.submit_error is not None:
            raise self.submit_error
        return self.job_id

    def get_status(self, job_id: str) -> JobStatusReport:
        self.status_calls += 1
        item = self._next(self.statuses)
        if isinstance(item, Exception):
            raise item
        return item

    def import_data(self, payload) -> str:
        self.imported.append(payload)
        return "import-1"

    def export_schedule(self, job_id: str) -> dict:
        self.exported_jobs.append(job_id)
        return self.solution


def report(status: Optional[JobStatus], hard: Optional[int] = None, soft: Optional[int] = None,
           raw: Optional[str] = None, elapsed: Optional[float] = None) -> JobStatusReport:
    return JobStatusReport(
        status=status,
        raw_status=raw if raw is not None else (status.value if status else "???"),
        hard_score=hard,
        soft_score=soft,
        elapsed_seconds=elapsed
    )


class FakeProcess:
    """Popen look-alike. exit_code None means still running."""

    def __init__(self, pid: int = 4242, exit_code: Optional[int] = None, ignores_terminate: bool = False):
        self.pid = pid
        self.exit_code = exit_code
        self.ignores_terminate = ignores_terminate
        self.terminated = False
        self.killed = False
        self.wait_calls = 0

    def poll(self):
        return self.exit_code

    def terminate(self):
        self.terminated = True
        if not self.ignores_terminate:
            self.exit_code = -15

    def kill(self):
        self.killed = True
        self.exit_code = -9

    def wait(self, timeout=None):
        self.wait_calls += 1
        if self.exit_code is None:
            raise subprocess.TimeoutExpired("optimizer", timeout)
        return self.exit_code


class FakePopen:
    """Records launch commands and hands out a prepared FakeProcess."""

    def __init__(self, process: Optional[FakeProcess] = None, error: Optional[Exception] = None):
        self.process = process or FakeProcess()
        self.error = error
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        if self.error is not None:
            raise self.error
        return self.process


class FakeSupervisor:
    def __init__(self, running: bool = True):
        self.running = running
        self.last_error = None
        self.ensure_calls = 0
        self.stopped = False
        self.process = None

    def ensure_running(self) -> bool:
        self.ensure_calls += 1
        return self.running

    def is_running(self) -> bool:
        return False

    def stop(self) -> None:
        self.stopped = True


def build_repository(students_per_course: int = 0) -> InMemoryScheduleRepository:
    """
    A small school: one schedule, a handful of courses, two teachers, three rooms.

    When students_per_course is set, that many students each request Algebra 1.
    """
    courses = [
        Course(id=1, code="MATH101", name="Algebra 1", subject="Mathematics",
               max_students=30, core_required=True, min_grade_level=9, max_grade_level=10),
        Course(id=2, code="MATH201", name="Algebra 2", subject="Mathematics", max_students=30),
        Course(id=3, code="APCALC", name="AP Calculus", subject="Mathematics", max_students=25),
        Course(id=4, code="CALC", name="Calculus", subject="Mathematics", max_students=25),
        Course(id=5, code="CHEM1", name="Chemistry Lab", subject="Science", max_students=24),
        Course(id=6, code="ART1", name="Studio Art", subject="Art", max_students=20, min_grade_level=11),
        Course(id=7, code="LIFE1", name="Life Skills", subject="Special Programs", max_students=10),
        Course(id=8, code="OLD1", name="Retired Course", subject="History", active=False),
    ]

    students = [
        Student(id=i, student_number=f"S{i:04d}", first_name="Student", last_name=str(i), grade_level="9")
        for i in range(1, students_per_course + 1)
    ]
    requests = [
        CourseEnrollmentRequest(id=i, student_id=i, course_id=1, preference_rank=1)
        for i in range(1, students_per_course + 1)
    ]

    teachers = [
        Teacher(id=1, employee_number="T001", first_name="Ada", last_name="Lovelace",
                department="Mathematics", certifications=["Mathematics"], max_periods_per_day=5),
        Teacher(id=2, employee_number="T002", first_name="Marie", last_name="Curie",
                department="SCIENCE", certifications=["special ed"], contract_type="Part-Time"),
        Teacher(id=3, employee_number="T003", first_name="Gone", last_name="Teacher", active=False),
    ]

    rooms = [
        Room(id=1, room_number="101", room_type="STANDARD_CLASSROOM", capacity=30),
        Room(id=2, room_number="SCI-LAB 2", room_type="SCIENCE_LAB", capacity=24,
             equipment="fume hood, sinks"),
        Room(id=3, room_number="Gym", room_type="GYM", capacity=60),
    ]

    period_timers = [
        PeriodTimer(id=1, period_name="Period 1", period_number=1,
                    start_time=time(8, 0), end_time=time(8, 50)),
        PeriodTimer(id=2, period_name="Period 2", period_number=2,
                    start_time=time(9, 0), end_time=time(9, 50), days_of_week="MON,TUE,WED,THU,FRI"),
        PeriodTimer(id=3, period_name="Lunch", period_number=-1,
                    start_time=time(11, 30), end_time=time(12, 0)),
        PeriodTimer(id=4, period_name="Advisory", period_number=0,
                    start_time=time(12, 0), end_time=time(12, 20), days_of_week="WED"),
    ]

    lunch_periods = [
        LunchPeriod(id=1, name="Lunch A", start_time=time(11, 0), end_time=time(11, 30), display_order=1),
        LunchPeriod(id=2, name="Lunch B", start_time=time(11, 30), end_time=time(12, 0), display_order=2),
    ]

    schedules = [
        Schedule(id=1, name="Fall 2026", start_date=date(2026, 8, 17), end_date=date(2027, 5, 28)),
        Schedule(id=2, name="Fall 2026 (alt)", start_date=date(2026, 8, 17), end_date=date(2027, 5, 28)),
    ]

    return InMemoryScheduleRepository(
        schedules=schedules,
        students=students,
        courses=courses,
        enrollment_requests=requests,
        teachers=teachers,
        rooms=rooms,
        period_timers=period_timers,
        lunch_periods=lunch_periods,
        district_settings=DistrictSettings(district_name="Unified District")
    )


def build_service(running: bool = True, statuses=None, client=None, solution=None, **settings_overrides):
    """
    A generation service over the sample repository with a scripted optimizer.

    Returns:
        (service, repository, client, supervisor)
    """
    values = dict(enabled=True, default_optimization_seconds=120, poll_interval_seconds=5,
                  poll_grace_seconds=0, export_mode="pull")
    values.update(settings_overrides)
    settings = SchedulerSettings(**values)

    repo = build_repository(students_per_course=4)
    client = client or FakeClient(statuses=statuses or [report(JobStatus.SUCCEEDED, 0, -42)], solution=solution)
    supervisor = FakeSupervisor(running=running)
    clock = FakeClock()
    service = ScheduleGenerationService(
        repository=repo,
        client=client,
        supervisor=supervisor,
        orchestrator=JobOrchestrator(client, supervisor, settings, sleep=clock.sleep, clock=clock),
        mapper=ScheduleExportMapper(repo, export_mode=settings.export_mode),
        reconciler=ResultReconciler(ScheduleImporter(repo, client), repo),
        settings=settings
    )
    return service, repo, client, supervisor
