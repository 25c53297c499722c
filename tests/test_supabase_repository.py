"""
Tests for the Supabase repository against an in-memory query builder.
"""

import sys
import os
from datetime import date, time

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models import CourseSection, Schedule, ScheduleSlot
from app.services.supabase_repository import SupabaseScheduleRepository


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the select/insert/update/delete + eq chains the repository uses."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.row = None
        self.filters = []

    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, row):
        self.action, self.row = "insert", row
        return self

    def update(self, row):
        self.action, self.row = "update", row
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        rows = self.db.setdefault(self.table, [])
        if self.action == "insert":
            row = dict(self.row, id=len(rows) + 1)
            rows.append(row)
            return FakeResponse([row])
        matched = [row for row in rows if self._matches(row)]
        if self.action == "update":
            for row in matched:
                row.update(self.row)
        elif self.action == "delete":
            self.db[self.table] = [row for row in rows if not self._matches(row)]
        return FakeResponse(matched)


class FakeSupabase:
    def __init__(self, tables):
        self.tables = tables

    def table(self, name):
        return FakeQuery(self.tables, name)


def make_repository():
    tables = {
        "schedules": [
            {"id": 1, "schedule_name": "Spring 2027", "start_date": "2027-01-11",
             "end_date": "05/28/2027", "status": "DRAFT"},
        ],
        "teachers": [
            {"id": 1, "employee_id": "T9", "first_name": "Grace", "last_name": "Hopper",
             "certifications": "Mathematics, Computer Science", "active": True},
        ],
        "period_timers": [
            {"id": 1, "period_name": "Period 1", "period_number": 1,
             "start_time": "08:00:00", "end_time": "08:50", "active": True},
            {"id": 2, "period_name": "Broken", "period_number": 2,
             "start_time": "soon", "end_time": "09:50"},
            {"id": 3, "period_name": "Period 3", "period_number": 3,
             "start_time": "01:00 PM", "end_time": "01:50 PM"},
        ],
        "district_settings": [
            {"district_name": "Unified District", "periods_per_day": 7,
             "grading_periods": [
                 {"name": "Q1", "start_date": "2026-08-17", "end_date": "2026-10-16"},
                 {"name": "Q2", "start_date": None, "end_date": "2026-12-18"},
             ]},
        ],
        "course_sections": [],
        "schedule_slots": [],
    }
    return SupabaseScheduleRepository(client=FakeSupabase(tables)), tables


def test_reads_schedule_with_mixed_date_formats():
    print("Testing schedule read...")

    repo, tables = make_repository()
    schedule = repo.get_schedule(1)

    assert schedule.name == "Spring 2027"
    assert schedule.start_date == date(2027, 1, 11)
    assert schedule.end_date == date(2027, 5, 28)
    assert repo.get_schedule(2) is None

    print("[PASS] Schedule read test passed")


def test_teacher_certifications_from_comma_list():
    repo, tables = make_repository()
    teacher = repo.list_teachers()[0]

    assert teacher.employee_number == "T9"
    assert teacher.certifications == ["Mathematics", "Computer Science"]


def test_unparseable_periods_are_skipped():
    repo, tables = make_repository()
    periods = repo.list_period_timers()

    assert [p.id for p in periods] == [1, 3]
    assert periods[0].end_time == time(8, 50)
    assert periods[1].start_time == time(13, 0)


def test_district_settings_drop_incomplete_grading_periods():
    repo, tables = make_repository()
    settings = repo.get_district_settings()

    assert settings.district_name == "Unified District"
    assert settings.periods_per_day == 7
    assert [g.name for g in settings.grading_periods] == ["Q1"]


def test_refresh_picks_up_rows_added_after_first_read():
    repo, tables = make_repository()
    tables["courses"] = [{"id": 1, "course_code": "MATH101", "course_name": "Algebra 1"}]

    assert len(repo.list_courses()) == 1

    tables["courses"].append({"id": 2, "course_code": "BIO1", "course_name": "Biology"})
    assert repo.get_course(2) is None

    repo.refresh()
    assert [c.id for c in repo.list_courses()] == [1, 2]
    assert repo.get_course(2).name == "Biology"


def test_writes_sections_slots_and_scores():
    print("Testing repository writes...")

    repo, tables = make_repository()

    section = repo.save_section(CourseSection(id=None, course_id=4, section_number="1",
                                              teacher_id=1, room_id=2, period_number=1))
    assert section.id == 1
    assert repo.list_sections_for_course(4)[0].section_number == "1"

    repo.save_slot(ScheduleSlot(id=None, schedule_id=1, course_id=4, teacher_id=1,
                                room_id=2, period_number=1, section_id=section.id))
    assert len(repo.list_slots(1)) == 1
    assert repo.delete_slots(1) == 1
    assert repo.list_slots(1) == []

    schedule = repo.get_schedule(1)
    schedule.hard_score, schedule.soft_score = 0, -12
    repo.save_schedule(schedule)
    assert tables["schedules"][0]["soft_score"] == -12

    print("[PASS] Repository write test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Supabase Repository Tests")
    print("=" * 60 + "\n")

    test_reads_schedule_with_mixed_date_formats()
    test_teacher_certifications_from_comma_list()
    test_unparseable_periods_are_skipped()
    test_district_settings_drop_incomplete_grading_periods()
    test_refresh_picks_up_rows_added_after_first_read()
    test_writes_sections_slots_and_scores()

    print("\n" + "=" * 60)
    print("All tests passed!")
    print("=" * 60 + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(run_all_tests())
