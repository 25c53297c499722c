"""
Read/write access to the system of record.
The optimizer bridge only talks to storage through ScheduleRepository.
"""

from abc import ABC, abstractmethod
from itertools import count
from typing import Dict, List, Optional

from app.models import (
    Schedule, Student, Course, CourseEnrollmentRequest, Teacher, Room,
    PeriodTimer, LunchPeriod, DistrictSettings, CourseSection, ScheduleSlot
)


class ScheduleRepository(ABC):

    # Reads

    @abstractmethod
    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        ...

    @abstractmethod
    def list_students(self) -> List[Student]:
        ...

    @abstractmethod
    def list_courses(self) -> List[Course]:
        ...

    @abstractmethod
    def list_enrollment_requests(self) -> List[CourseEnrollmentRequest]:
        ...

    @abstractmethod
    def list_teachers(self) -> List[Teacher]:
        ...

    @abstractmethod
    def list_rooms(self) -> List[Room]:
        ...

    @abstractmethod
    def list_period_timers(self) -> List[PeriodTimer]:
        ...

    @abstractmethod
    def list_lunch_periods(self) -> List[LunchPeriod]:
        ...

    @abstractmethod
    def get_district_settings(self) -> DistrictSettings:
        ...

    @abstractmethod
    def list_sections_for_course(self, course_id: int) -> List[CourseSection]:
        ...

    @abstractmethod
    def list_slots(self, schedule_id: int) -> List[ScheduleSlot]:
        ...

    # Writes

    @abstractmethod
    def save_schedule(self, schedule: Schedule) -> Schedule:
        ...

    @abstractmethod
    def save_section(self, section: CourseSection) -> CourseSection:
        ...

    @abstractmethod
    def save_slot(self, slot: ScheduleSlot) -> ScheduleSlot:
        ...

    @abstractmethod
    def delete_slots(self, schedule_id: int) -> int:
        ...

    def refresh(self) -> None:
        """Drop any cached reference data so the next reads see the live tables."""

    # Lookups built on the list methods

    def get_course(self, course_id: int) -> Optional[Course]:
        return next((c for c in self.list_courses() if c.id == course_id), None)

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        return next((t for t in self.list_teachers() if t.id == teacher_id), None)

    def get_room(self, room_id: int) -> Optional[Room]:
        return next((r for r in self.list_rooms() if r.id == room_id), None)

    def get_period_timer(self, period_id: int) -> Optional[PeriodTimer]:
        return next((p for p in self.list_period_timers() if p.id == period_id), None)


class InMemoryScheduleRepository(ScheduleRepository):
    """Dictionary-backed repository used by tests and local runs."""

    def __init__(self,
                 schedules: Optional[List[Schedule]] = None,
                 students: Optional[List[Student]] = None,
                 courses: Optional[List[Course]] = None,
                 enrollment_requests: Optional[List[CourseEnrollmentRequest]] = None,
                 teachers: Optional[List[Teacher]] = None,
                 rooms: Optional[List[Room]] = None,
                 period_timers: Optional[List[PeriodTimer]] = None,
                 lunch_periods: Optional[List[LunchPeriod]] = None,
                 district_settings: Optional[DistrictSettings] = None):
        self.schedules: Dict[int, Schedule] = {s.id: s for s in schedules or []}
        self.students = list(students or [])
        self.courses = list(courses or [])
        self.enrollment_requests = list(enrollment_requests or [])
        self.teachers = list(teachers or [])
        self.rooms = list(rooms or [])
        self.period_timers = list(period_timers or [])
        self.lunch_periods = list(lunch_periods or [])
        self.district_settings = district_settings or DistrictSettings()
        self.sections: Dict[int, CourseSection] = {}
        self.slots: Dict[int, ScheduleSlot] = {}
        self._section_ids = count(1)
        self._slot_ids = count(1)

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        return self.schedules.get(schedule_id)

    def list_students(self) -> List[Student]:
        return list(self.students)

    def list_courses(self) -> List[Course]:
        return list(self.courses)

    def list_enrollment_requests(self) -> List[CourseEnrollmentRequest]:
        return list(self.enrollment_requests)

    def list_teachers(self) -> List[Teacher]:
        return list(self.teachers)

    def list_rooms(self) -> List[Room]:
        return list(self.rooms)

    def list_period_timers(self) -> List[PeriodTimer]:
        return list(self.period_timers)

    def list_lunch_periods(self) -> List[LunchPeriod]:
        return list(self.lunch_periods)

    def get_district_settings(self) -> DistrictSettings:
        return self.district_settings

    def list_sections_for_course(self, course_id: int) -> List[CourseSection]:
        return [s for s in self.sections.values() if s.course_id == course_id]

    def list_slots(self, schedule_id: int) -> List[ScheduleSlot]:
        return [s for s in self.slots.values() if s.schedule_id == schedule_id]

    def save_schedule(self, schedule: Schedule) -> Schedule:
        self.schedules[schedule.id] = schedule
        return schedule

    def save_section(self, section: CourseSection) -> CourseSection:
        if section.id is None:
            section.id = next(self._section_ids)
        self.sections[section.id] = section
        return section

    def save_slot(self, slot: ScheduleSlot) -> ScheduleSlot:
        if slot.id is None:
            slot.id = next(self._slot_ids)
        self.slots[slot.id] = slot
        return slot

    def delete_slots(self, schedule_id: int) -> int:
        doomed = [slot_id for slot_id, slot in self.slots.items() if slot.schedule_id == schedule_id]
        for slot_id in doomed:
            del self.slots[slot_id]
        return len(doomed)
