"""
Domain records for the schedule optimizer bridge.
These mirror the rows the repository reads from and writes to the system of record.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional


@dataclass
class Schedule:
    id: int
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    schedule_type: Optional[str] = None
    status: str = "DRAFT"
    quality_score: Optional[float] = None
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    total_conflicts: Optional[int] = None
    requires_manual_review: bool = False
    last_modified_by: Optional[str] = None
    last_modified_date: Optional[date] = None


@dataclass
class Student:
    id: int
    student_number: str
    first_name: str
    last_name: str
    grade_level: Optional[str] = None
    active: bool = True
    has_iep: bool = False
    has_504_plan: bool = False


@dataclass
class Course:
    id: int
    code: str
    name: str
    subject: Optional[str] = None
    active: bool = True
    max_students: Optional[int] = None
    min_students: Optional[int] = None
    core_required: bool = False
    credits: Optional[float] = None
    min_grade_level: Optional[int] = None
    max_grade_level: Optional[int] = None
    required_room_type: Optional[str] = None
    sessions_per_week: Optional[int] = None


@dataclass
class CourseEnrollmentRequest:
    id: int
    student_id: int
    course_id: Optional[int]
    preference_rank: Optional[int] = None
    priority_score: Optional[int] = None
    status: str = "PENDING"


@dataclass
class Teacher:
    id: int
    employee_number: str
    first_name: str
    last_name: str
    department: Optional[str] = None
    certifications: List[str] = field(default_factory=list)
    active: bool = True
    max_periods_per_day: Optional[int] = None
    max_courses_per_day: Optional[int] = None
    contract_type: Optional[str] = None
    home_room_id: Optional[int] = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Room:
    id: int
    room_number: str
    building: Optional[str] = None
    room_type: Optional[str] = None
    capacity: Optional[int] = None
    equipment: Optional[str] = None
    active: bool = True
    wheelchair_accessible: bool = False
    available: bool = True


@dataclass
class PeriodTimer:
    id: int
    period_name: str
    period_number: int
    start_time: time
    end_time: time
    days_of_week: Optional[str] = None
    active: bool = True

    @property
    def duration_minutes(self) -> int:
        start = datetime.combine(date.min, self.start_time)
        end = datetime.combine(date.min, self.end_time)
        return int((end - start).total_seconds() // 60)


@dataclass
class LunchPeriod:
    id: int
    name: str
    start_time: time
    end_time: time
    display_order: Optional[int] = None
    max_capacity: Optional[int] = None
    current_count: Optional[int] = None
    grade_levels: Optional[str] = None
    active: bool = True

    @property
    def duration_minutes(self) -> int:
        start = datetime.combine(date.min, self.start_time)
        end = datetime.combine(date.min, self.end_time)
        return int((end - start).total_seconds() // 60)


@dataclass
class GradingPeriod:
    id: int
    name: str
    period_type: str
    period_number: int
    start_date: date
    end_date: date
    instructional_days: int


@dataclass
class DistrictSettings:
    district_name: Optional[str] = None
    campus_name: Optional[str] = None
    schedule_type: Optional[str] = None
    instructional_days_per_week: Optional[int] = None
    periods_per_day: Optional[int] = None
    grading_periods: List[GradingPeriod] = field(default_factory=list)
    student_preference_weight: Optional[int] = None
    teacher_travel_weight: Optional[int] = None
    schedule_compactness_weight: Optional[int] = None
    section_balance_weight: Optional[int] = None
    teacher_preference_weight: Optional[int] = None
    grade_level_clustering_weight: Optional[int] = None
    department_clustering_weight: Optional[int] = None
    lunch_continuity_weight: Optional[int] = None
    max_optimization_time_seconds: Optional[int] = None
    enable_advanced_optimization: Optional[bool] = None
    optimization_threads: Optional[int] = None

    def district_name_or_default(self) -> str:
        return self.district_name or "School District"

    def campus_name_or_default(self) -> str:
        return self.campus_name or "Main Campus"

    def schedule_type_or_default(self) -> str:
        return self.schedule_type or "TRADITIONAL"


@dataclass
class CourseSection:
    id: Optional[int]
    course_id: int
    section_number: str
    teacher_id: Optional[int] = None
    room_id: Optional[int] = None
    period_number: Optional[int] = None
    max_enrollment: int = 30
    current_enrollment: int = 0
    status: str = "SCHEDULED"


@dataclass
class ScheduleSlot:
    id: Optional[int]
    schedule_id: int
    course_id: int
    teacher_id: int
    room_id: int
    period_number: int
    section_id: Optional[int] = None
