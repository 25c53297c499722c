"""
Wire schema of the data snapshot handed to the optimizer.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class SchoolInfo(PayloadModel):
    school_name: str
    district_name: str
    campus_name: str


class GradingPeriodEntry(PayloadModel):
    id: int
    name: str
    period_type: str
    period_number: int
    start_date: date
    end_date: date
    instructional_days: int


class AcademicConfig(PayloadModel):
    academic_year: Optional[str] = None
    school_year_start_date: Optional[date] = None
    school_year_end_date: Optional[date] = None
    schedule_type: str
    instructional_days_per_week: int
    periods_per_day: int
    grading_periods: List[GradingPeriodEntry] = Field(default_factory=list)


class CourseRequestEntry(PayloadModel):
    course_id: int
    course_code: str
    course_name: str
    preference_rank: int
    priority_score: int
    is_required: bool
    is_alternate: bool
    primary_course_id: Optional[int] = None


class StudentRequest(PayloadModel):
    student_id: int
    student_number: str
    first_name: str
    last_name: str
    grade_level: int
    assigned_lunch_period: Optional[int] = None
    has_iep: bool = Field(default=False, alias="hasIEP")
    has_504_plan: bool = False
    special_accommodations: List[str] = Field(default_factory=list)
    completed_course_ids: List[int] = Field(default_factory=list)
    course_requests: List[CourseRequestEntry] = Field(default_factory=list)


class CourseCatalogEntry(PayloadModel):
    course_id: int
    course_code: str
    course_name: str
    department: str
    subject_area: Optional[str] = None
    grade_level: int
    credits: float
    sections_needed: int
    max_students_per_section: int
    min_students_per_section: int
    total_demand: int
    required_certifications: List[str] = Field(default_factory=list)
    required_room_types: List[str] = Field(default_factory=list)
    required_equipment: List[str] = Field(default_factory=list)
    periods_required: int
    allow_during_lunch: bool = False
    is_advanced: bool = False
    is_special_education: bool = False
    prerequisite_course_ids: List[int] = Field(default_factory=list)
    priority: int


class TeacherAvailability(PayloadModel):
    teacher_id: int
    employee_number: str
    first_name: str
    last_name: str
    full_name: str
    department: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    qualified_course_ids: List[int] = Field(default_factory=list)
    max_sections: int
    max_preps: int
    max_total_students: int
    planning_periods_required: int = 1
    unavailable_slots: List[int] = Field(default_factory=list)
    preferred_slots: List[int] = Field(default_factory=list)
    is_part_time: bool = False
    preferred_room_id: Optional[int] = None
    co_teacher_ids: List[int] = Field(default_factory=list)


class RoomAvailability(PayloadModel):
    room_id: int
    room_number: str
    building_name: Optional[str] = None
    room_type: str
    capacity: Optional[int] = None
    equipment: List[str] = Field(default_factory=list)
    assigned_departments: List[str] = Field(default_factory=list)
    is_accessible: bool = False
    is_available: bool = True
    unavailable_slots: List[int] = Field(default_factory=list)
    pinned_course_ids: List[int] = Field(default_factory=list)


class TimeSlotEntry(PayloadModel):
    time_slot_id: int
    period_name: str
    period_number: int
    start_time: time
    end_time: time
    duration_minutes: int
    day_of_week: int
    is_lunch_period: bool
    is_passing_period: bool = False
    is_planning_period: bool = False
    is_instructional_period: bool


class LunchPeriodEntry(PayloadModel):
    lunch_period_id: int
    name: str
    wave_number: int
    start_time: time
    end_time: time
    duration_minutes: int
    max_capacity: Optional[int] = None
    current_assigned_count: Optional[int] = None
    assigned_grade_levels: Optional[str] = None
    is_primary: bool = False


class ConstraintConfig(PayloadModel):
    # Hard constraints
    enforce_no_student_conflicts: bool = True
    enforce_no_teacher_conflicts: bool = True
    enforce_no_room_conflicts: bool = True
    enforce_teacher_qualifications: bool = True
    enforce_room_requirements: bool = True
    enforce_prerequisites: bool = True
    enforce_lunch_assignment: bool = True
    # Soft constraint weights (relative, not percentages)
    student_preference_weight: int = Field(gt=0)
    teacher_travel_weight: int = Field(gt=0)
    schedule_compactness_weight: int = Field(gt=0)
    section_balance_weight: int = Field(gt=0)
    teacher_preference_weight: int = Field(gt=0)
    grade_level_clustering_weight: int = Field(gt=0)
    department_clustering_weight: int = Field(gt=0)
    lunch_continuity_weight: int = Field(gt=0)
    # Optimization settings
    max_optimization_time_seconds: int
    target_score_threshold: int = 0
    enable_advanced_optimization: bool = True
    enable_parallel_optimization: bool = True
    optimization_threads: int
    # Scheduling preferences
    prefer_early_advanced_courses: bool = True
    prefer_late_electives: bool = False
    prefer_consecutive_sections: bool = True
    minimize_student_travel: bool = True


class PreAssignedSection(PayloadModel):
    course_id: int
    section_number: str
    teacher_id: Optional[int] = None
    room_id: Optional[int] = None
    time_slot_id: Optional[int] = None


class ExportMetadata(PayloadModel):
    export_id: str
    schedule_id: int
    export_timestamp: datetime
    sis_version: str
    exported_by: str
    exported_by_user_id: Optional[int] = None
    total_students: int
    total_course_requests: int
    total_courses: int
    total_teachers: int
    total_rooms: int
    total_time_slots: int
    notes: str


class ExportPayload(PayloadModel):
    school_info: SchoolInfo
    academic_config: AcademicConfig
    student_requests: List[StudentRequest] = Field(default_factory=list)
    courses: List[CourseCatalogEntry] = Field(default_factory=list)
    teachers: List[TeacherAvailability] = Field(default_factory=list)
    rooms: List[RoomAvailability] = Field(default_factory=list)
    time_slots: List[TimeSlotEntry] = Field(default_factory=list)
    lunch_periods: List[LunchPeriodEntry] = Field(default_factory=list)
    constraints: ConstraintConfig
    pre_assigned_sections: List[PreAssignedSection] = Field(default_factory=list)
    metadata: ExportMetadata
