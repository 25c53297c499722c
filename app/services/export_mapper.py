"""
Export mapper: turns live SIS records into the optimizer's input payload.

Several fields the optimizer needs are not stored in the SIS and are derived here:
sections needed from request demand, teacher-to-course qualifications from
certifications, room-to-department affinity and course scheduling priority.
The derivation rules are part of the optimizer contract and must stay stable.
"""

import math
import re
import uuid
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from app.core.config import (
    DEFAULT_MAX_STUDENTS_PER_SECTION, DEFAULT_MIN_STUDENTS_PER_SECTION,
    DEFAULT_COURSE_GRADE_LEVEL, DEFAULT_STUDENT_GRADE_LEVEL,
    DEFAULT_PREFERENCE_RANK, ALTERNATE_PREFERENCE_RANK, DEFAULT_PRIORITY_SCORE,
    DEFAULT_CREDITS, DEFAULT_SESSIONS_PER_WEEK, AVERAGE_CLASS_SIZE,
    DEFAULT_MAX_SECTIONS_PER_TEACHER, DEFAULT_MAX_PREPS, DEFAULT_PERIODS_PER_DAY,
    DEFAULT_INSTRUCTIONAL_DAYS_PER_WEEK, DEFAULT_OPTIMIZATION_THREADS,
    DEFAULT_OPTIMIZATION_SECONDS, DEFAULT_ROOM_TYPE, DEFAULT_DEPARTMENT,
    DEFAULT_CONSTRAINT_WEIGHTS, SIS_VERSION, EXPORT_MODE
)
from app.core.errors import ScheduleNotFoundError
from app.core.logging_config import get_logger
from app.models import (
    Schedule, Course, Room, Teacher, DistrictSettings, CourseEnrollmentRequest, ExportResult
)
from app.models.payload import (
    ExportPayload, SchoolInfo, AcademicConfig, GradingPeriodEntry, StudentRequest,
    CourseRequestEntry, CourseCatalogEntry, TeacherAvailability, RoomAvailability,
    TimeSlotEntry, LunchPeriodEntry, ConstraintConfig, PreAssignedSection, ExportMetadata
)
from app.services.repository import ScheduleRepository

logger = get_logger(__name__)

# Certification code -> subject name matched (case-insensitively) inside Course.subject
CERTIFICATION_SUBJECTS = {
    "MATH": "Math",
    "MATHEMATICS": "Math",
    "ENGLISH": "English",
    "ELA": "English",
    "SCIENCE": "Science",
    "HISTORY": "History",
    "SOCIAL_STUDIES": "Social Studies",
    "PE": "Physical Education",
    "PHYSICAL_EDUCATION": "Physical Education",
    "ART": "Art",
    "MUSIC": "Music",
    "FOREIGN_LANGUAGE": "Foreign Language",
    "SPANISH": "Spanish",
    "FRENCH": "French",
    "COMPUTER_SCIENCE": "Computer Science",
    "SPECIAL_ED": "Special Education",
    "SPED": "Special Education",
}

# (subject keywords, certification required), checked in order
SUBJECT_CERTIFICATIONS = [
    (("MATH",), "MATHEMATICS"),
    (("ENGLISH", "ELA"), "ENGLISH"),
    (("SCIENCE",), "SCIENCE"),
    (("HISTORY", "SOCIAL"), "SOCIAL_STUDIES"),
    (("PE", "PHYSICAL"), "PHYSICAL_EDUCATION"),
    (("ART",), "ART"),
    (("MUSIC",), "MUSIC"),
    (("SPANISH",), "SPANISH"),
    (("FRENCH",), "FRENCH"),
    (("COMPUTER",), "COMPUTER_SCIENCE"),
]

ROOM_TYPE_DEPARTMENTS = {
    "SCIENCE_LAB": ["SCIENCE"],
    "CHEMISTRY_LAB": ["SCIENCE"],
    "BIOLOGY_LAB": ["SCIENCE"],
    "PHYSICS_LAB": ["SCIENCE"],
    "COMPUTER_LAB": ["COMPUTER_SCIENCE", "TECHNOLOGY"],
    "ART_ROOM": ["ART"],
    "ART_STUDIO": ["ART"],
    "MUSIC_ROOM": ["MUSIC"],
    "BAND_ROOM": ["MUSIC"],
    "CHORUS_ROOM": ["MUSIC"],
    "GYM": ["PHYSICAL_EDUCATION", "ATHLETICS"],
    "GYMNASIUM": ["PHYSICAL_EDUCATION", "ATHLETICS"],
    "WEIGHT_ROOM": ["PHYSICAL_EDUCATION", "ATHLETICS"],
    "MEDIA_CENTER": ["LIBRARY", "MEDIA"],
    "LIBRARY": ["LIBRARY", "MEDIA"],
    "WORKSHOP": ["CAREER_TECH", "INDUSTRIAL_ARTS"],
    "WOOD_SHOP": ["CAREER_TECH", "INDUSTRIAL_ARTS"],
    "METAL_SHOP": ["CAREER_TECH", "INDUSTRIAL_ARTS"],
    "KITCHEN": ["CULINARY", "FAMILY_CONSUMER_SCIENCE"],
    "CULINARY_LAB": ["CULINARY", "FAMILY_CONSUMER_SCIENCE"],
}

ROOM_NAME_DEPARTMENTS = [
    (("MATH",), "MATH"),
    (("ENG", "LANG"), "ENGLISH"),
    (("HIST", "SOC"), "SOCIAL_STUDIES"),
    (("SCI", "LAB"), "SCIENCE"),
]

COURSE_EQUIPMENT = [
    (("COMPUTER", "PROGRAMMING", "CODING"), ["COMPUTERS"]),
    (("LAB", "CHEMISTRY", "BIOLOGY", "PHYSICS"), ["LAB_EQUIPMENT", "SAFETY_EQUIPMENT"]),
    (("ART", "STUDIO"), ["ART_SUPPLIES"]),
    (("MUSIC", "BAND", "ORCHESTRA", "CHOIR"), ["MUSICAL_INSTRUMENTS"]),
    (("PE", "PHYSICAL ED", "ATHLETICS"), ["SPORTS_EQUIPMENT"]),
    (("CULINARY", "COOKING", "FOODS"), ["KITCHEN_EQUIPMENT"]),
    (("WOOD", "SHOP", "MANUFACTURING"), ["WORKSHOP_EQUIPMENT"]),
]

WEEKDAY_NUMBERS = {"MON": 1, "TUE": 2, "WED": 3, "THU": 4, "FRI": 5, "SAT": 6, "SUN": 7}
ALL_WEEKDAYS = "MON,TUE,WED,THU,FRI"

PRIORITY_CORE = 1
PRIORITY_ADVANCED = 2
PRIORITY_HIGH_DEMAND = 3
PRIORITY_SPECIAL_EDUCATION = 4
PRIORITY_DEFAULT = 5
HIGH_DEMAND_THRESHOLD = 100


def _contains_any(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)


# ----------------------------------------------------------------------
# Derivation rules
# ----------------------------------------------------------------------

def calculate_sections_needed(demand: int, max_per_section: int) -> int:
    """At least one section for an active course, otherwise ceil(demand / capacity)."""
    if demand <= 0:
        return 1
    return math.ceil(demand / max_per_section)


def is_advanced_course(course: Course) -> bool:
    name = (course.name or "").upper()
    code = (course.code or "").upper()
    return (
        "AP " in name or "HONORS" in name or "IB " in name
        or "ADVANCED PLACEMENT" in name or "ACCELERATED" in name
        or code.startswith("AP") or "HON" in code or "ADV" in code
    )


def is_special_education_course(course: Course) -> bool:
    name = (course.name or "").upper()
    code = (course.code or "").upper()
    subject = (course.subject or "").upper()
    return (
        _contains_any(name, ("SPECIAL ED", "SPED", "RESOURCE", "INCLUSION", "LIFE SKILLS"))
        or "SPED" in code or "SE" in code
        or "SPECIAL" in subject
    )


def required_certifications(course: Course) -> List[str]:
    subject = (course.subject or "").upper()
    certs = [cert for keywords, cert in SUBJECT_CERTIFICATIONS if _contains_any(subject, keywords)]
    if is_special_education_course(course):
        certs.append("SPECIAL_ED")
    return certs


def required_equipment(course: Course) -> List[str]:
    name = (course.name or "").upper()
    equipment = []
    for keywords, items in COURSE_EQUIPMENT:
        if _contains_any(name, keywords):
            equipment.extend(items)
    return equipment


def calculate_course_priority(core_required: bool, advanced: bool, demand: int,
                              special_education: bool) -> int:
    """Lower number schedules first. The first matching rule wins."""
    if core_required:
        return PRIORITY_CORE
    if advanced:
        return PRIORITY_ADVANCED
    if demand > HIGH_DEMAND_THRESHOLD:
        return PRIORITY_HIGH_DEMAND
    if special_education:
        return PRIORITY_SPECIAL_EDUCATION
    return PRIORITY_DEFAULT


def determine_grade_level(course: Course) -> int:
    if course.min_grade_level is not None and course.max_grade_level is not None:
        return (course.min_grade_level + course.max_grade_level) // 2
    if course.min_grade_level is not None:
        return course.min_grade_level
    return DEFAULT_COURSE_GRADE_LEVEL


def prerequisite_course_ids(course: Course, all_courses: List[Course]) -> List[int]:
    """Numbered sequels require the first course, AP courses require the standard one."""
    name = (course.name or "").upper()
    prereq_ids = []

    if "2" in name or "II" in name:
        base_name = re.sub(r"\s*(2|II)\s*", "", name).strip()
        prefix = base_name[:min(len(base_name), 5)]
        for candidate in all_courses:
            candidate_name = (candidate.name or "").upper()
            if (("1" in candidate_name or " I " in candidate_name or candidate_name.endswith(" I"))
                    and candidate_name.startswith(prefix)):
                prereq_ids.append(candidate.id)
                break

    if name.startswith("AP "):
        standard_name = name.replace("AP ", "").strip()
        for candidate in all_courses:
            candidate_name = (candidate.name or "").upper()
            if standard_name in candidate_name and "AP" not in candidate_name:
                prereq_ids.append(candidate.id)
                break

    return prereq_ids


def room_departments(room: Room) -> List[str]:
    room_type = (room.room_type or "").upper()
    room_name = (room.room_number or "").upper()

    departments = list(ROOM_TYPE_DEPARTMENTS.get(room_type, []))
    for keywords, department in ROOM_NAME_DEPARTMENTS:
        if _contains_any(room_name, keywords) and department not in departments:
            departments.append(department)
    return departments


def parse_day_of_week(days_of_week: Optional[str]) -> int:
    """
    0 means every weekday, 1-7 a single day (Mon-Sun).

    A list of several days that is not exactly Mon-Fri also collapses to 0,
    since the optimizer only accepts one day per slot.
    """
    if not days_of_week or days_of_week == ALL_WEEKDAYS:
        return 0
    days = days_of_week.split(",")
    if len(days) == 1:
        return WEEKDAY_NUMBERS.get(days[0].strip().upper(), 0)
    return 0


def build_quarters(start_date, end_date) -> List[GradingPeriodEntry]:
    """Split the schedule's date range into four quarters of equal day span."""
    if start_date is None or end_date is None:
        return []

    total_days = (end_date - start_date).days
    quarter_days = total_days // 4
    # Weekday approximation
    instructional_days = quarter_days * 5 // 7

    q1_end = start_date + timedelta(days=quarter_days)
    q2_start = start_date + timedelta(days=quarter_days + 1)
    q2_end = start_date + timedelta(days=quarter_days * 2)
    q3_start = q2_end + timedelta(days=1)
    q3_end = start_date + timedelta(days=quarter_days * 3)
    q4_start = q3_end + timedelta(days=1)

    bounds = [(start_date, q1_end), (q2_start, q2_end), (q3_start, q3_end), (q4_start, end_date)]
    return [
        GradingPeriodEntry(
            id=number,
            name=f"Quarter {number}",
            period_type="QUARTER",
            period_number=number,
            start_date=start,
            end_date=end,
            instructional_days=instructional_days
        )
        for number, (start, end) in enumerate(bounds, start=1)
    ]


def _weight(value: Optional[int], key: str) -> int:
    return value if value is not None and value > 0 else DEFAULT_CONSTRAINT_WEIGHTS[key]


# ----------------------------------------------------------------------
# Mapper
# ----------------------------------------------------------------------

class ScheduleExportMapper:
    """
    Builds an ExportPayload for one schedule from repository reads only.

    Output is deterministic for unchanged data except the metadata export id and timestamp.
    """

    def __init__(self, repository: ScheduleRepository, export_mode: str = EXPORT_MODE):
        self.repository = repository
        self.export_mode = export_mode

    def build_payload(self, schedule_id: int, exported_by: str = "SIS System",
                      exported_by_user_id: Optional[int] = None) -> ExportPayload:
        # Every export reads the live tables
        self.repository.refresh()
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)

        logger.debug("Building optimizer payload for schedule: %s", schedule.name)

        settings = self.repository.get_district_settings()
        all_courses = self.repository.list_courses()
        requests = self.repository.list_enrollment_requests()

        demand = self.compute_course_demand(requests)
        certification_map = self.build_certification_course_map(all_courses)

        return ExportPayload(
            school_info=self.build_school_info(schedule, settings),
            academic_config=self.build_academic_config(schedule, settings),
            student_requests=self.build_student_requests(requests, all_courses),
            courses=self.build_course_catalog(all_courses, demand),
            teachers=self.build_teacher_availability(certification_map),
            rooms=self.build_room_availability(),
            time_slots=self.build_time_slots(),
            lunch_periods=self.build_lunch_periods(),
            constraints=self.build_constraint_config(settings),
            pre_assigned_sections=self.build_pre_assigned_sections(schedule),
            metadata=self.build_export_metadata(schedule, exported_by, exported_by_user_id)
        )

    def export_to_optimizer(self, schedule_id: int, client) -> ExportResult:
        """
        Hand the schedule data to the optimizer.

        In pull mode the optimizer fetches the payload itself, so nothing is sent.
        """
        if self.export_mode != "push":
            logger.info("Export for schedule %s skipped, optimizer pulls data itself", schedule_id)
            return ExportResult(
                success=True,
                schedule_id=schedule_id,
                message="No export needed; the optimizer pulls data from the SIS directly"
            )

        payload = self.build_payload(schedule_id)
        import_id = client.import_data(payload)
        logger.info(
            "Exported schedule %s: %d students, %d courses, %d teachers (import %s)",
            schedule_id, len(payload.student_requests), len(payload.courses),
            len(payload.teachers), import_id
        )
        return ExportResult(
            success=True,
            schedule_id=schedule_id,
            message="Schedule data exported to optimizer",
            export_id=payload.metadata.export_id,
            import_id=import_id,
            students_exported=len(payload.student_requests),
            courses_exported=len(payload.courses),
            teachers_exported=len(payload.teachers)
        )

    # Lookups

    def compute_course_demand(self, requests: List[CourseEnrollmentRequest]) -> Dict[int, int]:
        """Requests per course across all students, whatever the request status."""
        return dict(Counter(r.course_id for r in requests if r.course_id is not None))

    def build_certification_course_map(self, courses: List[Course]) -> Dict[str, List[int]]:
        cert_map = {}
        for certification, subject in CERTIFICATION_SUBJECTS.items():
            course_ids = [
                c.id for c in courses
                if c.subject is not None and subject.lower() in c.subject.lower()
            ]
            if course_ids:
                cert_map[certification] = course_ids
        return cert_map

    # Sections

    def build_school_info(self, schedule: Schedule, settings: DistrictSettings) -> SchoolInfo:
        return SchoolInfo(
            school_name=schedule.name,
            district_name=settings.district_name_or_default(),
            campus_name=settings.campus_name_or_default()
        )

    def build_academic_config(self, schedule: Schedule, settings: DistrictSettings) -> AcademicConfig:
        academic_year = None
        if schedule.start_date is not None:
            year = schedule.start_date.year
            academic_year = f"{year}-{year + 1}"

        if settings.grading_periods:
            grading_periods = [
                GradingPeriodEntry(
                    id=p.id,
                    name=p.name,
                    period_type=p.period_type,
                    period_number=p.period_number,
                    start_date=p.start_date,
                    end_date=p.end_date,
                    instructional_days=p.instructional_days
                )
                for p in settings.grading_periods
            ]
        else:
            grading_periods = build_quarters(schedule.start_date, schedule.end_date)

        return AcademicConfig(
            academic_year=academic_year,
            school_year_start_date=schedule.start_date,
            school_year_end_date=schedule.end_date,
            schedule_type=schedule.schedule_type or settings.schedule_type_or_default(),
            instructional_days_per_week=settings.instructional_days_per_week or DEFAULT_INSTRUCTIONAL_DAYS_PER_WEEK,
            periods_per_day=settings.periods_per_day or DEFAULT_PERIODS_PER_DAY,
            grading_periods=grading_periods
        )

    def build_student_requests(self, requests: List[CourseEnrollmentRequest],
                               courses: List[Course]) -> List[StudentRequest]:
        courses_by_id = {c.id: c for c in courses}
        requests_by_student: Dict[int, List[CourseEnrollmentRequest]] = {}
        for request in requests:
            requests_by_student.setdefault(request.student_id, []).append(request)

        student_requests = []
        for student in self.repository.list_students():
            if not student.active:
                continue

            entries = []
            for request in requests_by_student.get(student.id, []):
                course = courses_by_id.get(request.course_id)
                if course is None:
                    continue
                entries.append(CourseRequestEntry(
                    course_id=course.id,
                    course_code=course.code,
                    course_name=course.name,
                    preference_rank=request.preference_rank if request.preference_rank is not None else DEFAULT_PREFERENCE_RANK,
                    priority_score=request.priority_score if request.priority_score is not None else DEFAULT_PRIORITY_SCORE,
                    is_required=bool(course.core_required),
                    is_alternate=request.preference_rank == ALTERNATE_PREFERENCE_RANK
                ))

            student_requests.append(StudentRequest(
                student_id=student.id,
                student_number=student.student_number,
                first_name=student.first_name,
                last_name=student.last_name,
                grade_level=self._student_grade_level(student.grade_level),
                has_iep=student.has_iep,
                has_504_plan=student.has_504_plan,
                course_requests=entries
            ))
        return student_requests

    def build_course_catalog(self, courses: List[Course], demand: Dict[int, int]) -> List[CourseCatalogEntry]:
        catalog = []
        for course in courses:
            if not course.active:
                continue

            course_demand = demand.get(course.id, 0)
            max_per_section = course.max_students or DEFAULT_MAX_STUDENTS_PER_SECTION
            advanced = is_advanced_course(course)
            special_ed = is_special_education_course(course)

            catalog.append(CourseCatalogEntry(
                course_id=course.id,
                course_code=course.code,
                course_name=course.name,
                department=course.subject or DEFAULT_DEPARTMENT,
                subject_area=course.subject,
                grade_level=determine_grade_level(course),
                credits=float(course.credits) if course.credits is not None else DEFAULT_CREDITS,
                sections_needed=calculate_sections_needed(course_demand, max_per_section),
                max_students_per_section=max_per_section,
                min_students_per_section=course.min_students or DEFAULT_MIN_STUDENTS_PER_SECTION,
                total_demand=course_demand,
                required_certifications=required_certifications(course),
                required_room_types=[course.required_room_type] if course.required_room_type else [],
                required_equipment=required_equipment(course),
                periods_required=course.sessions_per_week or DEFAULT_SESSIONS_PER_WEEK,
                is_advanced=advanced,
                is_special_education=special_ed,
                prerequisite_course_ids=prerequisite_course_ids(course, courses),
                priority=calculate_course_priority(course.core_required, advanced, course_demand, special_ed)
            ))
        return catalog

    def qualified_course_ids(self, teacher: Teacher, certification_map: Dict[str, List[int]]) -> List[int]:
        qualified = set()
        for certification in teacher.certifications or []:
            normalized = certification.upper().replace(" ", "_")
            qualified.update(certification_map.get(normalized, []))
        if teacher.department:
            qualified.update(certification_map.get(teacher.department.upper(), []))
        return sorted(qualified)

    def build_teacher_availability(self, certification_map: Dict[str, List[int]]) -> List[TeacherAvailability]:
        teachers = []
        for teacher in self.repository.list_teachers():
            if not teacher.active:
                continue

            max_sections = teacher.max_periods_per_day or DEFAULT_MAX_SECTIONS_PER_TEACHER
            teachers.append(TeacherAvailability(
                teacher_id=teacher.id,
                employee_number=teacher.employee_number,
                first_name=teacher.first_name,
                last_name=teacher.last_name,
                full_name=teacher.name,
                department=teacher.department,
                certifications=list(teacher.certifications or []),
                qualified_course_ids=self.qualified_course_ids(teacher, certification_map),
                max_sections=max_sections,
                max_preps=teacher.max_courses_per_day or DEFAULT_MAX_PREPS,
                max_total_students=max_sections * AVERAGE_CLASS_SIZE,
                is_part_time=(teacher.contract_type or "").lower() == "part-time",
                preferred_room_id=teacher.home_room_id
            ))
        return teachers

    def build_room_availability(self) -> List[RoomAvailability]:
        rooms = []
        for room in self.repository.list_rooms():
            if not room.active:
                continue

            equipment = []
            if room.equipment:
                equipment = [item.strip() for item in room.equipment.split(",")]

            rooms.append(RoomAvailability(
                room_id=room.id,
                room_number=room.room_number,
                building_name=room.building,
                room_type=room.room_type or DEFAULT_ROOM_TYPE,
                capacity=room.capacity,
                equipment=equipment,
                assigned_departments=room_departments(room),
                is_accessible=room.wheelchair_accessible,
                is_available=room.available
            ))
        return rooms

    def build_time_slots(self) -> List[TimeSlotEntry]:
        return [
            TimeSlotEntry(
                time_slot_id=period.id,
                period_name=period.period_name,
                period_number=period.period_number,
                start_time=period.start_time,
                end_time=period.end_time,
                duration_minutes=period.duration_minutes,
                day_of_week=parse_day_of_week(period.days_of_week),
                is_lunch_period=period.period_number == -1,
                is_instructional_period=period.period_number >= 1
            )
            for period in self.repository.list_period_timers()
            if period.active
        ]

    def build_lunch_periods(self) -> List[LunchPeriodEntry]:
        return [
            LunchPeriodEntry(
                lunch_period_id=lunch.id,
                name=lunch.name,
                wave_number=lunch.display_order if lunch.display_order is not None else 1,
                start_time=lunch.start_time,
                end_time=lunch.end_time,
                duration_minutes=lunch.duration_minutes,
                max_capacity=lunch.max_capacity,
                current_assigned_count=lunch.current_count,
                assigned_grade_levels=lunch.grade_levels,
                is_primary=lunch.display_order == 1
            )
            for lunch in self.repository.list_lunch_periods()
            if lunch.active
        ]

    def build_constraint_config(self, settings: DistrictSettings) -> ConstraintConfig:
        return ConstraintConfig(
            student_preference_weight=_weight(settings.student_preference_weight, "student_preference"),
            teacher_travel_weight=_weight(settings.teacher_travel_weight, "teacher_travel"),
            schedule_compactness_weight=_weight(settings.schedule_compactness_weight, "schedule_compactness"),
            section_balance_weight=_weight(settings.section_balance_weight, "section_balance"),
            teacher_preference_weight=_weight(settings.teacher_preference_weight, "teacher_preference"),
            grade_level_clustering_weight=_weight(settings.grade_level_clustering_weight, "grade_level_clustering"),
            department_clustering_weight=_weight(settings.department_clustering_weight, "department_clustering"),
            lunch_continuity_weight=_weight(settings.lunch_continuity_weight, "lunch_continuity"),
            max_optimization_time_seconds=settings.max_optimization_time_seconds or DEFAULT_OPTIMIZATION_SECONDS,
            enable_advanced_optimization=(
                settings.enable_advanced_optimization
                if settings.enable_advanced_optimization is not None else True
            ),
            optimization_threads=settings.optimization_threads or DEFAULT_OPTIMIZATION_THREADS
        )

    def build_pre_assigned_sections(self, schedule: Schedule) -> List[PreAssignedSection]:
        # TODO: read locked sections once the SIS stores section pinning
        return []

    def build_export_metadata(self, schedule: Schedule, exported_by: str,
                              exported_by_user_id: Optional[int]) -> ExportMetadata:
        return ExportMetadata(
            export_id=str(uuid.uuid4()),
            schedule_id=schedule.id,
            export_timestamp=datetime.now(),
            sis_version=SIS_VERSION,
            exported_by=exported_by,
            exported_by_user_id=exported_by_user_id,
            total_students=len(self.repository.list_students()),
            total_course_requests=len(self.repository.list_enrollment_requests()),
            total_courses=len(self.repository.list_courses()),
            total_teachers=len(self.repository.list_teachers()),
            total_rooms=len(self.repository.list_rooms()),
            total_time_slots=len(self.repository.list_period_timers()),
            notes="Exported from the SIS for schedule optimization"
        )

    def _student_grade_level(self, grade_level: Optional[str]) -> int:
        if grade_level is None:
            return DEFAULT_STUDENT_GRADE_LEVEL
        try:
            return int(str(grade_level).strip())
        except ValueError:
            return DEFAULT_STUDENT_GRADE_LEVEL
