"""
Supabase-backed implementation of the schedule repository.
Reads the SIS tables and writes sections, slots and schedule scores back.
"""

from datetime import datetime, date, time
from typing import Dict, List, Optional
import os
from supabase import create_client, Client

from app.models import (
    Schedule, Student, Course, CourseEnrollmentRequest, Teacher, Room,
    PeriodTimer, LunchPeriod, GradingPeriod, DistrictSettings, CourseSection, ScheduleSlot
)
from app.core.logging_config import get_logger
from app.services.repository import ScheduleRepository

logger = get_logger(__name__)


class SupabaseScheduleRepository(ScheduleRepository):
    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL", "")
            supabase_key = os.getenv("SUPABASE_KEY", "")
            if not supabase_url or not supabase_key:
                raise ValueError(
                    "Supabase credentials not found. Please set SUPABASE_URL and SUPABASE_KEY"
                )
            client = create_client(supabase_url, supabase_key)
        self.client: Client = client

        self._courses_cache: Optional[List[Course]] = None
        self._teachers_cache: Optional[List[Teacher]] = None
        self._rooms_cache: Optional[List[Room]] = None
        self._periods_cache: Optional[List[PeriodTimer]] = None

    def refresh(self) -> None:
        self._courses_cache = None
        self._teachers_cache = None
        self._rooms_cache = None
        self._periods_cache = None
        logger.debug("Cleared cached courses, teachers, rooms and periods")

    def _parse_date(self, date_str) -> Optional[date]:
        if isinstance(date_str, date):
            return date_str
        if not date_str or date_str.strip() == '':
            return None

        date_str = date_str.strip()

        formats = [
            '%Y-%m-%d',
            '%m/%d/%Y',
            '%m/%d/%y'
        ]

        for fmt in formats:
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue

        logger.warning("Could not parse date: %s", date_str)
        return None

    def _parse_time(self, time_str) -> Optional[time]:
        if isinstance(time_str, time):
            return time_str
        if not time_str or time_str.strip() == '':
            return None

        time_str = time_str.strip()

        formats = [
            '%H:%M:%S',
            '%H:%M',
            '%I:%M %p'
        ]

        for fmt in formats:
            try:
                return datetime.strptime(time_str, fmt).time()
            except ValueError:
                continue

        logger.warning("Could not parse time: %s", time_str)
        return None

    def _select(self, table: str, columns: str = '*') -> List[Dict]:
        response = self.client.table(table).select(columns).execute()
        logger.debug("Loaded %d rows from %s", len(response.data), table)
        return response.data

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        response = self.client.table('schedules').select('*').eq('id', schedule_id).execute()
        if not response.data:
            return None
        row = response.data[0]
        return Schedule(
            id=row['id'],
            name=row.get('schedule_name') or row.get('name') or f"Schedule {row['id']}",
            start_date=self._parse_date(row.get('start_date')),
            end_date=self._parse_date(row.get('end_date')),
            schedule_type=row.get('schedule_type'),
            status=row.get('status') or "DRAFT",
            quality_score=row.get('quality_score'),
            hard_score=row.get('hard_score'),
            soft_score=row.get('soft_score'),
            total_conflicts=row.get('total_conflicts'),
            requires_manual_review=bool(row.get('requires_manual_review', False)),
            last_modified_by=row.get('last_modified_by'),
            last_modified_date=self._parse_date(row.get('last_modified_date'))
        )

    def list_students(self) -> List[Student]:
        return [
            Student(
                id=row['id'],
                student_number=str(row.get('student_id') or row['id']),
                first_name=row.get('first_name') or '',
                last_name=row.get('last_name') or '',
                grade_level=row.get('grade_level'),
                active=bool(row.get('active', True)),
                has_iep=bool(row.get('has_iep', False)),
                has_504_plan=bool(row.get('has_504_plan', False))
            )
            for row in self._select('students')
        ]

    def list_courses(self) -> List[Course]:
        if self._courses_cache is not None:
            return self._courses_cache

        self._courses_cache = [
            Course(
                id=row['id'],
                code=row.get('course_code') or '',
                name=row.get('course_name') or '',
                subject=row.get('subject'),
                active=bool(row.get('active', True)),
                max_students=row.get('max_students'),
                min_students=row.get('min_students'),
                core_required=bool(row.get('is_core_required', False)),
                credits=row.get('credits'),
                min_grade_level=row.get('min_grade_level'),
                max_grade_level=row.get('max_grade_level'),
                required_room_type=row.get('required_room_type'),
                sessions_per_week=row.get('sessions_per_week')
            )
            for row in self._select('courses')
        ]
        return self._courses_cache

    def list_enrollment_requests(self) -> List[CourseEnrollmentRequest]:
        return [
            CourseEnrollmentRequest(
                id=row['id'],
                student_id=row['student_id'],
                course_id=row.get('course_id'),
                preference_rank=row.get('preference_rank'),
                priority_score=row.get('priority_score'),
                status=row.get('request_status') or 'PENDING'
            )
            for row in self._select('course_enrollment_requests')
        ]

    def list_teachers(self) -> List[Teacher]:
        if self._teachers_cache is not None:
            return self._teachers_cache

        teachers = []
        for row in self._select('teachers'):
            certifications = row.get('certifications') or []
            if isinstance(certifications, str):
                certifications = [c.strip() for c in certifications.split(',') if c.strip()]
            teachers.append(Teacher(
                id=row['id'],
                employee_number=str(row.get('employee_id') or row['id']),
                first_name=row.get('first_name') or '',
                last_name=row.get('last_name') or '',
                department=row.get('department'),
                certifications=certifications,
                active=bool(row.get('active', True)),
                max_periods_per_day=row.get('max_periods_per_day'),
                max_courses_per_day=row.get('max_courses_per_day'),
                contract_type=row.get('contract_type'),
                home_room_id=row.get('home_room_id')
            ))

        self._teachers_cache = teachers
        return teachers

    def list_rooms(self) -> List[Room]:
        if self._rooms_cache is not None:
            return self._rooms_cache

        self._rooms_cache = [
            Room(
                id=row['id'],
                room_number=row.get('room_number') or str(row['id']),
                building=row.get('building'),
                room_type=row.get('room_type'),
                capacity=row.get('capacity'),
                equipment=row.get('equipment'),
                active=bool(row.get('active', True)),
                wheelchair_accessible=bool(row.get('wheelchair_accessible', False)),
                available=bool(row.get('available', True))
            )
            for row in self._select('rooms')
        ]
        return self._rooms_cache

    def list_period_timers(self) -> List[PeriodTimer]:
        if self._periods_cache is not None:
            return self._periods_cache

        periods = []
        for row in self._select('period_timers'):
            start_time = self._parse_time(row.get('start_time'))
            end_time = self._parse_time(row.get('end_time'))
            if start_time is None or end_time is None:
                logger.warning("Skipping period %s with unparseable times", row.get('id'))
                continue
            periods.append(PeriodTimer(
                id=row['id'],
                period_name=row.get('period_name') or '',
                period_number=row.get('period_number', 0),
                start_time=start_time,
                end_time=end_time,
                days_of_week=row.get('days_of_week'),
                active=bool(row.get('active', False))
            ))

        self._periods_cache = periods
        return periods

    def list_lunch_periods(self) -> List[LunchPeriod]:
        lunches = []
        for row in self._select('lunch_periods'):
            start_time = self._parse_time(row.get('start_time'))
            end_time = self._parse_time(row.get('end_time'))
            if start_time is None or end_time is None:
                logger.warning("Skipping lunch period %s with unparseable times", row.get('id'))
                continue
            lunches.append(LunchPeriod(
                id=row['id'],
                name=row.get('name') or '',
                start_time=start_time,
                end_time=end_time,
                display_order=row.get('display_order'),
                max_capacity=row.get('max_capacity'),
                current_count=row.get('current_count'),
                grade_levels=row.get('grade_levels'),
                active=bool(row.get('active', True))
            ))
        return lunches

    def get_district_settings(self) -> DistrictSettings:
        rows = self._select('district_settings')
        if not rows:
            return DistrictSettings()
        row = rows[0]

        grading_periods = []
        for index, period in enumerate(row.get('grading_periods') or [], start=1):
            start_date = self._parse_date(period.get('start_date'))
            end_date = self._parse_date(period.get('end_date'))
            if start_date is None or end_date is None:
                continue
            grading_periods.append(GradingPeriod(
                id=period.get('id', index),
                name=period.get('name') or f"Period {index}",
                period_type=period.get('period_type') or 'QUARTER',
                period_number=period.get('period_number', index),
                start_date=start_date,
                end_date=end_date,
                instructional_days=period.get('instructional_days', 0)
            ))

        return DistrictSettings(
            district_name=row.get('district_name'),
            campus_name=row.get('campus_name'),
            schedule_type=row.get('schedule_type'),
            instructional_days_per_week=row.get('instructional_days_per_week'),
            periods_per_day=row.get('periods_per_day'),
            grading_periods=grading_periods,
            student_preference_weight=row.get('student_preference_weight'),
            teacher_travel_weight=row.get('teacher_travel_weight'),
            schedule_compactness_weight=row.get('schedule_compactness_weight'),
            section_balance_weight=row.get('section_balance_weight'),
            teacher_preference_weight=row.get('teacher_preference_weight'),
            grade_level_clustering_weight=row.get('grade_level_clustering_weight'),
            department_clustering_weight=row.get('department_clustering_weight'),
            lunch_continuity_weight=row.get('lunch_continuity_weight'),
            max_optimization_time_seconds=row.get('max_optimization_time_seconds'),
            enable_advanced_optimization=row.get('enable_advanced_optimization'),
            optimization_threads=row.get('optimization_threads')
        )

    def list_sections_for_course(self, course_id: int) -> List[CourseSection]:
        response = self.client.table('course_sections').select('*').eq('course_id', course_id).execute()
        return [self._section_from_row(row) for row in response.data]

    def list_slots(self, schedule_id: int) -> List[ScheduleSlot]:
        response = self.client.table('schedule_slots').select('*').eq('schedule_id', schedule_id).execute()
        return [
            ScheduleSlot(
                id=row['id'],
                schedule_id=row['schedule_id'],
                course_id=row['course_id'],
                teacher_id=row['teacher_id'],
                room_id=row['room_id'],
                period_number=row['period_number'],
                section_id=row.get('section_id')
            )
            for row in response.data
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_schedule(self, schedule: Schedule) -> Schedule:
        row = {
            'status': schedule.status,
            'quality_score': schedule.quality_score,
            'hard_score': schedule.hard_score,
            'soft_score': schedule.soft_score,
            'total_conflicts': schedule.total_conflicts,
            'requires_manual_review': schedule.requires_manual_review,
            'last_modified_by': schedule.last_modified_by,
            'last_modified_date': schedule.last_modified_date.isoformat() if schedule.last_modified_date else None
        }
        self.client.table('schedules').update(row).eq('id', schedule.id).execute()
        return schedule

    def save_section(self, section: CourseSection) -> CourseSection:
        row = {
            'course_id': section.course_id,
            'section_number': section.section_number,
            'teacher_id': section.teacher_id,
            'room_id': section.room_id,
            'period_number': section.period_number,
            'max_enrollment': section.max_enrollment,
            'current_enrollment': section.current_enrollment,
            'section_status': section.status
        }
        if section.id is None:
            response = self.client.table('course_sections').insert(row).execute()
            section.id = response.data[0]['id']
        else:
            self.client.table('course_sections').update(row).eq('id', section.id).execute()
        return section

    def save_slot(self, slot: ScheduleSlot) -> ScheduleSlot:
        row = {
            'schedule_id': slot.schedule_id,
            'course_id': slot.course_id,
            'teacher_id': slot.teacher_id,
            'room_id': slot.room_id,
            'period_number': slot.period_number,
            'section_id': slot.section_id
        }
        response = self.client.table('schedule_slots').insert(row).execute()
        slot.id = response.data[0]['id']
        return slot

    def delete_slots(self, schedule_id: int) -> int:
        response = self.client.table('schedule_slots').delete().eq('schedule_id', schedule_id).execute()
        return len(response.data or [])

    def _section_from_row(self, row: Dict) -> CourseSection:
        return CourseSection(
            id=row['id'],
            course_id=row['course_id'],
            section_number=str(row.get('section_number')),
            teacher_id=row.get('teacher_id'),
            room_id=row.get('room_id'),
            period_number=row.get('period_number'),
            max_enrollment=row.get('max_enrollment') or 30,
            current_enrollment=row.get('current_enrollment') or 0,
            status=row.get('section_status') or 'SCHEDULED'
        )
