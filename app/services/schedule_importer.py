"""
Writes an optimizer solution back into the system of record.
"""

from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional

from app.core.config import DEFAULT_MAX_STUDENTS_PER_SECTION
from app.core.errors import ScheduleNotFoundError
from app.core.logging_config import get_logger
from app.models import (
    Course, CourseSection, ImportOutcome, PeriodTimer, Room, ScheduleSlot, Teacher, ValidationOutcome
)
from app.services.optimizer_client import OptimizerClient
from app.services.repository import ScheduleRepository
from app.services.validator import ScheduleValidator

logger = get_logger(__name__)

IMPORTED_BY = "AI-Scheduler"
MAX_QUALITY_SCORE = 100

REQUIRED_SLOT_FIELDS = ("courseId", "teacherId", "roomId", "timeSlotId", "sectionNumber")


class ResolvedSlot(NamedTuple):
    course: Course
    teacher: Teacher
    room: Room
    period: PeriodTimer
    section_number: str
    student_count: int


def quality_score(hard_score: Optional[int], soft_score: Optional[int]) -> float:
    """Soft score capped at 100 for feasible solutions, 0 for anything with hard violations."""
    if hard_score == 0 and soft_score is not None:
        return float(min(MAX_QUALITY_SCORE, soft_score))
    return 0.0


class ScheduleImporter:
    """
    Default import/validate collaborator of the result reconciler.

    Replaces every slot of the schedule with the optimizer's assignment. The whole
    solution is fetched and resolved against the repository before any existing slot
    is removed.
    """

    def __init__(self, repository: ScheduleRepository, client: OptimizerClient):
        self.repository = repository
        self.client = client
        self.validator = ScheduleValidator(repository)

    def import_schedule(self, schedule_id: int, job_id: str) -> ImportOutcome:
        self.repository.refresh()
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)

        solution = self.client.export_schedule(job_id)
        slots = solution.get("scheduleSlots") or []
        logger.info("Importing %d slots from job %s into schedule %s", len(slots), job_id, schedule_id)

        resolved: List[ResolvedSlot] = []
        for slot_data in slots:
            entry = self._resolve_slot(slot_data)
            if entry is not None:
                resolved.append(entry)

        removed = self.repository.delete_slots(schedule_id)
        if removed:
            logger.info("Cleared %d existing slots of schedule %s", removed, schedule_id)

        sections_created = 0
        slots_assigned = 0
        students_scheduled = 0

        try:
            for entry in resolved:
                if self._write_slot(schedule_id, entry):
                    sections_created += 1
                slots_assigned += 1
                students_scheduled += entry.student_count
        except Exception:
            logger.error(
                "Import of job %s stopped after %d of %d slots; schedule %s has lost its previous "
                "slots and holds a partial import",
                job_id, slots_assigned, len(resolved), schedule_id
            )
            raise

        hard_score = solution.get("hardScore")
        soft_score = solution.get("softScore")
        schedule.hard_score = hard_score
        schedule.soft_score = soft_score
        schedule.quality_score = quality_score(hard_score, soft_score)
        schedule.last_modified_by = IMPORTED_BY
        schedule.last_modified_date = date.today()
        self.repository.save_schedule(schedule)

        logger.info(
            "Imported job %s: %d sections created, %d slots, %d students scheduled",
            job_id, sections_created, slots_assigned, students_scheduled
        )

        return ImportOutcome(
            success=True,
            schedule_id=schedule_id,
            job_id=job_id,
            import_timestamp=datetime.now(),
            sections_created=sections_created,
            slots_assigned=slots_assigned,
            students_scheduled=students_scheduled,
            hard_score=hard_score,
            soft_score=soft_score,
            message=f"Imported {slots_assigned} slots ({sections_created} new sections)"
        )

    def validate(self, schedule_id: int) -> ValidationOutcome:
        outcome = self.validator.validate_schedule(schedule_id)

        schedule = self.repository.get_schedule(schedule_id)
        if schedule is not None:
            schedule.total_conflicts = outcome.conflict_count
            self.repository.save_schedule(schedule)
        return outcome

    def _resolve_slot(self, slot_data: Dict[str, Any]) -> Optional[ResolvedSlot]:
        """None when the slot is incomplete or references unknown records."""
        missing = [name for name in REQUIRED_SLOT_FIELDS if slot_data.get(name) is None]
        if missing:
            logger.warning("Skipping slot with missing fields %s: %s", missing, slot_data)
            return None

        course = self.repository.get_course(slot_data["courseId"])
        teacher = self.repository.get_teacher(slot_data["teacherId"])
        room = self.repository.get_room(slot_data["roomId"])
        period = self.repository.get_period_timer(slot_data["timeSlotId"])
        if course is None or teacher is None or room is None or period is None:
            logger.warning("Skipping slot referencing unknown records: %s", slot_data)
            return None

        return ResolvedSlot(
            course=course,
            teacher=teacher,
            room=room,
            period=period,
            section_number=str(slot_data["sectionNumber"]),
            student_count=len(slot_data.get("enrolledStudentIds") or [])
        )

    def _write_slot(self, schedule_id: int, entry: ResolvedSlot) -> bool:
        """Save the section and slot. Returns whether a new section was created."""
        course = entry.course
        section = next(
            (s for s in self.repository.list_sections_for_course(course.id)
             if s.section_number == entry.section_number),
            None
        )
        created = section is None
        if created:
            section = CourseSection(
                id=None,
                course_id=course.id,
                section_number=entry.section_number,
                max_enrollment=course.max_students or DEFAULT_MAX_STUDENTS_PER_SECTION
            )
        section.teacher_id = entry.teacher.id
        section.room_id = entry.room.id
        section.period_number = entry.period.period_number
        section.current_enrollment = entry.student_count
        section = self.repository.save_section(section)

        self.repository.save_slot(ScheduleSlot(
            id=None,
            schedule_id=schedule_id,
            course_id=course.id,
            teacher_id=entry.teacher.id,
            room_id=entry.room.id,
            period_number=entry.period.period_number,
            section_id=section.id
        ))
        return created
