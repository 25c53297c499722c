"""
Conflict validation for imported schedules.
Checks that no teacher and no room is booked twice in the same period.
"""

from collections import defaultdict
from typing import Dict, List, Tuple

from app.core.logging_config import get_logger
from app.models import ScheduleSlot, ValidationOutcome
from app.services.repository import ScheduleRepository

logger = get_logger(__name__)


class ScheduleValidator:
    """
    Validates the slots of one schedule against the hard booking constraints.
    """

    def __init__(self, repository: ScheduleRepository):
        self.repository = repository

    def validate_schedule(self, schedule_id: int) -> ValidationOutcome:
        """
        Validate all slots of a schedule.

        Args:
            schedule_id: The schedule to validate

        Returns:
            ValidationOutcome with one message per conflicting (resource, period)
        """
        slots = self.repository.list_slots(schedule_id)
        conflicts: List[str] = []

        conflicts.extend(self._check_teacher_conflicts(slots))
        conflicts.extend(self._check_room_conflicts(slots))

        outcome = ValidationOutcome(
            is_valid=not conflicts,
            total_slots=len(slots),
            conflict_count=len(conflicts),
            conflicts=conflicts
        )

        logger.info(
            "Validated schedule %s: %d slots, %d conflicts",
            schedule_id, outcome.total_slots, outcome.conflict_count
        )
        for conflict in conflicts[:10]:  # Show first 10
            logger.info("  - %s", conflict)

        return outcome

    def _group_by_period(self, slots: List[ScheduleSlot], attr: str) -> Dict[Tuple[int, int], List[ScheduleSlot]]:
        grouped = defaultdict(list)
        for slot in slots:
            resource_id = getattr(slot, attr)
            if resource_id is None or slot.period_number is None:
                continue
            grouped[(resource_id, slot.period_number)].append(slot)
        return grouped

    def _check_teacher_conflicts(self, slots: List[ScheduleSlot]) -> List[str]:
        """Same teacher teaching more than one class in a period."""
        conflicts = []
        for (teacher_id, period), booked in sorted(self._group_by_period(slots, "teacher_id").items()):
            if len(booked) > 1:
                teacher = self.repository.get_teacher(teacher_id)
                name = teacher.name if teacher else f"Teacher {teacher_id}"
                conflicts.append(f"Teacher conflict: {name} has {len(booked)} classes at period {period}")
        return conflicts

    def _check_room_conflicts(self, slots: List[ScheduleSlot]) -> List[str]:
        """Same room hosting more than one class in a period."""
        conflicts = []
        for (room_id, period), booked in sorted(self._group_by_period(slots, "room_id").items()):
            if len(booked) > 1:
                room = self.repository.get_room(room_id)
                room_number = room.room_number if room else f"Room {room_id}"
                conflicts.append(f"Room conflict: {room_number} has {len(booked)} classes at period {period}")
        return conflicts
