"""
Result reconciliation: import a finished job, validate it and compare candidate schedules.
"""

from typing import List, Optional, Tuple

from app.core.errors import ImportFailedError, ScheduleNotFoundError, SchedulerError
from app.core.logging_config import get_logger
from app.models import ComparisonResult, ImportOutcome, ScheduleSummary, ValidationOutcome
from app.services.repository import ScheduleRepository
from app.services.schedule_importer import ScheduleImporter

logger = get_logger(__name__)


def _compare_scores(a: Optional[int], b: Optional[int]) -> int:
    """
    1 if a is better, -1 if b is better, 0 on a tie. Higher is better.

    A missing score loses to any present score; two missing scores tie.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def compare_quality(a: ScheduleSummary, b: ScheduleSummary) -> Tuple[int, Optional[str]]:
    """Hard score first (closer to zero is better), then soft score."""
    hard = _compare_scores(a.hard_score, b.hard_score)
    if hard != 0:
        return hard, "hard score"
    soft = _compare_scores(a.soft_score, b.soft_score)
    if soft != 0:
        return soft, "soft score"
    return 0, None


class ResultReconciler:

    def __init__(self, importer: ScheduleImporter, repository: ScheduleRepository):
        self.importer = importer
        self.repository = repository

    def import_result(self, schedule_id: int, job_id: str) -> ImportOutcome:
        """
        Raises:
            ImportFailedError: wrapping whatever the importer raised, message kept verbatim
        """
        try:
            outcome = self.importer.import_schedule(schedule_id, job_id)
        except ImportFailedError:
            raise
        except Exception as e:
            # Storage errors from the repository land here too
            detail = e.detail if isinstance(e, SchedulerError) else str(e) or type(e).__name__
            raise ImportFailedError(detail, job_id=job_id) from e

        if not outcome.success:
            raise ImportFailedError(outcome.message, job_id=job_id)
        return outcome

    def validate(self, schedule_id: int) -> ValidationOutcome:
        return self.importer.validate(schedule_id)

    def compare(self, a: ScheduleSummary, b: ScheduleSummary) -> ComparisonResult:
        """
        Pick the better of two schedules. The result does not depend on argument order.

        Fewer conflicts wins outright, then quality, otherwise the two are equivalent.
        """
        reasons: List[str] = []
        winner: Optional[ScheduleSummary] = None

        if a.conflict_count != b.conflict_count:
            winner = a if a.conflict_count < b.conflict_count else b
            loser = b if winner is a else a
            reasons.append(
                f"{self._label(winner)} has fewer conflicts ({winner.conflict_count} vs {loser.conflict_count})"
            )
        else:
            verdict, criterion = compare_quality(a, b)
            if verdict != 0:
                winner = a if verdict > 0 else b
                loser = b if winner is a else a
                reasons.append(f"Conflicts are equal ({a.conflict_count})")
                reasons.append(
                    f"{self._label(winner)} has the better {criterion} "
                    f"({self._scores(winner)} vs {self._scores(loser)})"
                )

        if winner is None:
            reasons.append("Conflicts and scores are equal")
            recommendation = (
                f"{self._label(a)} and {self._label(b)} are equivalent; either schedule can be used"
            )
        else:
            recommendation = f"Use {self._label(winner)}"

        logger.info("Compared schedules %s and %s: %s", a.schedule_id, b.schedule_id, recommendation)

        return ComparisonResult(
            schedule_a_id=a.schedule_id,
            schedule_b_id=b.schedule_id,
            winner_id=winner.schedule_id if winner else None,
            schedule_a_hard_score=a.hard_score,
            schedule_b_hard_score=b.hard_score,
            schedule_a_soft_score=a.soft_score,
            schedule_b_soft_score=b.soft_score,
            schedule_a_conflicts=a.conflict_count,
            schedule_b_conflicts=b.conflict_count,
            recommendation=recommendation,
            reasons=reasons
        )

    def summarize(self, schedule_id: int) -> ScheduleSummary:
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)

        conflict_count = schedule.total_conflicts
        if conflict_count is None:
            conflict_count = self.validate(schedule_id).conflict_count

        return ScheduleSummary(
            schedule_id=schedule.id,
            name=schedule.name,
            hard_score=schedule.hard_score,
            soft_score=schedule.soft_score,
            conflict_count=conflict_count
        )

    def compare_schedules(self, schedule_a_id: int, schedule_b_id: int) -> ComparisonResult:
        return self.compare(self.summarize(schedule_a_id), self.summarize(schedule_b_id))

    @staticmethod
    def _label(summary: ScheduleSummary) -> str:
        return summary.name or f"Schedule {summary.schedule_id}"

    @staticmethod
    def _scores(summary: ScheduleSummary) -> str:
        hard = "n/a" if summary.hard_score is None else summary.hard_score
        soft = "n/a" if summary.soft_score is None else summary.soft_score
        return f"{hard}hard/{soft}soft"
