"""
Records describing one optimization attempt: the request, the job it becomes,
and the outcomes handed back to the caller.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from app.core.errors import ErrorKind


class OptimizationMode(Enum):
    BALANCED = "BALANCED"
    THOROUGH = "THOROUGH"


class GenerationMode(Enum):
    MANUAL = "MANUAL"
    AI_ASSISTED = "AI_ASSISTED"
    FULLY_AUTOMATED = "FULLY_AUTOMATED"


class JobStatus(Enum):
    NOT_SUBMITTED = "NOT_SUBMITTED"
    SUBMITTED = "SUBMITTED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.REJECTED)

    @property
    def rank(self) -> int:
        if self.is_terminal:
            return 3
        return {JobStatus.NOT_SUBMITTED: 0, JobStatus.SUBMITTED: 1, JobStatus.RUNNING: 2}[self]


@dataclass(frozen=True)
class OptimizationRequest:
    schedule_id: int
    optimization_mode: OptimizationMode = OptimizationMode.BALANCED
    time_budget_seconds: int = 120
    poll_interval_seconds: int = 5
    enable_advanced_optimization: bool = True

    def to_submit_body(self) -> Dict[str, Any]:
        return {
            "scheduleId": self.schedule_id,
            "optimizationTimeSeconds": self.time_budget_seconds,
            "enableAdvancedOptimization": self.enable_advanced_optimization,
            "optimizationMode": self.optimization_mode.value,
        }


@dataclass
class OptimizationJob:
    job_id: Optional[str] = None
    status: JobStatus = JobStatus.NOT_SUBMITTED
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    elapsed_seconds: float = 0.0
    message: Optional[str] = None

    def advance(self, new_status: JobStatus) -> bool:
        """
        Move to a new status. Regressions and moves out of a terminal state are ignored.

        Returns:
            True if the status changed
        """
        if self.status.is_terminal:
            return False
        if new_status.rank < self.status.rank or new_status == self.status:
            return False
        self.status = new_status
        return True


@dataclass
class JobStatusReport:
    """One status response from the optimizer. status is None when the string was unknown."""
    status: Optional[JobStatus]
    raw_status: str
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    elapsed_seconds: Optional[float] = None
    message: Optional[str] = None


@dataclass
class JobResult:
    job_id: Optional[str]
    status: JobStatus
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    elapsed_seconds: float = 0.0
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status == JobStatus.SUCCEEDED


@dataclass
class SupervisedProcess:
    pid: int
    started_at: datetime
    healthy: bool = False


@dataclass
class ExportResult:
    success: bool
    schedule_id: int
    message: str
    export_id: Optional[str] = None
    import_id: Optional[str] = None
    students_exported: int = 0
    courses_exported: int = 0
    teachers_exported: int = 0


@dataclass
class ImportOutcome:
    success: bool
    schedule_id: int
    job_id: Optional[str] = None
    import_timestamp: Optional[datetime] = None
    sections_created: int = 0
    slots_assigned: int = 0
    students_scheduled: int = 0
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    message: str = ""


@dataclass
class ValidationOutcome:
    is_valid: bool
    total_slots: int = 0
    conflict_count: int = 0
    conflicts: List[str] = field(default_factory=list)


@dataclass
class ScheduleSummary:
    """What the comparison needs to know about one candidate schedule."""
    schedule_id: int
    name: str = ""
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    conflict_count: int = 0


@dataclass
class ComparisonResult:
    schedule_a_id: int
    schedule_b_id: int
    winner_id: Optional[int]
    schedule_a_hard_score: Optional[int] = None
    schedule_b_hard_score: Optional[int] = None
    schedule_a_soft_score: Optional[int] = None
    schedule_b_soft_score: Optional[int] = None
    schedule_a_conflicts: int = 0
    schedule_b_conflicts: int = 0
    recommendation: str = ""
    reasons: List[str] = field(default_factory=list)

    @property
    def is_equivalent(self) -> bool:
        return self.winner_id is None


@dataclass
class GenerationResult:
    success: bool
    schedule_id: int
    mode: GenerationMode
    message: str
    job_id: Optional[str] = None
    status: Optional[JobStatus] = None
    error_kind: Optional[ErrorKind] = None
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    elapsed_seconds: float = 0.0
    sections_created: int = 0
    students_scheduled: int = 0
    validation: Optional[ValidationOutcome] = None
    requires_manual_review: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        data["status"] = self.status.value if self.status else None
        data["error_kind"] = self.error_kind.value if self.error_kind else None
        return data
