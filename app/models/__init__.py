"""
Data models for the schedule optimizer bridge.
"""

from .models import (
    Schedule,
    Student,
    Course,
    CourseEnrollmentRequest,
    Teacher,
    Room,
    PeriodTimer,
    LunchPeriod,
    GradingPeriod,
    DistrictSettings,
    CourseSection,
    ScheduleSlot
)
from .optimization import (
    OptimizationMode,
    GenerationMode,
    JobStatus,
    OptimizationRequest,
    OptimizationJob,
    JobStatusReport,
    JobResult,
    SupervisedProcess,
    ExportResult,
    ImportOutcome,
    ValidationOutcome,
    ScheduleSummary,
    ComparisonResult,
    GenerationResult
)

__all__ = [
    "Schedule",
    "Student",
    "Course",
    "CourseEnrollmentRequest",
    "Teacher",
    "Room",
    "PeriodTimer",
    "LunchPeriod",
    "GradingPeriod",
    "DistrictSettings",
    "CourseSection",
    "ScheduleSlot",
    "OptimizationMode",
    "GenerationMode",
    "JobStatus",
    "OptimizationRequest",
    "OptimizationJob",
    "JobStatusReport",
    "JobResult",
    "SupervisedProcess",
    "ExportResult",
    "ImportOutcome",
    "ValidationOutcome",
    "ScheduleSummary",
    "ComparisonResult",
    "GenerationResult"
]
