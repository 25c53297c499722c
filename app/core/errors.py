"""
Error kinds raised while talking to the external optimizer.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    UNREACHABLE = "UNREACHABLE"
    REJECTED = "REJECTED"
    TIMEOUT = "TIMEOUT"
    IMPORT_FAILED = "IMPORT_FAILED"
    PROCESS_LAUNCH_FAILED = "PROCESS_LAUNCH_FAILED"


class SchedulerError(Exception):
    """Base class for optimizer failures. Carries enough context for a caller to retry."""

    kind: Optional[ErrorKind] = None

    def __init__(self, detail: str, job_id: Optional[str] = None,
                 elapsed_seconds: Optional[float] = None):
        super().__init__(detail)
        self.detail = detail
        self.job_id = job_id
        self.elapsed_seconds = elapsed_seconds


class OptimizerApiError(SchedulerError):
    """Raised on a non-terminal HTTP failure from the optimizer (5xx, unparseable body)."""

    def __init__(self, detail: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(detail, **kwargs)
        self.status_code = status_code


class JobRejectedError(SchedulerError):
    """Raised when the optimizer refuses a job or a job handle."""

    kind = ErrorKind.REJECTED


class OptimizerUnreachableError(JobRejectedError):
    """Raised when the optimizer does not answer; a submission against it is rejected."""

    kind = ErrorKind.UNREACHABLE


class JobTimeoutError(SchedulerError):
    """Raised when the time budget runs out before the job reaches a terminal status."""

    kind = ErrorKind.TIMEOUT


class ImportFailedError(SchedulerError):
    """Raised when an optimizer result cannot be reconciled into the schedule."""

    kind = ErrorKind.IMPORT_FAILED


class ProcessLaunchFailedError(SchedulerError):
    """Raised when the optimizer process cannot be launched or dies before it is healthy."""

    kind = ErrorKind.PROCESS_LAUNCH_FAILED


class ScheduleNotFoundError(LookupError):
    """Raised when a schedule id does not exist in the repository."""

    def __init__(self, schedule_id):
        super().__init__(f"Schedule not found: {schedule_id}")
        self.schedule_id = schedule_id


# Mapping of custom exceptions to HTTP status codes
ERROR_STATUS_CODES = {
    OptimizerUnreachableError: 503,
    JobRejectedError: 422,
    JobTimeoutError: 504,
    ImportFailedError: 502,
    ProcessLaunchFailedError: 503,
    OptimizerApiError: 502,
    ScheduleNotFoundError: 404,
}


def status_code_for(error: Exception) -> int:
    """Most specific HTTP status for an error, 500 when unmapped."""
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 500
