"""
Configuration constants for the schedule optimizer bridge.
All configurable settings are defined here.
"""

import os
import logging
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Invalid integer for %s: %r, using default %s", name, value, default)
        return default


# Optimizer service
SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)
SCHEDULER_BASE_URL = os.getenv("SCHEDULER_BASE_URL", "http://localhost:8090")
DEFAULT_OPTIMIZER_PORT = _env_int("DEFAULT_OPTIMIZER_PORT", 8090)
REQUEST_TIMEOUT_SECONDS = _env_int("SCHEDULER_REQUEST_TIMEOUT_SECONDS", 30)

# Job polling
DEFAULT_OPTIMIZATION_SECONDS = _env_int("SCHEDULER_DEFAULT_OPTIMIZATION_SECONDS", 120)
POLL_INTERVAL_SECONDS = _env_int("SCHEDULER_POLL_INTERVAL_SECONDS", 5)
POLL_GRACE_SECONDS = _env_int("SCHEDULER_POLL_GRACE_SECONDS", 60)

# Process supervision
AUTO_START_ENABLED = _env_bool("SCHEDULER_AUTO_START", False)
EXECUTABLE_PATH = os.getenv("SCHEDULER_EXECUTABLE_PATH", "")
LAUNCHER_PATH = os.getenv("SCHEDULER_LAUNCHER_PATH", "java")
STARTUP_TIMEOUT_SECONDS = _env_int("SCHEDULER_STARTUP_TIMEOUT_SECONDS", 90)
SHUTDOWN_GRACE_SECONDS = _env_int("SCHEDULER_SHUTDOWN_GRACE_SECONDS", 10)
HEALTH_CHECK_INTERVAL_SECONDS = _env_int("SCHEDULER_HEALTH_CHECK_INTERVAL_SECONDS", 2)

# "push" sends the payload to the optimizer, "pull" lets the optimizer fetch it
EXPORT_MODE = os.getenv("SCHEDULER_EXPORT_MODE", "pull").strip().lower()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Export defaults (used when a domain record leaves the field empty)
DEFAULT_MAX_STUDENTS_PER_SECTION = 30
DEFAULT_MIN_STUDENTS_PER_SECTION = 15
DEFAULT_COURSE_GRADE_LEVEL = 10
DEFAULT_STUDENT_GRADE_LEVEL = 9
DEFAULT_PREFERENCE_RANK = 5
ALTERNATE_PREFERENCE_RANK = 4
DEFAULT_PRIORITY_SCORE = 500
DEFAULT_CREDITS = 1.0
DEFAULT_SESSIONS_PER_WEEK = 5
AVERAGE_CLASS_SIZE = 28
DEFAULT_MAX_SECTIONS_PER_TEACHER = 6
DEFAULT_MAX_PREPS = 4
DEFAULT_PERIODS_PER_DAY = 7
DEFAULT_INSTRUCTIONAL_DAYS_PER_WEEK = 5
DEFAULT_OPTIMIZATION_THREADS = 4
DEFAULT_ROOM_TYPE = "STANDARD_CLASSROOM"
DEFAULT_DEPARTMENT = "GENERAL"
SIS_VERSION = "1.0.0"

# Soft constraint weights: relative, independent positive integers (not percentages)
DEFAULT_CONSTRAINT_WEIGHTS = {
    "student_preference": 100,
    "teacher_travel": 50,
    "schedule_compactness": 30,
    "section_balance": 70,
    "teacher_preference": 60,
    "grade_level_clustering": 40,
    "department_clustering": 40,
    "lunch_continuity": 50,
}


@dataclass(frozen=True)
class SchedulerSettings:
    """Bundle of optimizer settings handed to the supervisor, orchestrator and service."""
    enabled: bool = SCHEDULER_ENABLED
    base_url: str = SCHEDULER_BASE_URL
    default_optimization_seconds: int = DEFAULT_OPTIMIZATION_SECONDS
    poll_interval_seconds: int = POLL_INTERVAL_SECONDS
    poll_grace_seconds: int = POLL_GRACE_SECONDS
    auto_start: bool = AUTO_START_ENABLED
    executable_path: str = EXECUTABLE_PATH
    launcher_path: str = LAUNCHER_PATH
    startup_timeout_seconds: int = STARTUP_TIMEOUT_SECONDS
    shutdown_grace_seconds: int = SHUTDOWN_GRACE_SECONDS
    health_check_interval_seconds: int = HEALTH_CHECK_INTERVAL_SECONDS
    request_timeout_seconds: int = REQUEST_TIMEOUT_SECONDS
    export_mode: str = EXPORT_MODE
    default_port: int = DEFAULT_OPTIMIZER_PORT

    @classmethod
    def from_env(cls) -> "SchedulerSettings":
        """Re-read the environment (module constants are fixed at import time)."""
        return cls(
            enabled=_env_bool("SCHEDULER_ENABLED", True),
            base_url=os.getenv("SCHEDULER_BASE_URL", "http://localhost:8090"),
            default_optimization_seconds=_env_int("SCHEDULER_DEFAULT_OPTIMIZATION_SECONDS", 120),
            poll_interval_seconds=_env_int("SCHEDULER_POLL_INTERVAL_SECONDS", 5),
            poll_grace_seconds=_env_int("SCHEDULER_POLL_GRACE_SECONDS", 60),
            auto_start=_env_bool("SCHEDULER_AUTO_START", False),
            executable_path=os.getenv("SCHEDULER_EXECUTABLE_PATH", ""),
            launcher_path=os.getenv("SCHEDULER_LAUNCHER_PATH", "java"),
            startup_timeout_seconds=_env_int("SCHEDULER_STARTUP_TIMEOUT_SECONDS", 90),
            shutdown_grace_seconds=_env_int("SCHEDULER_SHUTDOWN_GRACE_SECONDS", 10),
            health_check_interval_seconds=_env_int("SCHEDULER_HEALTH_CHECK_INTERVAL_SECONDS", 2),
            request_timeout_seconds=_env_int("SCHEDULER_REQUEST_TIMEOUT_SECONDS", 30),
            export_mode=os.getenv("SCHEDULER_EXPORT_MODE", "pull").strip().lower(),
            default_port=_env_int("DEFAULT_OPTIMIZER_PORT", 8090),
        )
