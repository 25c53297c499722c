"""
Services for optimizer supervision, data export, job orchestration and result import.
"""

from .optimizer_client import OptimizerClient
from .process_supervisor import OptimizerProcessSupervisor
from .export_mapper import ScheduleExportMapper
from .job_orchestrator import JobOrchestrator
from .result_reconciler import ResultReconciler
from .schedule_importer import ScheduleImporter
from .validator import ScheduleValidator
from .repository import ScheduleRepository, InMemoryScheduleRepository
from .generation_service import ScheduleGenerationService, build_default_service

__all__ = [
    "OptimizerClient",
    "OptimizerProcessSupervisor",
    "ScheduleExportMapper",
    "JobOrchestrator",
    "ResultReconciler",
    "ScheduleImporter",
    "ScheduleValidator",
    "ScheduleRepository",
    "InMemoryScheduleRepository",
    "ScheduleGenerationService",
    "build_default_service"
]
