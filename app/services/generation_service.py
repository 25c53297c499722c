"""
Schedule generation entry point.

Wires the supervisor, export mapper, job orchestrator and result reconciler into one
call that always returns a GenerationResult and never raises.
"""

import time
from typing import Optional

from app.core.config import SchedulerSettings
from app.core.errors import ImportFailedError, SchedulerError, ScheduleNotFoundError, ErrorKind
from app.core.logging_config import get_logger
from app.models import (
    GenerationMode, GenerationResult, JobStatus, OptimizationMode, OptimizationRequest
)
from app.services.export_mapper import ScheduleExportMapper
from app.services.job_orchestrator import JobOrchestrator
from app.services.optimizer_client import OptimizerClient
from app.services.process_supervisor import OptimizerProcessSupervisor
from app.services.repository import ScheduleRepository
from app.services.result_reconciler import ResultReconciler
from app.services.schedule_importer import ScheduleImporter

logger = get_logger(__name__)

DISABLED_MESSAGE = "AI scheduling is disabled"
NOT_AVAILABLE_MESSAGE = "AI scheduler is not available. Start the optimizer service or enable auto-start."


class ScheduleGenerationService:
    """
    Runs one generation for a schedule in the requested mode.

    MANUAL makes no optimizer call. AI_ASSISTED and FULLY_AUTOMATED share the
    optimizer path and differ in optimizer mode and in whether the result is
    flagged for manual review.
    """

    def __init__(self, repository: ScheduleRepository, client: OptimizerClient,
                 supervisor: OptimizerProcessSupervisor, orchestrator: JobOrchestrator,
                 mapper: ScheduleExportMapper, reconciler: ResultReconciler,
                 settings: Optional[SchedulerSettings] = None):
        self.repository = repository
        self.client = client
        self.supervisor = supervisor
        self.orchestrator = orchestrator
        self.mapper = mapper
        self.reconciler = reconciler
        self.settings = settings or SchedulerSettings()

    def is_available(self) -> bool:
        return self.settings.enabled and self.client.is_healthy()

    def generate_schedule_ai(self, schedule_id: int,
                             mode: GenerationMode = GenerationMode.AI_ASSISTED,
                             time_budget_seconds: Optional[int] = None,
                             poll_interval_seconds: Optional[int] = None) -> GenerationResult:
        try:
            return self._generate(schedule_id, mode, time_budget_seconds, poll_interval_seconds)
        except SchedulerError as e:
            logger.error("Generation for schedule %s failed: %s", schedule_id, e.detail)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=f"generation failed: {e.detail}",
                job_id=e.job_id, error_kind=e.kind,
                elapsed_seconds=e.elapsed_seconds or 0.0
            )
        except Exception as e:
            logger.exception("Generation for schedule %s failed unexpectedly", schedule_id)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=f"generation failed: {e}"
            )

    def _generate(self, schedule_id: int, mode: GenerationMode,
                  time_budget_seconds: Optional[int],
                  poll_interval_seconds: Optional[int]) -> GenerationResult:
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=str(ScheduleNotFoundError(schedule_id))
            )

        if mode == GenerationMode.MANUAL:
            schedule.requires_manual_review = True
            self.repository.save_schedule(schedule)
            logger.info("Schedule %s set up for manual scheduling", schedule_id)
            return GenerationResult(
                success=True, schedule_id=schedule_id, mode=mode,
                message="Schedule ready for manual editing",
                requires_manual_review=True
            )
        elif mode == GenerationMode.AI_ASSISTED:
            optimization_mode = OptimizationMode.BALANCED
            flag_review = True
        elif mode == GenerationMode.FULLY_AUTOMATED:
            optimization_mode = OptimizationMode.THOROUGH
            flag_review = False
        else:
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=f"Unknown generation mode: {mode}"
            )

        if not self.settings.enabled:
            logger.warning("Generation for schedule %s refused: AI scheduling is disabled", schedule_id)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode, message=DISABLED_MESSAGE
            )

        request = OptimizationRequest(
            schedule_id=schedule_id,
            optimization_mode=optimization_mode,
            time_budget_seconds=time_budget_seconds or self.settings.default_optimization_seconds,
            poll_interval_seconds=poll_interval_seconds or self.settings.poll_interval_seconds
        )
        logger.info(
            "Generating schedule %s (%s, %s, %ss budget)",
            schedule_id, mode.value, optimization_mode.value, request.time_budget_seconds
        )

        return self._run_ai(schedule_id, mode, request, flag_review)

    def _run_ai(self, schedule_id: int, mode: GenerationMode, request: OptimizationRequest,
                flag_review: bool) -> GenerationResult:
        started = time.monotonic()

        # Bring the optimizer up before exporting so push mode has somewhere to send to
        if not self.supervisor.ensure_running():
            logger.error("Optimizer not available for schedule %s", schedule_id)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=NOT_AVAILABLE_MESSAGE, error_kind=ErrorKind.UNREACHABLE
            )

        try:
            self.mapper.export_to_optimizer(schedule_id, self.client)
        except ValueError as e:
            # pydantic rejects incomplete domain rows while building the payload
            logger.error("Export of schedule %s failed: %s", schedule_id, e)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=f"generation failed: export rejected: {e}"
            )

        job = self.orchestrator.run(request)
        if not job.success:
            if job.error_kind == ErrorKind.UNREACHABLE:
                message = NOT_AVAILABLE_MESSAGE
            else:
                message = f"generation failed: {job.message}"
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode, message=message,
                job_id=job.job_id, status=job.status, error_kind=job.error_kind,
                hard_score=job.hard_score, soft_score=job.soft_score,
                elapsed_seconds=job.elapsed_seconds
            )

        try:
            imported = self.reconciler.import_result(schedule_id, job.job_id)
        except ImportFailedError as e:
            logger.error("Import of job %s failed: %s", job.job_id, e.detail)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=e.detail, job_id=job.job_id, status=job.status,
                error_kind=e.kind, hard_score=job.hard_score, soft_score=job.soft_score,
                elapsed_seconds=job.elapsed_seconds
            )

        try:
            validation = self.reconciler.validate(schedule_id)
            schedule = self.repository.get_schedule(schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)
            schedule.requires_manual_review = flag_review
            self.repository.save_schedule(schedule)
        except Exception as e:
            logger.exception("Job %s was imported into schedule %s but validation failed", job.job_id, schedule_id)
            return GenerationResult(
                success=False, schedule_id=schedule_id, mode=mode,
                message=f"generation failed: imported schedule could not be validated: {e}",
                job_id=job.job_id, status=job.status, hard_score=imported.hard_score,
                soft_score=imported.soft_score, elapsed_seconds=job.elapsed_seconds,
                sections_created=imported.sections_created,
                students_scheduled=imported.students_scheduled
            )

        hard_score = imported.hard_score if imported.hard_score is not None else job.hard_score
        soft_score = imported.soft_score if imported.soft_score is not None else job.soft_score
        message = (
            f"Schedule generated: {imported.sections_created} sections, "
            f"{imported.students_scheduled} students, {validation.conflict_count} conflicts"
        )
        logger.info("Schedule %s: %s (%.1fs)", schedule_id, message, time.monotonic() - started)

        return GenerationResult(
            success=True,
            schedule_id=schedule_id,
            mode=mode,
            message=message,
            job_id=job.job_id,
            status=JobStatus.SUCCEEDED,
            hard_score=hard_score,
            soft_score=soft_score,
            elapsed_seconds=job.elapsed_seconds,
            sections_created=imported.sections_created,
            students_scheduled=imported.students_scheduled,
            validation=validation,
            requires_manual_review=flag_review
        )


def build_default_service(repository: Optional[ScheduleRepository] = None,
                          settings: Optional[SchedulerSettings] = None) -> ScheduleGenerationService:
    """Wire a service from the environment. Uses Supabase unless a repository is given."""
    settings = settings or SchedulerSettings.from_env()
    if repository is None:
        from app.services.supabase_repository import SupabaseScheduleRepository
        repository = SupabaseScheduleRepository()

    client = OptimizerClient(
        base_url=settings.base_url,
        timeout=settings.request_timeout_seconds,
        default_port=settings.default_port
    )
    supervisor = OptimizerProcessSupervisor(client, settings)
    orchestrator = JobOrchestrator(client, supervisor, settings)
    mapper = ScheduleExportMapper(repository, export_mode=settings.export_mode)
    reconciler = ResultReconciler(ScheduleImporter(repository, client), repository)

    return ScheduleGenerationService(
        repository=repository,
        client=client,
        supervisor=supervisor,
        orchestrator=orchestrator,
        mapper=mapper,
        reconciler=reconciler,
        settings=settings
    )
