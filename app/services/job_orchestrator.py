"""
Drives one optimization job from submission to a terminal status.
"""

import time
from typing import Callable, Optional

from app.core.config import SchedulerSettings
from app.core.errors import (
    SchedulerError, OptimizerApiError, JobRejectedError, OptimizerUnreachableError, JobTimeoutError
)
from app.core.logging_config import get_logger
from app.models import JobResult, JobStatus, OptimizationJob, OptimizationRequest
from app.services.optimizer_client import OptimizerClient
from app.services.process_supervisor import OptimizerProcessSupervisor

logger = get_logger(__name__)


class JobOrchestrator:
    """
    Submits a request and polls the optimizer until the job ends or the time budget runs out.

    Polling is a blocking loop on the caller's thread. No cancel call is made on timeout;
    the optimizer job is simply abandoned.
    """

    def __init__(self, client: OptimizerClient, supervisor: OptimizerProcessSupervisor,
                 settings: Optional[SchedulerSettings] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.supervisor = supervisor
        self.settings = settings or SchedulerSettings()
        self._sleep = sleep
        self._clock = clock

    def submit(self, request: OptimizationRequest) -> str:
        """
        Returns:
            The optimizer's job id

        Raises:
            OptimizerUnreachableError: optimizer down and could not be started
            JobRejectedError: optimizer refused the request
        """
        if not self.supervisor.ensure_running():
            detail = "AI scheduler is not available. Start the optimizer service or enable auto-start."
            if self.supervisor.last_error is not None:
                detail = f"{detail} ({self.supervisor.last_error.detail})"
            raise OptimizerUnreachableError(detail)

        job_id = self.client.submit(request)
        logger.info(
            "Submitted schedule %s to optimizer as job %s (%s, %ss budget)",
            request.schedule_id, job_id, request.optimization_mode.value, request.time_budget_seconds
        )
        return job_id

    def poll_until_complete(self, job: OptimizationJob, poll_interval_seconds: float,
                            time_budget_seconds: float) -> OptimizationJob:
        """
        Poll until the job is terminal.

        Poll errors are logged and polling continues, except a rejection of the job handle,
        which ends the job as REJECTED.

        Raises:
            JobTimeoutError: no terminal status within the time budget plus grace
        """
        deadline_seconds = time_budget_seconds + self.settings.poll_grace_seconds
        started = self._clock()

        while not job.status.is_terminal:
            elapsed = self._clock() - started
            if elapsed >= deadline_seconds:
                raise JobTimeoutError(
                    f"Job {job.job_id} did not finish within {deadline_seconds}s (last status {job.status.value})",
                    job_id=job.job_id,
                    elapsed_seconds=elapsed
                )

            # Never sleep past the deadline
            self._sleep(min(poll_interval_seconds, deadline_seconds - elapsed))

            try:
                report = self.client.get_status(job.job_id)
            except OptimizerUnreachableError as e:
                logger.warning("Status poll for job %s failed, will retry: %s", job.job_id, e.detail)
                continue
            except JobRejectedError as e:
                logger.error("Optimizer rejected job %s while polling: %s", job.job_id, e.detail)
                job.advance(JobStatus.REJECTED)
                job.message = e.detail
                break
            except OptimizerApiError as e:
                logger.warning("Status poll for job %s failed, will retry: %s", job.job_id, e.detail)
                continue

            if report.status is None:
                logger.warning("Ignoring unknown status %r for job %s", report.raw_status, job.job_id)
                continue

            previous = job.status
            if job.advance(report.status):
                logger.info("Job %s: %s -> %s", job.job_id, previous.value, job.status.value)

            if report.hard_score is not None:
                job.hard_score = report.hard_score
            if report.soft_score is not None:
                job.soft_score = report.soft_score
            if report.message:
                job.message = report.message
            if report.elapsed_seconds is not None:
                job.elapsed_seconds = report.elapsed_seconds
            else:
                job.elapsed_seconds = self._clock() - started

        return job

    def run(self, request: OptimizationRequest) -> JobResult:
        """Submit and wait. Never raises; failures come back as a JobResult with error_kind set."""
        job = OptimizationJob()
        started = self._clock()

        try:
            job.job_id = self.submit(request)
        except SchedulerError as e:
            job.advance(JobStatus.REJECTED)
            logger.error("Submission of schedule %s failed: %s", request.schedule_id, e.detail)
            return JobResult(
                job_id=None,
                status=job.status,
                elapsed_seconds=self._clock() - started,
                error_kind=e.kind or JobRejectedError.kind,
                message=e.detail
            )
        job.advance(JobStatus.SUBMITTED)

        try:
            self.poll_until_complete(job, request.poll_interval_seconds, request.time_budget_seconds)
        except JobTimeoutError as e:
            logger.error("Job %s timed out after %.1fs", job.job_id, e.elapsed_seconds)
            return JobResult(
                job_id=job.job_id,
                status=job.status,
                hard_score=job.hard_score,
                soft_score=job.soft_score,
                elapsed_seconds=e.elapsed_seconds,
                error_kind=e.kind,
                message=e.detail
            )
        except Exception as e:
            logger.exception("Polling job %s failed unexpectedly", job.job_id)
            return JobResult(
                job_id=job.job_id,
                status=job.status,
                hard_score=job.hard_score,
                soft_score=job.soft_score,
                elapsed_seconds=self._clock() - started,
                message=f"Polling job {job.job_id} failed: {e}"
            )

        error_kind = None
        if job.status == JobStatus.REJECTED:
            error_kind = JobRejectedError.kind
        message = job.message or f"Job {job.job_id} finished with status {job.status.value}"

        return JobResult(
            job_id=job.job_id,
            status=job.status,
            hard_score=job.hard_score,
            soft_score=job.soft_score,
            elapsed_seconds=job.elapsed_seconds,
            error_kind=error_kind,
            message=message
        )
