"""
API routes for AI schedule generation and comparison.
"""

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.celery_app import celery_app
from app.core.errors import ScheduleNotFoundError, SchedulerError, status_code_for
from app.core.logging_config import get_logger
from app.models import GenerationMode
from app.services.generation_service import ScheduleGenerationService, build_default_service
from app.tasks.scheduler_tasks import generate_schedule_task

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["schedule"])


@lru_cache(maxsize=1)
def get_generation_service() -> ScheduleGenerationService:
    """Process-wide service; the supervisor inside it owns the optimizer process."""
    return build_default_service()


def _http_error(error: Exception) -> HTTPException:
    detail = error.detail if isinstance(error, SchedulerError) else str(error)
    return HTTPException(status_code=status_code_for(error), detail=detail)


class GenerateRequest(BaseModel):
    """Request model for schedule generation."""
    mode: GenerationMode = GenerationMode.AI_ASSISTED
    time_budget_seconds: Optional[int] = Field(default=None, gt=0)
    poll_interval_seconds: Optional[int] = Field(default=None, gt=0)


class ValidationResponse(BaseModel):
    is_valid: bool
    total_slots: int
    conflict_count: int
    conflicts: List[str]


class GenerationResponse(BaseModel):
    """Response model for schedule generation."""
    success: bool
    schedule_id: int
    mode: str
    message: str
    job_id: Optional[str] = None
    status: Optional[str] = None
    error_kind: Optional[str] = None
    hard_score: Optional[int] = None
    soft_score: Optional[int] = None
    elapsed_seconds: float = 0.0
    sections_created: int = 0
    students_scheduled: int = 0
    validation: Optional[ValidationResponse] = None
    requires_manual_review: bool = False


class CompareRequest(BaseModel):
    """Two schedule ids, sent as scheduleAId/scheduleBId."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    schedule_a_id: int
    schedule_b_id: int


class ComparisonResponse(BaseModel):
    schedule_a_id: int
    schedule_b_id: int
    winner_id: Optional[int] = None
    equivalent: bool
    schedule_a_conflicts: int
    schedule_b_conflicts: int
    schedule_a_hard_score: Optional[int] = None
    schedule_b_hard_score: Optional[int] = None
    schedule_a_soft_score: Optional[int] = None
    schedule_b_soft_score: Optional[int] = None
    recommendation: str
    reasons: List[str]


class SchedulerStatus(BaseModel):
    enabled: bool
    reachable: bool
    base_url: str
    auto_start: bool
    process_running: bool
    pid: Optional[int] = None
    export_mode: str


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.get("/scheduler/status", response_model=SchedulerStatus)
def get_scheduler_status(service: ScheduleGenerationService = Depends(get_generation_service)):
    """Whether the optimizer answers and whether this service owns its process."""
    process = service.supervisor.process
    return SchedulerStatus(
        enabled=service.settings.enabled,
        reachable=service.client.is_healthy(),
        base_url=service.client.base_url,
        auto_start=service.settings.auto_start,
        process_running=service.supervisor.is_running(),
        pid=process.pid if process else None,
        export_mode=service.settings.export_mode
    )


@router.post("/schedule/{schedule_id}/generate", response_model=GenerationResponse)
def generate_schedule(schedule_id: int, request: Optional[GenerateRequest] = None,
                      service: ScheduleGenerationService = Depends(get_generation_service)):
    """
    Generate a schedule synchronously.

    Blocks for the whole optimizer run. Failures come back with success=false,
    not as HTTP errors.
    """
    request = request or GenerateRequest()
    result = service.generate_schedule_ai(
        schedule_id,
        mode=request.mode,
        time_budget_seconds=request.time_budget_seconds,
        poll_interval_seconds=request.poll_interval_seconds
    )
    return GenerationResponse(**result.to_dict())


@router.post("/schedule/{schedule_id}/generate/async")
async def generate_schedule_async(schedule_id: int, request: Optional[GenerateRequest] = None):
    """
    Start async schedule generation task.

    Returns:
        dict: Task ID for polling status
    """
    request = request or GenerateRequest()
    try:
        task = generate_schedule_task.delay(
            schedule_id,
            request.mode.value,
            request.time_budget_seconds,
            request.poll_interval_seconds
        )
    except Exception as e:
        logger.error("Failed to queue generation for schedule %s: %s", schedule_id, e)
        raise HTTPException(status_code=500, detail=f"Failed to start task: {str(e)}")

    return {
        "task_id": task.id,
        "status": "PENDING",
        "message": "Schedule generation started"
    }


@router.get("/schedule/status/{task_id}")
async def get_schedule_status(task_id: str):
    """
    Get status of async schedule generation task.

    Args:
        task_id: Celery task ID
    """
    task_result = AsyncResult(task_id, app=celery_app)
    state = task_result.state

    response: Dict[str, Any] = {"task_id": task_id, "status": state}
    if state == "PENDING":
        response["message"] = "Task is waiting to start..."
    elif state == "PROGRESS":
        info = task_result.info or {}
        response["message"] = info.get("status", "Processing...")
    elif state == "SUCCESS":
        response["result"] = task_result.result
    elif state == "FAILURE":
        response["message"] = str(task_result.info)
    else:
        response["message"] = f"Task state: {state}"
    return response


@router.post("/schedule/compare", response_model=ComparisonResponse)
def compare_schedules(request: CompareRequest,
                      service: ScheduleGenerationService = Depends(get_generation_service)):
    """Recommend the better of two schedules."""
    try:
        result = service.reconciler.compare_schedules(request.schedule_a_id, request.schedule_b_id)
    except (ScheduleNotFoundError, SchedulerError) as e:
        raise _http_error(e)

    return ComparisonResponse(
        schedule_a_id=result.schedule_a_id,
        schedule_b_id=result.schedule_b_id,
        winner_id=result.winner_id,
        equivalent=result.is_equivalent,
        schedule_a_conflicts=result.schedule_a_conflicts,
        schedule_b_conflicts=result.schedule_b_conflicts,
        schedule_a_hard_score=result.schedule_a_hard_score,
        schedule_b_hard_score=result.schedule_b_hard_score,
        schedule_a_soft_score=result.schedule_a_soft_score,
        schedule_b_soft_score=result.schedule_b_soft_score,
        recommendation=result.recommendation,
        reasons=result.reasons
    )


@router.get("/scheduler/export/{schedule_id}")
def export_schedule_data(schedule_id: int,
                         service: ScheduleGenerationService = Depends(get_generation_service)):
    """Payload served to an optimizer running in pull mode (camelCase JSON)."""
    try:
        payload = service.mapper.build_payload(schedule_id, exported_by="Optimizer pull")
    except ScheduleNotFoundError as e:
        raise _http_error(e)
    return payload.to_wire()
