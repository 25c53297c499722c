"""
Celery tasks for schedule generation.
"""

import traceback
from typing import Optional

from app.core.celery_app import celery_app
from app.core.logging_config import get_logger
from app.models import GenerationMode
from app.services.generation_service import build_default_service

logger = get_logger(__name__)


@celery_app.task(bind=True, name="generate_schedule")
def generate_schedule_task(self, schedule_id: int, mode: str = GenerationMode.AI_ASSISTED.value,
                           time_budget_seconds: Optional[int] = None,
                           poll_interval_seconds: Optional[int] = None):
    """
    Async task to generate a schedule with the optimizer.

    Returns:
        dict: GenerationResult as a dict; failures have success=False
    """
    try:
        self.update_state(
            state="PROGRESS",
            meta={"status": "Checking optimizer..."}
        )

        service = build_default_service()
        generation_mode = GenerationMode(mode)

        self.update_state(
            state="PROGRESS",
            meta={"status": f"Optimizing schedule {schedule_id}..."}
        )

        result = service.generate_schedule_ai(
            schedule_id,
            mode=generation_mode,
            time_budget_seconds=time_budget_seconds,
            poll_interval_seconds=poll_interval_seconds
        )
        return result.to_dict()

    except Exception as e:
        # Setup failures (bad mode, missing Supabase credentials) end up here
        error_trace = traceback.format_exc()
        logger.error("Error in generate_schedule_task: %s", error_trace)

        return {
            "success": False,
            "schedule_id": schedule_id,
            "mode": mode,
            "message": f"Schedule generation failed: {str(e)}",
            "error": str(e),
            "traceback": error_trace
        }
