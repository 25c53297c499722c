"""
Celery configuration for async schedule generation.
"""

from celery import Celery
import os

# Redis connection URL (default to localhost)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Create Celery app
celery_app = Celery(
    "optimizer_bridge",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["app.tasks.scheduler_tasks"]
)

# Optimizer runs default to 120s plus grace, so leave room for a THOROUGH run
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes max
    task_soft_time_limit=1740,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
)
