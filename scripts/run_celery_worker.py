"""
Run Celery worker for async schedule generation.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.celery_app import celery_app
from app.core.config import LOG_LEVEL
from app.core.logging_config import setup_logging

if __name__ == "__main__":
    setup_logging(LOG_LEVEL)

    print("=" * 60)
    print("Schedule Optimizer Bridge - Celery Worker")
    print("=" * 60)
    print("Starting Celery worker...")
    print("Worker will process schedule generation tasks")
    print("=" * 60)

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "--pool=solo" if os.name == "nt" else "--pool=prefork"  # Use solo pool on Windows
    ])
