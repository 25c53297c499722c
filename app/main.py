"""
Main FastAPI application for the schedule optimizer bridge.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import routes
from app.core.config import LOG_LEVEL
from app.core.logging_config import setup_logging, get_logger

setup_logging(LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(
    title="Schedule Optimizer Bridge API",
    description="API for generating master schedules with an external optimizer",
    version="1.0.0"
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(routes.router)


@app.on_event("shutdown")
def stop_optimizer():
    """Stop an optimizer process this API launched. Nothing happens if none was started."""
    if routes.get_generation_service.cache_info().currsize:
        logger.info("Shutting down, stopping supervised optimizer")
        routes.get_generation_service().supervisor.stop()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Schedule Optimizer Bridge API",
        "version": "1.0.0",
        "endpoints": {
            "generate": "/api/schedule/{schedule_id}/generate",
            "compare": "/api/schedule/compare",
            "scheduler_status": "/api/scheduler/status",
            "health": "/api/health"
        }
    }
