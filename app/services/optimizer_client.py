"""
HTTP client for the external schedule optimizer.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from app.core.config import SCHEDULER_BASE_URL, REQUEST_TIMEOUT_SECONDS, DEFAULT_OPTIMIZER_PORT
from app.core.errors import OptimizerApiError, JobRejectedError, OptimizerUnreachableError
from app.core.logging_config import get_logger
from app.models import JobStatus, JobStatusReport, OptimizationRequest
from app.models.payload import ExportPayload

logger = get_logger(__name__)

HEALTH_PATH = "/api/health"
IMPORT_PATH = "/api/integration/import"
SUBMIT_PATH = "/api/schedules/generate"
JOB_STATUS_PATH = "/api/schedules/jobs/{job_id}"
JOB_EXPORT_PATH = "/api/schedules/jobs/{job_id}/export"

REJECTION_STATUS_CODES = (400, 404, 409, 422)

# Optimizer status strings -> job states
STATUS_ALIASES = {
    "PENDING": JobStatus.SUBMITTED,
    "QUEUED": JobStatus.SUBMITTED,
    "SUBMITTED": JobStatus.SUBMITTED,
    "RUNNING": JobStatus.RUNNING,
    "SOLVING": JobStatus.RUNNING,
    "SOLVING_ACTIVE": JobStatus.RUNNING,
    "IN_PROGRESS": JobStatus.RUNNING,
    "COMPLETED": JobStatus.SUCCEEDED,
    "SUCCEEDED": JobStatus.SUCCEEDED,
    "SOLVED": JobStatus.SUCCEEDED,
    "SOLVING_COMPLETED": JobStatus.SUCCEEDED,
    "DONE": JobStatus.SUCCEEDED,
    "FAILED": JobStatus.FAILED,
    "ERROR": JobStatus.FAILED,
    "CANCELLED": JobStatus.FAILED,
    "TERMINATED": JobStatus.FAILED,
    "REJECTED": JobStatus.REJECTED,
    "INVALID": JobStatus.REJECTED,
}


def normalize_status(raw_status: Optional[str]) -> Optional[JobStatus]:
    if not raw_status:
        return None
    return STATUS_ALIASES.get(str(raw_status).strip().upper())


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable number %r in optimizer response", value)
        return None


def port_from_url(base_url: str, default_port: int = DEFAULT_OPTIMIZER_PORT) -> int:
    """Port of the optimizer base URL, or the default when the URL has none or is malformed."""
    try:
        port = urlparse(base_url).port
    except ValueError:
        return default_port
    return port if port else default_port


class OptimizerClient:
    """
    Thin wrapper over the optimizer's REST API.

    Transport failures raise OptimizerUnreachableError, refusals (400/404/409/422)
    raise JobRejectedError and any other non-2xx raises OptimizerApiError.
    """

    def __init__(self, base_url: str = SCHEDULER_BASE_URL,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None,
                 default_port: int = DEFAULT_OPTIMIZER_PORT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.default_port = default_port

    @property
    def port(self) -> int:
        return port_from_url(self.base_url, self.default_port)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, job_id: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        url = self._url(path)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise OptimizerUnreachableError(
                f"Optimizer not reachable at {self.base_url}: {e}", job_id=job_id
            ) from e

        if resp.status_code in REJECTION_STATUS_CODES:
            raise JobRejectedError(
                f"Optimizer rejected {method} {path} ({resp.status_code}): {resp.text}",
                job_id=job_id
            )
        if not resp.ok:
            raise OptimizerApiError(
                f"Optimizer error on {method} {path} ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                job_id=job_id
            )

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as e:
            raise OptimizerApiError(
                f"Unparseable response from {method} {path}: {resp.text[:200]}",
                status_code=resp.status_code,
                job_id=job_id
            ) from e
        return body if isinstance(body, dict) else {"value": body}

    def is_healthy(self) -> bool:
        """Liveness probe. Never raises."""
        try:
            resp = self.session.get(self._url(HEALTH_PATH), timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("Optimizer health check failed: %s", e)
            return False
        return resp.ok

    def import_data(self, payload: ExportPayload) -> Optional[str]:
        body = self._request("POST", IMPORT_PATH, json=payload.to_wire())
        return body.get("importId")

    def submit(self, request: OptimizationRequest) -> str:
        body = self._request("POST", SUBMIT_PATH, json=request.to_submit_body())
        job_id = body.get("jobId") or body.get("value")
        if not job_id:
            raise JobRejectedError(f"Optimizer accepted the request but returned no job id: {body}")
        return str(job_id)

    def get_status(self, job_id: str) -> JobStatusReport:
        body = self._request("GET", JOB_STATUS_PATH.format(job_id=job_id), job_id=job_id)
        raw_status = str(body.get("status", ""))
        return JobStatusReport(
            status=normalize_status(raw_status),
            raw_status=raw_status,
            hard_score=_optional_int(body.get("hardScore")),
            soft_score=_optional_int(body.get("softScore")),
            elapsed_seconds=_optional_float(body.get("elapsedSeconds")),
            message=body.get("message")
        )

    def export_schedule(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", JOB_EXPORT_PATH.format(job_id=job_id), job_id=job_id)
