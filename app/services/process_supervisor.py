"""
Supervision of a locally launched optimizer process.

The supervisor owns at most one child process. It starts the optimizer on demand
when auto-start is configured, waits for the health endpoint to answer and stops
the process again on shutdown.
"""

import subprocess
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from app.core.config import SchedulerSettings
from app.core.errors import ProcessLaunchFailedError
from app.core.logging_config import get_logger
from app.models import SupervisedProcess
from app.services.optimizer_client import OptimizerClient

logger = get_logger(__name__)


class OptimizerProcessSupervisor:
    """
    Guarantees the optimizer is reachable before a job is submitted.

    Failures are reported through the boolean return values and the log; the most
    recent one is also kept in ``last_error``. Nothing here raises to the caller.
    """

    def __init__(self, client: OptimizerClient, settings: Optional[SchedulerSettings] = None,
                 popen: Callable[..., subprocess.Popen] = subprocess.Popen,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.settings = settings or SchedulerSettings()
        self._popen = popen
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.RLock()
        self._handle: Optional[subprocess.Popen] = None
        self._process: Optional[SupervisedProcess] = None
        self.last_error: Optional[ProcessLaunchFailedError] = None

    @property
    def process(self) -> Optional[SupervisedProcess]:
        return self._process

    def is_running(self) -> bool:
        return self._handle is not None and self._handle.poll() is None

    def resolve_executable(self) -> Optional[Path]:
        """Absolute artifact path, or None when unset or missing on disk."""
        raw_path = (self.settings.executable_path or "").strip()
        if not raw_path:
            return None
        path = Path(raw_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        if not path.exists():
            logger.debug("Optimizer executable not found at %s", path)
            return None
        return path

    def build_command(self, executable: Path) -> List[str]:
        port_arg = f"--server.port={self.client.port}"
        if executable.suffix.lower() == ".jar":
            return [self.settings.launcher_path or "java", "-jar", str(executable), port_arg]
        return [str(executable), port_arg]

    def ensure_running(self) -> bool:
        if self.client.is_healthy():
            return True

        if not self.settings.auto_start:
            logger.info("Optimizer not reachable at %s and auto-start is disabled", self.client.base_url)
            return False

        if self.resolve_executable() is None:
            logger.warning(
                "Optimizer not reachable and auto-start is misconfigured (executable: %r)",
                self.settings.executable_path
            )
            return False

        return self.start()

    def start(self) -> bool:
        with self._lock:
            # Check-then-act against the same probe ensure_running uses
            if self.client.is_healthy():
                if self._process is not None:
                    self._process.healthy = True
                return True

            if not self.is_running():
                if not self._launch():
                    return False
            else:
                logger.info("Optimizer process %s already starting, waiting for health", self._handle.pid)

            return self._wait_until_healthy()

    def _launch(self) -> bool:
        executable = self.resolve_executable()
        if executable is None:
            return self._fail(f"Cannot resolve optimizer executable: {self.settings.executable_path!r}")

        command = self.build_command(executable)
        logger.info("Starting optimizer: %s", " ".join(command))
        try:
            # stdout/stderr are inherited so the optimizer logs into our stream
            self._handle = self._popen(command, stdout=None, stderr=None, cwd=str(executable.parent))
        except OSError as e:
            self._handle = None
            return self._fail(f"Failed to launch optimizer {executable}: {e}")

        self._process = SupervisedProcess(pid=self._handle.pid, started_at=datetime.now())
        self.last_error = None
        return True

    def _wait_until_healthy(self) -> bool:
        timeout = self.settings.startup_timeout_seconds
        interval = self.settings.health_check_interval_seconds
        started = self._clock()

        while True:
            if self.client.is_healthy():
                self._process.healthy = True
                logger.info(
                    "Optimizer healthy after %.1fs (pid %s)", self._clock() - started, self._process.pid
                )
                return True

            exit_code = self._handle.poll()
            if exit_code is not None:
                self._handle = None
                self._process = None
                return self._fail(f"Optimizer process exited before becoming healthy (exit code {exit_code})")

            if self._clock() - started >= timeout:
                self.stop()
                return self._fail(f"Optimizer did not become healthy within {timeout}s")

            self._sleep(interval)

    def _fail(self, message: str) -> bool:
        logger.error(message)
        self.last_error = ProcessLaunchFailedError(message)
        return False

    def stop(self) -> None:
        """Terminate the owned process. No-op when nothing is owned or it already exited."""
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            self._handle = None
            self._process = None

            if handle.poll() is not None:
                logger.debug("Optimizer process %s already exited", handle.pid)
                return

            logger.info("Stopping optimizer process %s", handle.pid)
            handle.terminate()
            try:
                handle.wait(timeout=self.settings.shutdown_grace_seconds)
            except subprocess.TimeoutExpired:
                logger.warning(
                    "Optimizer process %s ignored terminate for %ss, killing",
                    handle.pid, self.settings.shutdown_grace_seconds
                )
                handle.kill()
                handle.wait()

    def __enter__(self) -> "OptimizerProcessSupervisor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
