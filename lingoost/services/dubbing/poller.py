"""Background thread that polls active dubbing jobs."""

from __future__ import annotations

import threading
from typing import Optional

from ... import logging_manager as log_mgr
from .orchestrator import DubbingOrchestrator

logger = log_mgr.get_logger().getChild("services.dubbing.poller")


class DubJobPoller:
    """Periodically call :meth:`DubbingOrchestrator.poll_active`."""

    def __init__(
        self,
        orchestrator: DubbingOrchestrator,
        *,
        interval_seconds: float = 5.0,
    ) -> None:
        self._orchestrator = orchestrator
        self._interval = max(0.05, interval_seconds)
        self._shutdown = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._cycles = 0

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def cycles(self) -> int:
        with self._lock:
            return self._cycles

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._shutdown.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="DubJobPoller",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            "Dubbing status poller started",
            extra={"event": "dubbing.poller.started", "interval": self._interval},
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._shutdown.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None
        logger.info("Dubbing status poller stopped", extra={"event": "dubbing.poller.stopped"})

    def run_once(self) -> int:
        """Run a single polling cycle and return the number of jobs polled."""
        with log_mgr.correlation_scope():
            try:
                polled = self._orchestrator.poll_active()
            except Exception:
                logger.exception(
                    "Dubbing poll cycle failed", extra={"event": "dubbing.poller.cycle_failed"}
                )
                polled = []
        with self._lock:
            self._cycles += 1
        return len(polled)

    def _run(self) -> None:
        while not self._shutdown.is_set():
            self.run_once()
            if self._shutdown.wait(timeout=self._interval):
                break


__all__ = ["DubJobPoller"]
