"""Background scanning for the interactive viewer."""

import logging
import threading
from dataclasses import dataclass, field
from queue import Queue

from pyports.models import PortRecord
from pyports.scanner import PortScanner, ScanError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Outcome of one background scan."""

    ports: list[PortRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanWorker:
    """
    Runs a single scan in a daemon thread and pushes the ScanResult to a Queue.

    Failures are reported through the result rather than raised, so the
    consumer thread never has to catch them.
    """

    def __init__(self, scanner: PortScanner, result_queue: Queue[ScanResult]) -> None:
        """
        Initialize the ScanWorker.

        Args:
            scanner: Scanner to run.
            result_queue: Thread-safe queue receiving exactly one result per start().
        """
        self._scanner = scanner
        self._queue = result_queue
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Check if a scan is in progress."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start a scan unless one is already running."""
        if self.is_running:
            return

        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="ScanWorker",
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """
        Wait for the current scan to finish.

        Args:
            timeout: How long to wait (seconds). None waits indefinitely.
        """
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        try:
            result = ScanResult(ports=self._scanner.scan())
        except ScanError as exc:
            logger.error("scan failed: %s", exc)
            result = ScanResult(error=str(exc))
        except Exception as exc:
            # Thread boundary: report instead of dying silently
            logger.exception("unexpected scan failure")
            result = ScanResult(error=f"unexpected error: {exc}")
        self._queue.put(result)
