import logging
import threading
import time
from typing import Callable, Dict, Optional

from hashcrack.errors import ScanTimeoutError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, object]], None]


class ProgressTracker:
    """
    Counts attempts and reports progress at most once per interval.

    Reports go to the log and, when given, to callback as a dict with
    attempts, total and percent (None if the total is unknown). A timeout
    in seconds sets a deadline; passing it aborts the scan with ScanTimeoutError.
    """

    def __init__(self, total: Optional[int] = None, interval: float = 1.0,
                 callback: Optional[ProgressCallback] = None, timeout: Optional[float] = None):
        self.total = total
        self.interval = interval
        self.callback = callback
        self.timeout = timeout
        self.attempts = 0
        self.start_time = time.monotonic()
        self.deadline = self.start_time + timeout if timeout else None
        self.last_report = self.start_time
        self._lock = threading.Lock()

    def increment(self, n: int = 1) -> None:
        with self._lock:
            self.attempts += n
            now = time.monotonic()
            if self.deadline is not None and now >= self.deadline:
                raise ScanTimeoutError(self.timeout, self.attempts)
            due = (now - self.last_report) >= self.interval
            if due:
                self.last_report = now
        if due:
            self.report()

    def snapshot(self) -> Dict[str, object]:
        percent = None
        if self.total:
            percent = min(100.0, (self.attempts / self.total) * 100.0)
        elif self.total == 0:
            percent = 100.0
        return {"attempts": self.attempts, "total": self.total, "percent": percent}

    def format_rate(self) -> str:
        elapsed = time.monotonic() - self.start_time
        rate = self.attempts / max(elapsed, 1e-9)
        if not self.total or rate <= 0:
            return f"{rate:.1f} H/s"
        sec = max(self.total - self.attempts, 0) / rate
        h = int(sec // 3600)
        m = int((sec % 3600) // 60)
        s = int(sec % 60)
        return f"{rate:.1f} H/s, ETA: {h:02d}:{m:02d}:{s:02d}"

    def report(self) -> None:
        evt = self.snapshot()
        if evt["percent"] is not None:
            logger.info("Progress: %d/%d (%.2f%%) | %s",
                        evt["attempts"], evt["total"], evt["percent"], self.format_rate())
        else:
            logger.info("Progress: %d attempts | %s", evt["attempts"], self.format_rate())
        if self.callback:
            self.callback(evt)

    def finish(self) -> None:
        self.report()
