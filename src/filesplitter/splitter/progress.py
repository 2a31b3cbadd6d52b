"""Progress tracking for split jobs.

Workers report each written part; the tracker aggregates bytes and parts
across threads and logs at intervals with an ETA.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Thread-safe byte and part counters with rate and ETA.

    Logs every `log_interval` parts.
    """

    def __init__(self, total_bytes: int, log_interval: int = 50):
        """Initialize progress tracker.

        Args:
            total_bytes: Total number of bytes to split
            log_interval: Log progress every N parts
        """
        self.total_bytes = total_bytes
        self.log_interval = log_interval

        self.bytes_done = 0
        self.parts_done = 0
        self.start_time = time.time()
        self._lock = threading.Lock()

    def advance(self, byte_count: int) -> None:
        """Record one written part of `byte_count` bytes."""
        with self._lock:
            self.bytes_done += byte_count
            self.parts_done += 1
            should_log = self.log_interval > 0 and self.parts_done % self.log_interval == 0

        if should_log:
            self._log_progress()

    def get_progress(self) -> dict:
        """Get current progress statistics.

        Returns:
            Dict with progress metrics
        """
        with self._lock:
            bytes_done = self.bytes_done
            parts_done = self.parts_done

        elapsed_time = time.time() - self.start_time
        rate = bytes_done / elapsed_time if elapsed_time > 0 else 0.0

        if self.total_bytes > 0:
            percentage = (bytes_done / self.total_bytes) * 100
        else:
            percentage = 100.0

        remaining_bytes = self.total_bytes - bytes_done
        eta_seconds = remaining_bytes / rate if rate > 0 and remaining_bytes > 0 else 0.0

        return {
            "total_bytes": self.total_bytes,
            "bytes_done": bytes_done,
            "remaining_bytes": remaining_bytes,
            "parts_done": parts_done,
            "percentage": percentage,
            "elapsed_seconds": elapsed_time,
            "rate_bytes_per_sec": rate,
            "eta_seconds": eta_seconds,
        }

    def _log_progress(self) -> None:
        progress = self.get_progress()
        rate_mb = progress['rate_bytes_per_sec'] / (1024 * 1024)
        logger.info(
            f"Progress: {progress['bytes_done']}/{self.total_bytes} bytes "
            f"({progress['percentage']:.1f}%) - {progress['parts_done']} parts - "
            f"{rate_mb:.1f} MB/sec - ETA: {format_duration(progress['eta_seconds'])}"
        )

    def log_final_summary(self) -> None:
        """Log final progress summary."""
        progress = self.get_progress()
        logger.info(
            f"Split complete: {progress['parts_done']} parts, {progress['bytes_done']} bytes "
            f"in {format_duration(progress['elapsed_seconds'])}"
        )


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time (e.g. "2h 15m 30s")."""
    if seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
