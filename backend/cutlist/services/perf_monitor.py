"""Performance monitoring utilities for the cutting-list calculation pipeline."""
import time
import logging
import threading
import functools
from typing import Any, Callable, Dict

logger = logging.getLogger("cutlist-api.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time for synchronous functions.

    Usage::

        @timed
        def my_function():
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                "function timed",
                extra={
                    "function": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper


class PerformanceTracker:
    """
    Thread-safe in-memory tracker for calculation-level metrics.

    Tracks:
    - Total calculations run
    - Cumulative and average calculation duration
    - Sections processed vs. skipped (no matching configuration)
    - Total stock bars planned
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._calculations: int = 0
        self._total_duration_ms: float = 0.0
        self._sections_processed: int = 0
        self._sections_skipped: int = 0
        self._bars_planned: int = 0

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_calculation(
        self,
        duration_ms: float,
        sections_processed: int,
        sections_skipped: int,
        bars_planned: int,
    ) -> None:
        """Call once when a calculate_materials run finishes."""
        with self._lock:
            self._calculations += 1
            self._total_duration_ms += duration_ms
            self._sections_processed += sections_processed
            self._sections_skipped += sections_skipped
            self._bars_planned += bars_planned

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            calculations           : int
            avg_duration_ms        : float  (0 if none run)
            sections_processed     : int
            sections_skipped       : int
            bars_planned           : int
        """
        with self._lock:
            avg = (
                round(self._total_duration_ms / self._calculations, 2)
                if self._calculations > 0
                else 0.0
            )
            return {
                "calculations": self._calculations,
                "avg_duration_ms": avg,
                "sections_processed": self._sections_processed,
                "sections_skipped": self._sections_skipped,
                "bars_planned": self._bars_planned,
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._calculations = 0
            self._total_duration_ms = 0.0
            self._sections_processed = 0
            self._sections_skipped = 0
            self._bars_planned = 0


# Module-level singleton, shared by the orchestrator and /metrics.
tracker = PerformanceTracker()
