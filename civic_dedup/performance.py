"""Timing metrics for the duplicate checker.

Durations are kept per operation name (``duplicate_check``,
``fetch_candidates``, ``score_candidates``...) so the submission latency
budget can be watched in the logs. Callers measure their own elapsed time and
``record`` it, so concurrent checks never share a running timer.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from civic_dedup.utils.logger import log_info


class PerformanceMetrics:
    """Track operation durations."""

    def __init__(self, max_samples: int = 100):
        self.metrics: Dict[str, list] = {}
        self.max_samples = max_samples

    def record(self, operation: str, duration: float) -> None:
        """Record one duration (seconds), keeping the most recent samples."""
        samples = self.metrics.setdefault(operation, [])
        samples.append(duration)
        if len(samples) > self.max_samples:
            del samples[: len(samples) - self.max_samples]

    @contextmanager
    def timer(self, operation: str) -> Iterator[None]:
        """Time the enclosed block, recording it even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation, time.perf_counter() - start)

    def get_operation_stats(self, operation: str) -> Dict[str, float]:
        """Get statistics for a specific operation."""
        durations = self.metrics.get(operation)
        if not durations:
            return {}

        return {
            "count": len(durations),
            "avg_ms": round(sum(durations) * 1000 / len(durations), 2),
            "min_ms": round(min(durations) * 1000, 2),
            "max_ms": round(max(durations) * 1000, 2),
            "total_ms": round(sum(durations) * 1000, 2),
        }

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get statistics for all operations."""
        return {op: self.get_operation_stats(op) for op in self.metrics}

    def reset(self) -> None:
        self.metrics.clear()

    def log_performance_summary(self) -> None:
        """Log a performance summary."""
        stats = self.get_all_stats()
        if not stats:
            return

        log_info("Performance metrics summary")
        for operation, op_stats in stats.items():
            if op_stats:
                log_info(
                    f"  {operation}: {op_stats['count']} calls, "
                    f"avg {op_stats['avg_ms']}ms, "
                    f"min {op_stats['min_ms']}ms, "
                    f"max {op_stats['max_ms']}ms"
                )


performance_metrics = PerformanceMetrics()


def get_performance_metrics() -> PerformanceMetrics:
    """Get the global performance metrics instance."""
    return performance_metrics
