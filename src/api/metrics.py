"""Metrics service for tracking API performance.

Singleton service to track call counts, popularity fallbacks and latency
per recommendation operation.
"""

import threading
from typing import Dict


class _OperationStats:
    def __init__(self):
        self.count = 0
        self.fallback_count = 0
        self.total_latency_ms = 0.0
        self.min_latency_ms = float("inf")
        self.max_latency_ms = 0.0

    def as_dict(self) -> Dict:
        avg_latency = self.total_latency_ms / self.count if self.count > 0 else 0.0
        min_latency = self.min_latency_ms if self.count > 0 else 0.0
        return {
            "count": self.count,
            "fallback_count": self.fallback_count,
            "average_latency_ms": round(avg_latency, 2),
            "min_latency_ms": round(min_latency, 2),
            "max_latency_ms": round(self.max_latency_ms, 2),
        }


class MetricsService:
    """Singleton service for tracking API metrics.

    Thread-safe counters and latency tracking keyed by operation name
    (``recommendations``, ``similar_products``, ``similar_users``).
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize metrics counters."""
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._operations: Dict[str, _OperationStats] = {}
        self._initialized = True

    def record(self, operation: str, latency_ms: float, fallback: bool = False) -> None:
        """Record one call of an operation.

        Args:
            operation: Operation name
            latency_ms: Latency in milliseconds
            fallback: Whether the popularity fallback produced the result
        """
        with self._lock:
            stats = self._operations.setdefault(operation, _OperationStats())
            stats.count += 1
            stats.total_latency_ms += latency_ms
            if fallback:
                stats.fallback_count += 1

            if latency_ms < stats.min_latency_ms:
                stats.min_latency_ms = latency_ms

            if latency_ms > stats.max_latency_ms:
                stats.max_latency_ms = latency_ms

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with a ``total_calls`` count and, under ``operations``,
            per-operation count, fallback_count and min/avg/max latency.
        """
        with self._lock:
            return {
                "total_calls": sum(s.count for s in self._operations.values()),
                "operations": {
                    name: stats.as_dict() for name, stats in self._operations.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._operations = {}


# Global singleton instance
metrics_service = MetricsService()
