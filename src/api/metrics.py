"""Per-endpoint call counters and latency tracking.

One MetricsService lives on ``app.state`` next to the engine; it is not a
process-wide singleton.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator


@dataclass
class _EndpointStats:
    count: int = 0
    total_latency_ms: float = 0.0
    min_latency_ms: float = float("inf")
    max_latency_ms: float = 0.0

    def record(self, latency_ms: float) -> None:
        self.count += 1
        self.total_latency_ms += latency_ms
        self.min_latency_ms = min(self.min_latency_ms, latency_ms)
        self.max_latency_ms = max(self.max_latency_ms, latency_ms)

    def to_dict(self) -> Dict:
        return {
            "count": self.count,
            "average_latency_ms": round(self.total_latency_ms / self.count, 2) if self.count else 0.0,
            "min_latency_ms": round(self.min_latency_ms, 2) if self.count else 0.0,
            "max_latency_ms": round(self.max_latency_ms, 2),
        }


class MetricsService:
    """Thread-safe counters for recommendation entry points."""

    def __init__(self):
        """Initialize metrics counters."""
        self._lock = threading.Lock()
        self._endpoints: Dict[str, _EndpointStats] = {}

    def record_inference(self, endpoint: str, latency_ms: float) -> None:
        """Record one call of an endpoint with its latency.

        Args:
            endpoint: Entry point name, e.g. "blend".
            latency_ms: Latency in milliseconds.
        """
        with self._lock:
            self._endpoints.setdefault(endpoint, _EndpointStats()).record(latency_ms)

    @contextmanager
    def track(self, endpoint: str) -> Iterator[None]:
        """Time the enclosed block and record it for the endpoint."""
        start_time = time.time()
        try:
            yield
        finally:
            self.record_inference(endpoint, (time.time() - start_time) * 1000)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with ``inference_count`` (all endpoints) and an
            ``endpoints`` mapping of per-endpoint count and latency figures.
        """
        with self._lock:
            return {
                "inference_count": sum(stats.count for stats in self._endpoints.values()),
                "endpoints": {name: stats.to_dict() for name, stats in sorted(self._endpoints.items())},
            }
