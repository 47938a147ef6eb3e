"""
API performance metrics tracking.

Keeps a bounded in-memory window of request metrics and aggregates latency
percentiles, status codes and error rates per endpoint.
"""

import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional


@dataclass
class RequestMetric:
    """Single request metric."""
    endpoint: str
    method: str
    status_code: int
    latency_ms: float
    timestamp: float = 0.0


def _percentile(sorted_values: List[float], fraction: float) -> float:
    if not sorted_values:
        return 0.0
    idx = min(int(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[idx]


class APIMetricsCollector:
    """Collects and aggregates API metrics."""

    def __init__(self, max_metrics: int = 10000):
        self.max_metrics = max_metrics
        self._metrics: Deque[RequestMetric] = deque(maxlen=max_metrics)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._metrics)

    def record_request(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        latency_ms: float,
    ) -> None:
        metric = RequestMetric(
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            latency_ms=latency_ms,
            timestamp=time.time(),
        )
        with self._lock:
            self._metrics.append(metric)

    def get_summary(self, window_seconds: Optional[float] = None) -> Dict[str, Any]:
        """
        Aggregate recorded metrics per endpoint.

        Args:
            window_seconds: Only consider metrics newer than this many seconds

        Returns:
            Dict with total_requests, window_seconds and per-endpoint stats
        """
        with self._lock:
            metrics = list(self._metrics)
        if window_seconds:
            cutoff = time.time() - window_seconds
            metrics = [m for m in metrics if m.timestamp >= cutoff]

        by_endpoint: Dict[str, List[RequestMetric]] = defaultdict(list)
        for metric in metrics:
            by_endpoint[metric.endpoint].append(metric)

        endpoints: Dict[str, Any] = {}
        for endpoint, items in by_endpoint.items():
            latencies = sorted(m.latency_ms for m in items)
            status_codes: Dict[int, int] = defaultdict(int)
            for m in items:
                status_codes[m.status_code] += 1
            errors = sum(count for code, count in status_codes.items() if code >= 400)
            endpoints[endpoint] = {
                "count": len(items),
                "avg_latency_ms": sum(latencies) / len(latencies),
                "p50_latency_ms": _percentile(latencies, 0.50),
                "p95_latency_ms": _percentile(latencies, 0.95),
                "p99_latency_ms": _percentile(latencies, 0.99),
                "error_rate": errors / len(items),
                "status_codes": dict(status_codes),
            }

        return {
            "total_requests": len(metrics),
            "window_seconds": window_seconds,
            "endpoints": endpoints,
        }

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()


_metrics_collector = APIMetricsCollector()


def get_metrics_collector() -> APIMetricsCollector:
    """Get the process-wide metrics collector."""
    return _metrics_collector


def record_api_request(endpoint: str, method: str, status_code: int, latency_ms: float) -> None:
    _metrics_collector.record_request(endpoint, method, status_code, latency_ms)


def get_api_metrics_summary(window_seconds: Optional[float] = None) -> Dict[str, Any]:
    return _metrics_collector.get_summary(window_seconds)
