from __future__ import annotations

import threading
from collections import Counter
from typing import Tuple


class MetricsCollector:
    """Small in-memory Prometheus-style metrics collector."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Counter[Tuple[str, str]] = Counter()
        self._latency_buckets: Counter[Tuple[str, str]] = Counter()
        self._bucket_edges = (5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 30000)

    def inc(self, name: str, label: str, n: int = 1) -> None:
        with self._lock:
            self._counters[(name, label)] += n

    def observe_latency(self, operation: str, latency_ms: float) -> None:
        bucket = self._bucket_for(latency_ms)
        with self._lock:
            self._latency_buckets[(operation, bucket)] += 1

    def _bucket_for(self, latency_ms: float) -> str:
        for edge in self._bucket_edges:
            if latency_ms <= edge:
                return str(edge)
        return "+Inf"

    def _render_counter(self, lines: list[str], name: str, label_key: str) -> None:
        lines.append(f"# TYPE {name} counter")
        for (counter, label), value in sorted(self._counters.items()):
            if counter == name:
                lines.append(f'{name}{{{label_key}="{label}"}} {value}')

    def render_prometheus(self) -> str:
        lines: list[str] = []
        with self._lock:
            self._render_counter(lines, "pdp_check_requests_total", "backend")
            self._render_counter(lines, "pdp_check_decisions_total", "decision")

            lines.append("# TYPE pdp_check_latency_ms_bucket counter")
            for (operation, bucket), value in sorted(self._latency_buckets.items()):
                lines.append(
                    f'pdp_check_latency_ms_bucket{{operation="{operation}",le="{bucket}"}} {value}'
                )

        return "\n".join(lines) + "\n"


metrics = MetricsCollector()
