from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from hub_search.search.driver import SizeReport


class MetricsRegistry:
    _instance = None

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.assignments_total = Counter("hub_search_assignments_total", "Assignments evaluated", ["size"], registry=registry)
        self.accepted_total = Counter("hub_search_accepted_total", "Assignments with a positive whole result", ["size"], registry=registry)
        self.rejections_total = Counter("hub_search_rejections_total", "Rejected assignments", ["reason"], registry=registry)
        self.values_found = Gauge("hub_search_values_found", "Distinct values in the solution table", registry=registry)
        self.size_duration_seconds = Histogram(
            "hub_search_size_duration_seconds",
            "Wall time per expression size",
            buckets=[0.01, 0.1, 1.0, 10.0, 60.0, 600.0, 3600.0],
            registry=registry,
        )

    @classmethod
    def get(cls):
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def observe_size(self, report: "SizeReport", *, values_found: int) -> None:
        label = str(report.size)
        self.assignments_total.labels(size=label).inc(report.assignments)
        self.accepted_total.labels(size=label).inc(report.accepted)
        for reason, count in report.rejections.items():
            self.rejections_total.labels(reason=reason).inc(count)
        self.values_found.set(values_found)
        self.size_duration_seconds.observe(report.duration_s)


def start_metrics_server(port: int) -> None:
    from prometheus_client import start_http_server

    start_http_server(int(port))
