"""Prometheus metrics, one registry per running service."""

import time

from fastapi import Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from prometheus_client import gc_collector, platform_collector, process_collector

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


class ServiceMetrics:
    def __init__(self, service: str):
        self.service = service
        self.registry = CollectorRegistry()

        # Process/platform/GC collectors, the python counterpart of default metrics
        process_collector.ProcessCollector(registry=self.registry)
        platform_collector.PlatformCollector(registry=self.registry)
        gc_collector.GCCollector(registry=self.registry)

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "route", "status_code"],
            registry=self.registry,
        )
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )
        self.stock_level = Gauge(
            "stock_level",
            "Current stock level by product",
            ["product_id", "product_name"],
            registry=self.registry,
        )
        self._stock_names: dict = {}
        self.stock_movements_total = Counter(
            "stock_movements_total",
            "Stock movements registered, by type",
            ["movement_type"],
            registry=self.registry,
        )

    def observe_request(self, method: str, route: str, status_code: int, duration: float) -> None:
        labels = (method, route, str(status_code))
        self.http_request_duration.labels(*labels).observe(duration)
        self.http_requests_total.labels(*labels).inc()

    def set_stock_level(self, product_id: int, product_name: str, quantity: int) -> None:
        pid, name = str(product_id), product_name or ""
        previous = self._stock_names.get(pid)
        if previous is not None and previous != name:
            # Renamed product, drop the series under the old name
            self.stock_level.remove(pid, previous)
        self._stock_names[pid] = name
        self.stock_level.labels(pid, name).set(quantity)

    def replace_stock_levels(self, rows) -> None:
        """Reset the gauge to exactly the given stock rows.

        Products deleted since the last listing lose their series.
        """
        self.stock_level.clear()
        self._stock_names.clear()
        for row in rows:
            self.set_stock_level(row["product_id"], row["product_name"], row["quantity"])

    def render(self) -> bytes:
        return generate_latest(self.registry)


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.url.path


async def metrics_middleware(request: Request, call_next):
    metrics: ServiceMetrics = request.app.state.metrics
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        metrics.observe_request(
            request.method, _route_label(request), status_code, time.perf_counter() - start
        )
