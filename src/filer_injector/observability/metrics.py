"""
Prometheus metrics for the filer injector.

Admission outcomes, injected sidecars, skipped credentials and the time spent
building patches are exported from a dedicated registry on /metrics.
"""

import logging
import time
from contextlib import contextmanager

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from filer_injector.utils.http_server import HTTPServer

logger = logging.getLogger(__name__)

_metrics_registry: CollectorRegistry | None = None

# Registered lazily in get_metrics_registry
ADMISSION_REQUESTS_TOTAL = Counter(
    "filer_injector_admission_requests_total",
    "Admission requests answered, by outcome (patched, skipped, denied)",
    ["result"],
    registry=None,
)

SIDECARS_INJECTED_TOTAL = Counter(
    "filer_injector_sidecars_injected_total",
    "Filer sidecars added to pods",
    ["namespace"],
    registry=None,
)

CREDENTIALS_SKIPPED_TOTAL = Counter(
    "filer_injector_credentials_skipped_total",
    "Filer connection secrets ignored while building a patch",
    ["namespace", "reason"],
    registry=None,
)

PATCH_DURATION = Histogram(
    "filer_injector_patch_duration_seconds",
    "Time spent listing filer secrets and building the patch",
    ["namespace"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=None,
)

_METRICS = (
    ADMISSION_REQUESTS_TOTAL,
    SIDECARS_INJECTED_TOTAL,
    CREDENTIALS_SKIPPED_TOTAL,
    PATCH_DURATION,
)


def get_metrics_registry() -> CollectorRegistry:
    """Return the injector registry, creating it on first use."""
    global _metrics_registry

    if _metrics_registry is None:
        registry = CollectorRegistry()
        for metric in _METRICS:
            registry.register(metric)
        _metrics_registry = registry

    return _metrics_registry


class MetricsCollector:
    """Thin recording API over the module level metrics."""

    def __init__(self):
        self.registry = get_metrics_registry()

    def record_admission(self, result: str) -> None:
        ADMISSION_REQUESTS_TOTAL.labels(result=result).inc()

    def record_sidecar_injected(self, namespace: str) -> None:
        SIDECARS_INJECTED_TOTAL.labels(namespace=namespace).inc()

    def record_credential_skipped(self, namespace: str, reason: str) -> None:
        CREDENTIALS_SKIPPED_TOTAL.labels(namespace=namespace, reason=reason).inc()

    @contextmanager
    def track_patch(self, namespace: str):
        """Observe the duration of the enclosed block, even when it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            PATCH_DURATION.labels(namespace=namespace).observe(
                time.perf_counter() - started
            )


class MetricsServer(HTTPServer):
    """Plain HTTP endpoint for Prometheus scraping."""

    name = "Metrics server"

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        super().__init__(host=host, port=port)

    def add_routes(self, router: web.UrlDispatcher) -> None:
        router.add_get("/metrics", self._metrics_handler)
        router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: web.Request) -> web.Response:
        try:
            payload = generate_latest(get_metrics_registry())
        except Exception as e:
            logger.exception("Failed to render metrics")
            return web.Response(
                text=f"Error generating metrics: {type(e).__name__}", status=500
            )
        # CONTENT_TYPE_LATEST carries a charset, which content_type= rejects
        return web.Response(body=payload, headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def _healthz_handler(self, request: web.Request) -> web.Response:
        return web.Response(text="ok")


metrics_collector = MetricsCollector()
