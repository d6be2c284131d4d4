"""
Unit tests for MetricsServer HTTP endpoints and the metrics collector.

Uses ``aiohttp.test_utils`` to drive the server's aiohttp application
without binding the configured port.
"""

from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from filer_injector.observability.metrics import (
    MetricsCollector,
    MetricsServer,
    get_metrics_registry,
)


@pytest.fixture
def metrics_server():
    """Create a fresh MetricsServer instance per test."""
    return MetricsServer(port=0)


@pytest.fixture
async def client(metrics_server):
    """Create an aiohttp TestClient from the MetricsServer app."""
    server = TestServer(metrics_server.app)
    async with TestClient(server) as cli:
        yield cli


def _sample(name: str, labels: dict[str, str]) -> float:
    return get_metrics_registry().get_sample_value(name, labels) or 0.0


# ---------------------------------------------------------------------------
# /metrics endpoint
# ---------------------------------------------------------------------------
class TestMetricsEndpoint:
    """Tests for ``GET /metrics``."""

    @pytest.mark.asyncio
    async def test_metrics_returns_200(self, client):
        """Prometheus scrape endpoint returns 200 with the injector metrics."""
        resp = await client.get("/metrics")
        assert resp.status == 200
        assert resp.headers["Content-Type"].startswith("text/plain")
        body = await resp.text()
        assert "filer_injector_admission_requests_total" in body
        assert "filer_injector_sidecars_injected_total" in body
        assert "filer_injector_patch_duration_seconds" in body

    @pytest.mark.asyncio
    async def test_metrics_error_returns_500(self, client):
        """When generate_latest raises, the handler returns 500."""
        with patch(
            "filer_injector.observability.metrics.generate_latest",
            side_effect=RuntimeError("boom"),
        ):
            resp = await client.get("/metrics")
        assert resp.status == 500
        body = await resp.text()
        assert "RuntimeError" in body


# ---------------------------------------------------------------------------
# /healthz endpoint
# ---------------------------------------------------------------------------
class TestHealthzEndpoint:
    """Tests for ``GET /healthz`` (K8s liveness probe)."""

    @pytest.mark.asyncio
    async def test_healthz_returns_200_ok(self, client):
        resp = await client.get("/healthz")
        assert resp.status == 200
        assert await resp.text() == "ok"


# ---------------------------------------------------------------------------
# Collector
# ---------------------------------------------------------------------------
class TestMetricsCollector:
    """Tests for MetricsCollector.

    Metrics are process wide, so assertions compare values before and after.
    """

    def test_record_admission(self):
        collector = MetricsCollector()
        before = _sample("filer_injector_admission_requests_total", {"result": "patched"})
        collector.record_admission("patched")
        after = _sample("filer_injector_admission_requests_total", {"result": "patched"})
        assert after == before + 1

    def test_record_sidecar_injected(self):
        collector = MetricsCollector()
        labels = {"namespace": "metrics-test"}
        before = _sample("filer_injector_sidecars_injected_total", labels)
        collector.record_sidecar_injected("metrics-test")
        collector.record_sidecar_injected("metrics-test")
        assert _sample("filer_injector_sidecars_injected_total", labels) == before + 2

    def test_record_credential_skipped(self):
        collector = MetricsCollector()
        labels = {"namespace": "metrics-test", "reason": "missing_fields"}
        before = _sample("filer_injector_credentials_skipped_total", labels)
        collector.record_credential_skipped("metrics-test", "missing_fields")
        assert _sample("filer_injector_credentials_skipped_total", labels) == before + 1

    def test_track_patch_observes_on_error(self):
        collector = MetricsCollector()
        labels = {"namespace": "metrics-test"}
        before = _sample("filer_injector_patch_duration_seconds_count", labels)
        with pytest.raises(ValueError), collector.track_patch("metrics-test"):
            raise ValueError("boom")
        assert _sample("filer_injector_patch_duration_seconds_count", labels) == before + 1

    def test_registry_is_shared(self):
        assert get_metrics_registry() is get_metrics_registry()
        assert MetricsCollector().registry is get_metrics_registry()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------
class TestServerLifecycle:
    """Tests for start/stop of the background server."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        server = MetricsServer(port=0, host="127.0.0.1")
        async with server:
            assert server.runner is not None
        assert server.runner is None

    @pytest.mark.asyncio
    async def test_bind_failure_cleans_up(self):
        server = MetricsServer(port=0, host="127.0.0.1")
        with (
            patch("aiohttp.web.TCPSite.start", side_effect=OSError("address in use")),
            pytest.raises(OSError),
        ):
            await server.start()
        assert server.runner is None

    def test_url(self):
        assert MetricsServer(port=8081, host="0.0.0.0").url == "http://0.0.0.0:8081"
