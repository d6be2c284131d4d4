"""Unit tests for structured logging."""

import json
import logging
import sys

import pytest

from filer_injector.observability.logging import (
    CorrelationIDFilter,
    HealthProbeFilter,
    StructuredFormatter,
    get_correlation_id,
    set_correlation_id,
    setup_structured_logging,
)


def _record(message: str, name: str = "filer_injector.test", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Keep setup_structured_logging from leaking into other tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_json_fields(self):
        record = _record(
            "Injecting sidecar",
            correlation_id="uid-1",
            namespace="jane-doe",
            sidecar_name="acct-data",
        )
        data = json.loads(StructuredFormatter().format(record))
        assert data["message"] == "Injecting sidecar"
        assert data["level"] == "INFO"
        assert data["logger"] == "filer_injector.test"
        assert data["correlation_id"] == "uid-1"
        assert data["namespace"] == "jane-doe"
        assert data["sidecar_name"] == "acct-data"
        assert "secret_name" not in data

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("failed")
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestFilters:
    """Tests for the logging filters."""

    def test_health_probe_access_lines_dropped(self):
        probe_filter = HealthProbeFilter()
        healthz = _record('10.0.0.1 "GET /healthz HTTP/1.1" 200', name="aiohttp.access")
        metrics = _record('10.0.0.1 "GET /metrics HTTP/1.1" 200', name="aiohttp.access")
        mutate = _record('10.0.0.1 "POST /mutate HTTP/1.1" 200', name="aiohttp.access")
        assert probe_filter.filter(healthz) is False
        assert probe_filter.filter(metrics) is False
        assert probe_filter.filter(mutate) is True

    def test_application_lines_kept(self):
        record = _record("Metrics server listening on http://0.0.0.0:8081/metrics")
        assert HealthProbeFilter().filter(record) is True

    def test_correlation_id_attached(self):
        set_correlation_id("uid-7")
        record = _record("hello")
        assert CorrelationIDFilter().filter(record) is True
        assert record.correlation_id == "uid-7"
        assert get_correlation_id() == "uid-7"

    def test_placeholder_outside_request(self):
        set_correlation_id("")
        record = _record("startup")
        CorrelationIDFilter().filter(record)
        assert record.correlation_id == "-"


class TestSetupStructuredLogging:
    """Tests for setup_structured_logging."""

    def test_json_handler(self, restore_root_logger):
        setup_structured_logging(log_level="DEBUG", enable_json_formatting=True)
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        handler = restore_root_logger.handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)
        filter_types = {type(f) for f in handler.filters}
        assert filter_types == {CorrelationIDFilter, HealthProbeFilter}

    def test_plain_handler_with_probes(self, restore_root_logger):
        setup_structured_logging(
            log_level="warning",
            enable_json_formatting=False,
            correlation_id_enabled=False,
            log_health_probes=True,
        )
        assert restore_root_logger.level == logging.WARNING
        handler = restore_root_logger.handlers[0]
        assert not isinstance(handler.formatter, StructuredFormatter)
        assert handler.filters == []

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        setup_structured_logging(log_level="chatty")
        assert restore_root_logger.level == logging.INFO
