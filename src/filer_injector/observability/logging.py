"""
Structured logging for the filer injector.

Every line logged while an admission request is handled carries the request
UID as its correlation ID. One request can be followed through the handler,
the orchestrator and the secret lister, and matched against the API server
audit log.
"""

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime

# Admission UID of the request being handled, empty outside of a request
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

NO_CORRELATION_ID = "-"

# Endpoints polled by kubelet probes and Prometheus
HEALTH_PROBE_PATHS = ("/healthz", "/metrics")

ACCESS_LOGGER = "aiohttp.access"

# Record attributes passed through ``extra=`` that end up in JSON output
STRUCTURED_FIELDS = (
    "namespace",
    "resource_name",
    "operation",
    "admission_uid",
    "sidecar_name",
    "secret_name",
    "duration",
    "error_type",
)

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
PLAIN_FORMAT_WITH_ID = (
    "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
)

QUIET_LOGGERS = ("kubernetes", "urllib3", "aiohttp.server", "aiohttp.web")


class HealthProbeFilter(logging.Filter):
    """Drop access log lines for probe and scrape endpoints.

    Admission calls on /mutate are still logged.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(ACCESS_LOGGER):
            return True
        message = record.getMessage()
        return not any(f" {path} " in message for path in HEALTH_PROBE_PATHS)


class CorrelationIDFilter(logging.Filter):
    """Attach the current admission UID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }
        entry.update(
            {
                field: getattr(record, field)
                for field in STRUCTURED_FIELDS
                if hasattr(record, field)
            }
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def set_correlation_id(uid: str) -> None:
    correlation_id.set(uid)


def get_correlation_id() -> str:
    return correlation_id.get()


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
    log_health_probes: bool = False,
) -> None:
    """
    Replace the root handlers with a single configured stream handler.

    Args:
        log_level: Level name; unknown names fall back to INFO
        enable_json_formatting: Emit JSON lines instead of plain text
        correlation_id_enabled: Tag records with the admission UID
        log_health_probes: Keep access log lines for /healthz and /metrics
    """
    handler = logging.StreamHandler()
    if enable_json_formatting:
        handler.setFormatter(StructuredFormatter())
    elif correlation_id_enabled:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT_WITH_ID))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())
    if not log_health_probes:
        handler.addFilter(HealthProbeFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(
        logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
