#!/usr/bin/env python3
"""
Filer Injector - Main entry point for the mutating admission webhook.

The webhook mounts filer buckets into notebook pods:
- Watches pod creation through a MutatingWebhookConfiguration
- Adds one goofys sidecar per filer connection secret in the pod's namespace
- Mounts each bucket under /home/jovyan/filers in the notebook container

Usage:
    python -m filer_injector.main
    # Or through the console script:
    filer-injector

Environment Variables:
    SIDECAR_CONFIG_FILE: Path to the sidecar template (JSON)
    TLS_CERT_FILE / TLS_KEY_FILE: Webhook serving certificate and key
    WEBHOOK_PORT: Port of the admission webhook (default 8443)
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import asyncio
import logging
import signal
import sys
from functools import partial

from filer_injector.errors import ConfigurationError
from filer_injector.injection import load_sidecar_template
from filer_injector.observability.logging import setup_structured_logging
from filer_injector.observability.metrics import MetricsServer
from filer_injector.settings import settings
from filer_injector.utils.kubernetes import (
    get_kubernetes_client,
    list_filer_credentials,
)
from filer_injector.webhooks.server import build_webhook_server


def configure_logging() -> None:
    """Configure structured logging for the webhook based on settings."""
    setup_structured_logging(
        log_level=settings.log_level.upper(),
        enable_json_formatting=settings.json_logs,
        correlation_id_enabled=settings.correlation_ids,
        log_health_probes=settings.log_health_probes,
    )


async def run() -> None:
    """
    Load configuration, serve admission requests until SIGTERM or SIGINT.
    """
    logging.info("Starting filer injector...")

    template = load_sidecar_template(settings.sidecar_config_file)
    api_client = get_kubernetes_client()
    list_credentials = partial(list_filer_credentials, api_client=api_client)

    webhook_server = build_webhook_server(
        template=template,
        list_credentials=list_credentials,
        host=settings.webhook_host,
        port=settings.webhook_port,
        cert_file=settings.tls_cert_file,
        key_file=settings.tls_key_file,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_event.set)

    metrics_server: MetricsServer | None = None
    await webhook_server.start()
    try:
        if settings.metrics_enabled:
            try:
                metrics_server = MetricsServer(
                    port=settings.metrics_port, host=settings.metrics_host
                )
                await metrics_server.start()
            except Exception as e:
                logging.error(f"Failed to start metrics server: {e}")
                # Don't fail startup if metrics server fails
                logging.warning("Continuing without metrics server")
                metrics_server = None

        await stop_event.wait()
        logging.info("Got OS shutdown signal, shutting down webhook server gracefully...")
    finally:
        if metrics_server:
            await metrics_server.stop()
        await webhook_server.stop()


def main() -> None:
    """Main entry point for the webhook."""
    configure_logging()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except ConfigurationError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Webhook failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
