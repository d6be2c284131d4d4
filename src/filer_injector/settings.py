"""Webhook settings read from the environment with pydantic-settings.

The deployment sets these through the webhook Deployment manifest; a local
``.env`` file is honoured for development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Webhook configuration.

    Defaults match the paths mounted by the webhook Deployment.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sidecar template
    sidecar_config_file: str = Field(
        default="/etc/webhook/config/sidecarconfig.json",
        validation_alias="SIDECAR_CONFIG_FILE",
        description="Path to the sidecar injector configuration file",
    )

    # Admission webhook server
    webhook_host: str = Field(
        default="0.0.0.0",
        validation_alias="WEBHOOK_HOST",
        description="Host address to bind the admission webhook server",
    )
    webhook_port: int = Field(
        default=8443,
        validation_alias="WEBHOOK_PORT",
        description="Port for the admission webhook server",
    )
    tls_cert_file: str = Field(
        default="/etc/webhook/certs/cert.pem",
        validation_alias="TLS_CERT_FILE",
        description="Path to the x509 certificate for https",
    )
    tls_key_file: str = Field(
        default="/etc/webhook/certs/key.pem",
        validation_alias="TLS_KEY_FILE",
        description="Path to the x509 private key matching the certificate",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root log level name",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Emit one JSON object per log line",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Tag log lines with the admission request UID",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Keep access log lines for /healthz and /metrics",
    )

    # Prometheus endpoint
    metrics_enabled: bool = Field(
        default=True,
        validation_alias="METRICS_ENABLED",
        description="Serve Prometheus metrics",
    )
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port of the /metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Interface the /metrics endpoint binds to",
    )


settings = Settings()
