"""
Injector error hierarchy with categorization and user guidance.

This module defines the error types used throughout the filer injector. None
of them are retried internally: skippable errors drop a single credential,
every other error fails the admission request it was raised in.
"""


class InjectorError(Exception):
    """
    Root of the injector errors.

    ``category`` groups errors for logs and metrics, ``user_action`` tells the
    namespace owner or the cluster operator how to fix the cause.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if not self.user_action:
            return message
        return f"{message}\nAction required: {self.user_action}"


class CredentialValidationError(InjectorError):
    """A credential secret lacks one of its required fields."""

    def __init__(
        self,
        secret_name: str,
        missing_fields: list[str],
        user_action: str | None = None,
    ):
        self.secret_name = secret_name
        self.missing_fields = missing_fields
        super().__init__(
            message=(
                f"Secret '{secret_name}' is missing required fields: "
                f"{', '.join(missing_fields)}"
            ),
            category="validation",
            user_action=user_action
            or "Populate S3_BUCKET, S3_URL, S3_ACCESS and S3_SECRET in the secret",
        )


class AdmissionDecodeError(InjectorError):
    """The admission review or the object it carries could not be decoded."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message=message, category="decode", cause=cause)


class ExternalServiceError(InjectorError):
    """Error communicating with external services."""

    def __init__(
        self,
        service: str,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        action = user_action or f"Check {service} connectivity and credentials"
        super().__init__(
            message=f"{service} error: {message}",
            category="external",
            user_action=action,
            cause=cause,
        )


class KubernetesAPIError(ExternalServiceError):
    """Error communicating with Kubernetes API."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        if reason:
            message = f"{message} (reason: {reason})"
        self.reason = reason

        super().__init__(
            service="Kubernetes API",
            message=message,
            user_action="Check RBAC permissions and cluster connectivity",
            cause=cause,
        )


class ConfigurationError(InjectorError):
    """Error in webhook or sidecar template configuration."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="configuration",
            user_action=user_action or "Review and correct configuration",
            cause=cause,
        )
