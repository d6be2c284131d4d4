"""
Error handling module for the filer injector.

This module provides an error hierarchy with clear categorization for the
different ways an admission request can fail.
"""

from .injector_errors import (
    AdmissionDecodeError,
    ConfigurationError,
    CredentialValidationError,
    ExternalServiceError,
    InjectorError,
    KubernetesAPIError,
)

__all__ = [
    "InjectorError",
    "CredentialValidationError",
    "AdmissionDecodeError",
    "ExternalServiceError",
    "KubernetesAPIError",
    "ConfigurationError",
]
