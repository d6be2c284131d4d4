"""
Kubernetes utilities for the filer injector.

This module provides the Kubernetes API client configuration and the lookup
of filer connection secrets for a namespace.
"""

import base64
import binascii
import logging

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from filer_injector.constants import FILER_SECRET_MARKER
from filer_injector.errors import KubernetesAPIError
from filer_injector.models.credential import CredentialRecord

logger = logging.getLogger(__name__)


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    Tries in-cluster configuration first (when running in a pod) and falls
    back to the local kubeconfig for development.

    Returns:
        Configured Kubernetes API client
    """
    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


def decode_secret_data(data: dict[str, str] | None) -> dict[str, str]:
    """
    Decode the base64 values of a secret's data.

    Values that are not valid base64 or UTF-8 decode to an empty string, so
    the credential built from them fails validation instead of the request.
    """
    decoded = {}
    for key, value in (data or {}).items():
        try:
            decoded[key] = base64.b64decode(value, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning(f"Secret key {key} does not hold valid base64 text")
            decoded[key] = ""
    return decoded


def is_filer_secret(name: str) -> bool:
    return FILER_SECRET_MARKER in name


def list_filer_credentials(
    namespace: str, api_client: client.ApiClient | None = None
) -> list[CredentialRecord]:
    """
    List the filer credentials available in a namespace.

    Args:
        namespace: Namespace of the pod under admission
        api_client: Kubernetes API client, configured on demand if omitted

    Returns:
        One record per filer connection secret, in listing order

    Raises:
        KubernetesAPIError: If the secrets cannot be listed
    """
    try:
        k8s = api_client or get_kubernetes_client()
        core_api = client.CoreV1Api(k8s)
        secrets = core_api.list_namespaced_secret(namespace=namespace)
    except ApiException as e:
        logger.error(f"API error listing secrets in {namespace}: {e}")
        raise KubernetesAPIError(
            f"Failed to list secrets in namespace {namespace}",
            reason=e.reason,
            cause=e,
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error listing secrets in {namespace}: {e}")
        raise KubernetesAPIError(
            f"Unexpected error listing secrets in namespace {namespace}: {e}",
            cause=e,
        ) from e

    credentials = [
        CredentialRecord.from_secret_data(
            secret.metadata.name, decode_secret_data(secret.data)
        )
        for secret in secrets.items
        if is_filer_secret(secret.metadata.name)
    ]
    logger.debug(
        f"Found {len(credentials)} filer secrets in namespace {namespace}",
        extra={"namespace": namespace},
    )
    return credentials
