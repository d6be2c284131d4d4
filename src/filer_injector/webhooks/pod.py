"""
Mutating admission handler for notebook pods.

Injects one goofys sidecar per filer connection secret of the pod's
namespace. Failures never crash the server: they deny the single request
with a message, and the webhook failurePolicy decides what the cluster does.
"""

import asyncio
import logging
from collections.abc import Callable

from filer_injector.constants import PATCH_TYPE_JSON, STATUS_ANNOTATION, STATUS_INJECTED
from filer_injector.errors import AdmissionDecodeError, InjectorError
from filer_injector.injection import build_patch, is_mutation_required
from filer_injector.models.admission import AdmissionRequest, AdmissionResponse
from filer_injector.models.credential import CredentialRecord
from filer_injector.models.sidecar import SidecarTemplate
from filer_injector.observability.logging import set_correlation_id
from filer_injector.observability.metrics import metrics_collector
from filer_injector.webhooks.codec import AdmissionCodec

logger = logging.getLogger(__name__)

CredentialLister = Callable[[str], list[CredentialRecord]]


async def mutate_pod(
    request: AdmissionRequest,
    template: SidecarTemplate,
    codec: AdmissionCodec,
    list_credentials: CredentialLister,
) -> AdmissionResponse:
    """
    Decide on one pod admission request.

    Args:
        request: Admission request carrying the pod
        template: Shared sidecar template
        codec: Codec used to decode the pod and encode the patch
        list_credentials: Blocking callable returning the filer credentials
            of a namespace; runs in a worker thread

    Returns:
        Admission response; denied with a message if the request failed
    """
    set_correlation_id(request.uid)

    try:
        pod = codec.decode_pod(request)
    except AdmissionDecodeError as e:
        logger.warning(f"Could not decode pod: {e}", extra={"error_type": "decode"})
        metrics_collector.record_admission("denied")
        return AdmissionResponse.deny(str(e), uid=request.uid)

    if not pod.metadata.namespace:
        pod.metadata.namespace = request.namespace
    namespace = pod.metadata.namespace

    logger.info(
        f"AdmissionReview for Kind={request.kind.kind}, Namespace={request.namespace} "
        f"Name={request.name} ({pod.display_name}) UID={request.uid} "
        f"operation={request.operation} user={request.user_info.username}",
        extra={
            "namespace": namespace,
            "resource_name": pod.display_name,
            "admission_uid": request.uid,
            "operation": request.operation,
        },
    )

    if not is_mutation_required(pod.metadata):
        logger.info(
            f"Skipping mutation for {namespace}/{pod.display_name} due to policy check"
        )
        metrics_collector.record_admission("skipped")
        return AdmissionResponse(uid=request.uid, allowed=True)

    status_annotations = {STATUS_ANNOTATION: STATUS_INJECTED}
    try:
        with metrics_collector.track_patch(namespace):
            credentials = await asyncio.to_thread(list_credentials, namespace)
            patch = build_patch(pod, template, status_annotations, credentials)
    except InjectorError as e:
        logger.error(
            f"Failed to build patch for {namespace}/{pod.display_name}: {e}",
            extra={
                "namespace": namespace,
                "resource_name": pod.display_name,
                "error_type": type(e).__name__,
            },
        )
        metrics_collector.record_admission("denied")
        return AdmissionResponse.deny(str(e), uid=request.uid)
    except Exception as e:
        logger.error(
            f"Unexpected error building patch for {namespace}/{pod.display_name}: {e}",
            exc_info=True,
            extra={
                "namespace": namespace,
                "resource_name": pod.display_name,
                "error_type": type(e).__name__,
            },
        )
        metrics_collector.record_admission("denied")
        return AdmissionResponse.deny(
            f"Internal error building patch: {type(e).__name__}", uid=request.uid
        )

    # The patch embeds S3 keys, only its size is logged
    logger.info(
        f"AdmissionResponse for {namespace}/{pod.display_name}: "
        f"patch of {len(patch)} bytes",
        extra={"namespace": namespace, "resource_name": pod.display_name},
    )
    metrics_collector.record_admission("patched")
    return AdmissionResponse(
        uid=request.uid,
        allowed=True,
        patch=codec.encode_patch(patch),
        patch_type=PATCH_TYPE_JSON,
    )
