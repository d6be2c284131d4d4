"""
Mutation policy for notebook pods.
"""

import logging

from filer_injector.constants import (
    INJECT_ANNOTATION,
    INJECT_DISABLED_VALUES,
    NOTEBOOK_LABEL,
    STATUS_ANNOTATION,
    STATUS_INJECTED,
)
from filer_injector.models.pod import ObjectMeta

logger = logging.getLogger(__name__)


def is_mutation_required(metadata: ObjectMeta) -> bool:
    """
    Check whether a pod should receive filer sidecars.

    Logic:
    1. Only pods labelled as notebooks are considered.
    2. Pods already marked as injected are never patched again.
    3. The inject annotation can opt a pod out; injection is the default.

    Args:
        metadata: Metadata of the pod under admission

    Returns:
        True if the pod must be mutated
    """
    labels = metadata.labels or {}
    if NOTEBOOK_LABEL not in labels:
        logger.info(
            f"Skip mutation for {metadata.namespace}/{metadata.name}: not a notebook pod",
            extra={"namespace": metadata.namespace, "resource_name": metadata.name},
        )
        return False

    annotations = metadata.annotations or {}
    status = annotations.get(STATUS_ANNOTATION, "")

    if status.lower() == STATUS_INJECTED:
        required = False
    else:
        inject = annotations.get(INJECT_ANNOTATION, "")
        required = inject.lower() not in INJECT_DISABLED_VALUES

    logger.info(
        f"Mutation policy for {metadata.namespace}/{metadata.name}: "
        f"status: {status!r} required: {required}",
        extra={"namespace": metadata.namespace, "resource_name": metadata.name},
    )
    return required
