"""
Patch orchestration for one admission request.

Drives naming, template instantiation and the patch builders for every filer
credential of the pod's namespace, and serializes the resulting JSON Patch.
"""

import logging
from dataclasses import dataclass
from typing import Any

from filer_injector.errors import CredentialValidationError
from filer_injector.injection.naming import make_name_token
from filer_injector.injection.patch import (
    add_container,
    add_volume,
    filer_volume_mount,
    is_notebook_container,
    update_annotation,
    update_working_volume_mounts,
)
from filer_injector.injection.template import instantiate
from filer_injector.models.credential import CredentialRecord
from filer_injector.models.patch import PatchOperation, dump_patch
from filer_injector.models.pod import Pod
from filer_injector.models.sidecar import SidecarTemplate
from filer_injector.observability.metrics import metrics_collector

logger = logging.getLogger(__name__)


@dataclass
class _PodView:
    """
    The pod as it will look once the operations built so far are applied.

    Builders are fed from this view so that a list or map created for one
    credential is appended to, not recreated, for the next.
    """

    containers: list[dict[str, Any]]
    volumes: list[dict[str, Any]]
    annotations: dict[str, str] | None
    own_container_count: int

    @classmethod
    def of(cls, pod: Pod) -> "_PodView":
        annotations = pod.metadata.annotations
        return cls(
            containers=[
                {**container, "volumeMounts": list(container.get("volumeMounts") or [])}
                for container in pod.spec.containers
            ],
            volumes=list(pod.spec.volumes),
            annotations=dict(annotations) if annotations is not None else None,
            own_container_count=len(pod.spec.containers),
        )

    @property
    def own_containers(self) -> list[dict[str, Any]]:
        return self.containers[: self.own_container_count]

    def record_mount(self, mount: dict[str, Any]) -> None:
        for container in self.own_containers:
            if is_notebook_container(container):
                container["volumeMounts"].append(mount)


def build_patch_operations(
    pod: Pod,
    template: SidecarTemplate,
    status_annotations: dict[str, str],
    credentials: list[CredentialRecord],
) -> list[PatchOperation]:
    """
    Build the patch operations injecting one sidecar per valid credential.

    Args:
        pod: Pod under admission
        template: Shared sidecar template
        status_annotations: Annotations marking the pod as processed
        credentials: Filer credentials of the pod's namespace, in listing order

    Returns:
        Ordered patch operations; empty when no credential is usable
    """
    namespace = pod.metadata.namespace
    view = _PodView.of(pod)
    used_names: set[str] = set()
    is_first_mount = True
    patch: list[PatchOperation] = []

    for credential in credentials:
        try:
            credential.validate_required()
        except CredentialValidationError as e:
            logger.warning(
                f"Skipping secret {credential.source_name} in namespace {namespace}: {e}",
                extra={
                    "namespace": namespace,
                    "secret_name": credential.source_name,
                    "operation": "credential_skip",
                },
            )
            metrics_collector.record_credential_skipped(namespace, "missing_fields")
            continue

        filer_name = credential.filer_name
        name_token = make_name_token(filer_name, credential.mount_path, used_names)
        container, volumes = instantiate(template, credential, name_token, namespace)
        csi_volume_name = volumes[1].name

        patch.extend(add_container(view.containers, [container]))
        view.containers.append(container.to_dict())

        patch.extend(add_volume(view.volumes, volumes))
        view.volumes.extend(volume.to_dict() for volume in volumes)

        patch.extend(update_annotation(view.annotations, status_annotations))
        view.annotations = {**(view.annotations or {}), **status_annotations}

        mount_ops = update_working_volume_mounts(
            view.own_containers,
            csi_volume_name,
            credential.mount_path,
            filer_name,
            is_first_mount,
        )
        patch.extend(mount_ops)
        if mount_ops:
            view.record_mount(
                filer_volume_mount(csi_volume_name, credential.mount_path, filer_name)
            )
            is_first_mount = False

        logger.info(
            f"Injecting sidecar {name_token} for secret {credential.source_name}",
            extra={
                "namespace": namespace,
                "resource_name": pod.display_name,
                "sidecar_name": name_token,
                "secret_name": credential.source_name,
            },
        )
        metrics_collector.record_sidecar_injected(namespace)

    return patch


def build_patch(
    pod: Pod,
    template: SidecarTemplate,
    status_annotations: dict[str, str],
    credentials: list[CredentialRecord],
) -> bytes:
    """
    Build the serialized JSON Patch for a pod.

    Returns:
        JSON Patch document; ``[]`` when no credential is usable
    """
    return dump_patch(
        build_patch_operations(pod, template, status_annotations, credentials)
    )
