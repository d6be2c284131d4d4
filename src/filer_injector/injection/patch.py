"""
JSON Patch builders for pod mutation.

Every builder is append-only: existing containers, volumes, mounts and
annotations are never removed or reordered. A list that does not exist yet is
created with its first element, every further element is appended with ``-``.
"""

from typing import Any

from filer_injector.constants import (
    ANNOTATIONS_PATH,
    CONTAINERS_PATH,
    FILERS_MOUNT_BASE,
    MOUNT_PROPAGATION,
    NOTEBOOK_ENV_MARKER,
    VOLUMES_PATH,
)
from filer_injector.models.patch import PatchOperation
from filer_injector.models.sidecar import Container, Volume


def escape_pointer_token(token: str) -> str:
    """Escape a key for use as a JSON Pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def _add_items(
    target: list[Any], added: list[dict[str, Any]], base_path: str
) -> list[PatchOperation]:
    patch = []
    first = len(target) == 0
    for item in added:
        if first:
            first = False
            patch.append(PatchOperation(op="add", path=base_path, value=[item]))
        else:
            patch.append(PatchOperation(op="add", path=f"{base_path}/-", value=item))
    return patch


def add_container(
    target: list[dict[str, Any]],
    added: list[Container],
    base_path: str = CONTAINERS_PATH,
) -> list[PatchOperation]:
    """Append sidecar containers to the pod's container list."""
    return _add_items(target, [container.to_dict() for container in added], base_path)


def add_volume(
    target: list[dict[str, Any]],
    added: list[Volume],
    base_path: str = VOLUMES_PATH,
) -> list[PatchOperation]:
    """Append sidecar volumes to the pod's volume list."""
    return _add_items(target, [volume.to_dict() for volume in added], base_path)


def update_annotation(
    target: dict[str, str] | None, added: dict[str, str]
) -> list[PatchOperation]:
    """
    Merge annotations into the pod metadata.

    An absent annotation map is created holding all added keys. Otherwise
    each key is patched individually, so annotations already on the pod
    are preserved.

    Args:
        target: Current pod annotations, None if the pod has none
        added: Annotations to set

    Returns:
        Patch operations
    """
    if not target:
        if not added:
            return []
        return [PatchOperation(op="add", path=ANNOTATIONS_PATH, value=dict(added))]

    patch = []
    for key, value in added.items():
        path = f"{ANNOTATIONS_PATH}/{escape_pointer_token(key)}"
        op = "replace" if target.get(key) else "add"
        patch.append(PatchOperation(op=op, path=path, value=value))
    return patch


def is_notebook_container(container: dict[str, Any]) -> bool:
    """Notebook containers are recognised by their NB_PREFIX variable."""
    return any(
        env.get("name") == NOTEBOOK_ENV_MARKER for env in container.get("env") or []
    )


def filer_volume_mount(
    volume_name: str, bucket_mount: str, filer_name: str
) -> dict[str, Any]:
    """Volume mount exposing one filer bucket inside the notebook container."""
    return {
        "name": volume_name,
        "mountPath": f"{FILERS_MOUNT_BASE}/{filer_name}/{bucket_mount}",
        "readOnly": False,
        "mountPropagation": MOUNT_PROPAGATION,
    }


def update_working_volume_mounts(
    target_containers: list[dict[str, Any]],
    volume_name: str,
    bucket_mount: str,
    filer_name: str,
    is_first: bool,
) -> list[PatchOperation]:
    """
    Mount the CSI ephemeral volume into every notebook container of the pod.

    Args:
        target_containers: The pod's own containers (sidecars excluded)
        volume_name: Name of the CSI ephemeral volume to mount
        bucket_mount: Raw bucket path from the credential
        filer_name: Filer identifier, used as a directory level
        is_first: True while no mount has been added in this request; a
            container without mounts then gets a new single-element list

    Returns:
        Patch operations
    """
    patch = []
    for index, container in enumerate(target_containers):
        if not is_notebook_container(container):
            continue
        mount = filer_volume_mount(volume_name, bucket_mount, filer_name)
        path = f"{CONTAINERS_PATH}/{index}/volumeMounts"
        if is_first and not container.get("volumeMounts"):
            patch.append(PatchOperation(op="add", path=path, value=[mount]))
        else:
            patch.append(PatchOperation(op="add", path=f"{path}/-", value=mount))
    return patch
