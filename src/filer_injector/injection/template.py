"""
Sidecar template loading and per-credential instantiation.
"""

import hashlib
import logging
import shlex
from pathlib import Path

from pydantic import ValidationError

from filer_injector.constants import (
    CSI_EPHEMERAL_VOLUME_PREFIX,
    ERROR_TEMPLATE_STRUCTURE,
    FD_PASSING_ATTRIBUTE,
    FD_PASSING_VOLUME_PREFIX,
    FUSE_SOCKET_NAME,
    FUSERMOUNT_PROXY_PREFIX,
    GOOFYS_BINARY,
    GOOFYS_FLAGS,
)
from filer_injector.errors import ConfigurationError
from filer_injector.models.credential import CredentialRecord
from filer_injector.models.sidecar import Container, SidecarTemplate, Volume

logger = logging.getLogger(__name__)


def load_sidecar_template(config_file: str | Path) -> SidecarTemplate:
    """
    Load the sidecar template from its JSON configuration file.

    Args:
        config_file: Path to a file shaped ``{"containers": [...], "volumes": [...]}``

    Returns:
        Validated sidecar template

    Raises:
        ConfigurationError: If the file cannot be read or is not a valid template
    """
    try:
        data = Path(config_file).read_bytes()
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read sidecar configuration {config_file}: {e}", cause=e
        ) from e

    logger.info(f"New configuration: sha256sum {hashlib.sha256(data).hexdigest()}")

    try:
        return SidecarTemplate.model_validate_json(data)
    except ValidationError as e:
        raise ConfigurationError(ERROR_TEMPLATE_STRUCTURE.format(e), cause=e) from e


def build_sidecar_args(credential: CredentialRecord) -> list[str]:
    """
    Shell arguments that mount the bucket with goofys and keep the sidecar alive.

    The trailing sleep matters: an exiting sidecar is reported as failed.
    """
    flags = GOOFYS_FLAGS.format(endpoint=shlex.quote(credential.endpoint_url))
    bucket = shlex.quote(f"{credential.mount_path}/")
    return [
        "-c",
        f"{GOOFYS_BINARY} {flags} {bucket} /tmp; echo sleeping...; sleep infinity",
    ]


def fd_passing_volume_name(name_token: str, namespace: str) -> str:
    return f"{FD_PASSING_VOLUME_PREFIX}{name_token}-{namespace}"


def csi_ephemeral_volume_name(name_token: str, namespace: str) -> str:
    return f"{CSI_EPHEMERAL_VOLUME_PREFIX}{name_token}-{namespace}"


def instantiate(
    template: SidecarTemplate,
    credential: CredentialRecord,
    name_token: str,
    namespace: str,
) -> tuple[Container, list[Volume]]:
    """
    Specialize the sidecar template for one credential.

    The emptyDir volume and the sidecar's first volume mount share one name,
    and the CSI volume points back at that name through its
    ``fdPassingEmptyDirName`` attribute.

    Args:
        template: Shared sidecar template, left untouched
        credential: Valid credential to mount
        name_token: Unique name from :func:`make_name_token`
        namespace: Namespace of the pod

    Returns:
        Tuple of (sidecar container, [fd passing volume, CSI volume])
    """
    sidecar = template.clone()
    proxy_dir = f"{FUSERMOUNT_PROXY_PREFIX}{name_token}-{namespace}"
    fd_passing_name = fd_passing_volume_name(name_token, namespace)

    env = list(sidecar.container.env)
    env[0] = env[0].model_copy(update={"value": f"{proxy_dir}/{FUSE_SOCKET_NAME}"})
    env[1] = env[1].model_copy(update={"value": credential.access_key})
    env[2] = env[2].model_copy(update={"value": credential.secret_key})

    mounts = list(sidecar.container.volume_mounts)
    mounts[0] = mounts[0].model_copy(
        update={"name": fd_passing_name, "mount_path": proxy_dir}
    )

    container = sidecar.container.model_copy(
        update={
            "name": name_token,
            "args": build_sidecar_args(credential),
            "env": env,
            "volume_mounts": mounts,
        }
    )

    fd_passing_volume = sidecar.fd_passing_volume.model_copy(
        update={"name": fd_passing_name}
    )

    csi_source = sidecar.csi_volume.csi
    csi_source = csi_source.model_copy(
        update={
            "volume_attributes": {
                **csi_source.volume_attributes,
                FD_PASSING_ATTRIBUTE: fd_passing_name,
            }
        }
    )
    csi_volume = sidecar.csi_volume.model_copy(
        update={
            "name": csi_ephemeral_volume_name(name_token, namespace),
            "csi": csi_source,
        }
    )

    return container, [fd_passing_volume, csi_volume]
