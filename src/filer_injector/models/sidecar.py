"""
Pydantic models for the sidecar template.

The template is the blueprint every injected sidecar is derived from. It is
loaded once at startup and shared by all admission requests, so every model
here is frozen; specialization always happens on a clone.

Only the fields the injector rewrites are modelled. Everything else a
Kubernetes container or volume may carry (image, command, securityContext,
resources, ...) is kept as extra fields and written back untouched.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

TEMPLATE_MIN_ENV_VARS = 3
TEMPLATE_VOLUME_COUNT = 2


class EnvVar(BaseModel):
    """Environment variable of a sidecar container."""

    model_config = {"populate_by_name": True, "extra": "allow", "frozen": True}

    name: str = Field(..., description="Environment variable name")
    value: str | None = Field(None, description="Literal value")


class VolumeMount(BaseModel):
    """Volume mount of a sidecar container."""

    model_config = {"populate_by_name": True, "extra": "allow", "frozen": True}

    name: str = Field(..., description="Name of the pod volume to mount")
    mount_path: str = Field(
        ..., alias="mountPath", description="Path within the container"
    )


class Container(BaseModel):
    """Sidecar container definition."""

    model_config = {"populate_by_name": True, "extra": "allow", "frozen": True}

    name: str = Field(..., description="Container name")
    args: list[str] = Field(default_factory=list, description="Container arguments")
    env: list[EnvVar] = Field(default_factory=list, description="Environment")
    volume_mounts: list[VolumeMount] = Field(
        default_factory=list, alias="volumeMounts", description="Volume mounts"
    )

    def to_dict(self) -> dict[str, Any]:
        """Render as a Kubernetes container object."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CSIVolumeSource(BaseModel):
    """CSI ephemeral volume source."""

    model_config = {"populate_by_name": True, "extra": "allow", "frozen": True}

    driver: str = Field(..., description="Name of the CSI driver")
    volume_attributes: dict[str, str] = Field(
        default_factory=dict,
        alias="volumeAttributes",
        description="Driver specific attributes",
    )


class Volume(BaseModel):
    """Pod volume contributed by the sidecar."""

    model_config = {"populate_by_name": True, "extra": "allow", "frozen": True}

    name: str = Field(..., description="Volume name")
    empty_dir: dict[str, Any] | None = Field(
        None, alias="emptyDir", description="emptyDir volume source"
    )
    csi: CSIVolumeSource | None = Field(None, description="CSI volume source")

    def to_dict(self) -> dict[str, Any]:
        """Render as a Kubernetes volume object."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SidecarTemplate(BaseModel):
    """
    Blueprint for one filer sidecar.

    Holds exactly one container and two volumes: an emptyDir used to pass
    the FUSE file descriptor, and the CSI ephemeral volume that exposes the
    mount to the rest of the pod.
    """

    model_config = {"populate_by_name": True, "frozen": True}

    containers: list[Container] = Field(..., description="Sidecar containers")
    volumes: list[Volume] = Field(..., description="Sidecar volumes")

    @model_validator(mode="after")
    def validate_structure(self) -> "SidecarTemplate":
        if len(self.containers) != 1:
            raise ValueError(
                f"expected exactly one container, found {len(self.containers)}"
            )
        container = self.containers[0]
        if len(container.env) < TEMPLATE_MIN_ENV_VARS:
            raise ValueError(
                f"container needs at least {TEMPLATE_MIN_ENV_VARS} env entries "
                "(socket path, access key, secret key)"
            )
        if not container.volume_mounts:
            raise ValueError("container needs at least one volume mount")
        if len(self.volumes) != TEMPLATE_VOLUME_COUNT:
            raise ValueError(
                f"expected exactly {TEMPLATE_VOLUME_COUNT} volumes, "
                f"found {len(self.volumes)}"
            )
        if self.volumes[1].csi is None:
            raise ValueError("second volume must be a CSI ephemeral volume")
        return self

    @property
    def container(self) -> Container:
        return self.containers[0]

    @property
    def fd_passing_volume(self) -> Volume:
        return self.volumes[0]

    @property
    def csi_volume(self) -> Volume:
        return self.volumes[1]

    def to_dict(self) -> dict[str, Any]:
        """Render the template in its configuration file shape."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def clone(self) -> "SidecarTemplate":
        """
        Return an independent copy of this template.

        The copy is rebuilt from the rendered structure, so it shares no
        lists or dicts with the original.
        """
        return SidecarTemplate.model_validate(self.to_dict())
