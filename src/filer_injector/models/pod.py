"""
Minimal pod model used by the injector.

Only metadata and the two pod spec lists the injector appends to are typed.
Containers and volumes stay as raw dicts: the webhook must merge with any pod
spec, including fields this code has never heard of.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ObjectMeta(BaseModel):
    """Subset of Kubernetes ObjectMeta."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = Field("", description="Object name")
    generate_name: str = Field("", alias="generateName")
    namespace: str = Field("", description="Object namespace")
    labels: dict[str, str] | None = Field(None, description="Object labels")
    annotations: dict[str, str] | None = Field(None, description="Object annotations")


class PodSpec(BaseModel):
    """Subset of Kubernetes PodSpec."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    containers: list[dict[str, Any]] = Field(default_factory=list)
    volumes: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("containers", "volumes", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v


class Pod(BaseModel):
    """Pod as received in an admission request."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)

    @property
    def display_name(self) -> str:
        """Name for logging; pods created by controllers only have generateName."""
        return self.metadata.name or self.metadata.generate_name
