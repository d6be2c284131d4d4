"""
JSON Patch operation model.

Operations are kept as plain JSON values so a patch can be serialized
without knowing which model produced each value.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, TypeAdapter


class PatchOperation(BaseModel):
    """A single RFC 6902 operation."""

    op: Literal["add", "replace"] = Field(..., description="Operation type")
    path: str = Field(..., description="JSON Pointer into the pod")
    value: Any = Field(None, description="Value to add or replace with")


_PATCH_ADAPTER = TypeAdapter(list[PatchOperation])


def dump_patch(operations: list[PatchOperation]) -> bytes:
    """Serialize operations to a JSON Patch document."""
    return _PATCH_ADAPTER.dump_json(operations, exclude_none=True)


def load_patch(data: bytes | str) -> list[PatchOperation]:
    """Parse a JSON Patch document produced by :func:`dump_patch`."""
    return _PATCH_ADAPTER.validate_json(data)
