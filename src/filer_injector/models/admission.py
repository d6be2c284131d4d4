"""
Pydantic models for the admission.k8s.io/v1 AdmissionReview envelope.
"""

from typing import Any

from pydantic import BaseModel, Field

from filer_injector.constants import ADMISSION_API_VERSION, ADMISSION_KIND


class GroupVersionKind(BaseModel):
    """Kind of the object under admission."""

    group: str = ""
    version: str = ""
    kind: str = ""


class UserInfo(BaseModel):
    """Requesting user as reported by the API server."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    username: str = ""
    uid: str = ""
    groups: list[str] = Field(default_factory=list)


class AdmissionRequest(BaseModel):
    """Admission request for a single object."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    uid: str = Field(..., description="Identifier echoed back in the response")
    kind: GroupVersionKind = Field(default_factory=GroupVersionKind)
    namespace: str = ""
    name: str = ""
    operation: str = ""
    user_info: UserInfo = Field(default_factory=UserInfo, alias="userInfo")
    obj: dict[str, Any] | None = Field(None, alias="object")


class AdmissionStatus(BaseModel):
    """Result details of a failed admission."""

    message: str = ""


class AdmissionResponse(BaseModel):
    """Admission decision, optionally carrying a patch."""

    model_config = {"populate_by_name": True}

    uid: str = ""
    allowed: bool = False
    status: AdmissionStatus | None = None
    patch: str | None = Field(None, description="Base64 encoded JSON Patch")
    patch_type: str | None = Field(None, alias="patchType")

    @classmethod
    def deny(cls, message: str, uid: str = "") -> "AdmissionResponse":
        return cls(uid=uid, allowed=False, status=AdmissionStatus(message=message))


class AdmissionReview(BaseModel):
    """Envelope exchanged with the API server."""

    model_config = {"populate_by_name": True}

    api_version: str = Field(ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = ADMISSION_KIND
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None
