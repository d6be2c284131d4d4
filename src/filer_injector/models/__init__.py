"""
Pydantic models for the filer injector.
"""

from .admission import AdmissionRequest, AdmissionResponse, AdmissionReview
from .credential import CredentialRecord
from .patch import PatchOperation, dump_patch, load_patch
from .pod import Pod
from .sidecar import Container, SidecarTemplate, Volume

__all__ = [
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "Container",
    "CredentialRecord",
    "PatchOperation",
    "Pod",
    "SidecarTemplate",
    "Volume",
    "dump_patch",
    "load_patch",
]
