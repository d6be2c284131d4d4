"""
Codec for the AdmissionReview envelope.

One codec instance is built at startup and handed to the webhook server;
there is no module level codec state.
"""

import base64
from dataclasses import dataclass

from pydantic import ValidationError

from filer_injector.constants import ADMISSION_API_VERSION, ADMISSION_KIND
from filer_injector.errors import AdmissionDecodeError
from filer_injector.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
)
from filer_injector.models.pod import Pod


@dataclass(frozen=True)
class AdmissionCodec:
    """Decodes admission reviews and encodes admission responses."""

    api_version: str = ADMISSION_API_VERSION
    kind: str = ADMISSION_KIND

    def decode_review(self, body: bytes) -> AdmissionReview:
        """
        Decode a request body into an AdmissionReview.

        Raises:
            AdmissionDecodeError: If the body is not a usable AdmissionReview
        """
        try:
            review = AdmissionReview.model_validate_json(body)
        except ValidationError as e:
            raise AdmissionDecodeError(f"Can't decode body: {e}", cause=e) from e

        if review.api_version != self.api_version or review.kind != self.kind:
            raise AdmissionDecodeError(
                f"Unsupported review {review.api_version}/{review.kind}, "
                f"expect {self.api_version}/{self.kind}"
            )
        if review.request is None:
            raise AdmissionDecodeError("AdmissionReview carries no request")
        return review

    def decode_pod(self, request: AdmissionRequest) -> Pod:
        """
        Decode the pod carried by an admission request.

        Raises:
            AdmissionDecodeError: If the object is missing or not a pod
        """
        if request.obj is None:
            raise AdmissionDecodeError("Admission request carries no object")
        try:
            return Pod.model_validate(request.obj)
        except ValidationError as e:
            raise AdmissionDecodeError(
                f"Could not unmarshal raw object: {e}", cause=e
            ) from e

    def encode_patch(self, patch: bytes) -> str:
        return base64.b64encode(patch).decode("ascii")

    def encode_response(self, response: AdmissionResponse) -> bytes:
        """Wrap a response in an AdmissionReview and serialize it."""
        review = AdmissionReview(
            api_version=self.api_version, kind=self.kind, response=response
        )
        return review.model_dump_json(by_alias=True, exclude_none=True).encode()
