"""
Filer credential records.

A credential record is the decoded content of one filer connection secret.
Records are built per admission request and discarded with it.
"""

from pydantic import BaseModel, Field

from filer_injector.constants import (
    SECRET_KEY_ACCESS,
    SECRET_KEY_BUCKET,
    SECRET_KEY_SECRET,
    SECRET_KEY_URL,
    UNKNOWN_FILER_NAME,
)
from filer_injector.errors import CredentialValidationError


class CredentialRecord(BaseModel):
    """Connection details for one S3 bucket exposed by a filer."""

    model_config = {"populate_by_name": True, "frozen": True}

    source_name: str = Field(
        ..., alias="sourceName", description="Name of the originating secret"
    )
    mount_path: str = Field(
        "",
        alias="mountPath",
        description="Bucket to mount, optionally followed by sub directories",
    )
    endpoint_url: str = Field("", alias="endpointURL", description="S3 endpoint")
    access_key: str = Field("", alias="accessKey", repr=False)
    secret_key: str = Field("", alias="secretKey", repr=False)

    @classmethod
    def from_secret_data(cls, name: str, data: dict[str, str]) -> "CredentialRecord":
        """Build a record from a secret's decoded data."""
        return cls(
            source_name=name,
            mount_path=data.get(SECRET_KEY_BUCKET, ""),
            endpoint_url=data.get(SECRET_KEY_URL, ""),
            access_key=data.get(SECRET_KEY_ACCESS, ""),
            secret_key=data.get(SECRET_KEY_SECRET, ""),
        )

    @property
    def filer_name(self) -> str:
        """
        Short filer identifier taken from the secret name.

        ``fld9-filer-conn-secret`` yields ``fld9``.
        """
        parts = self.source_name.split("-")
        if len(parts) > 1:
            return parts[0]
        return UNKNOWN_FILER_NAME

    def missing_fields(self) -> list[str]:
        required = {
            SECRET_KEY_BUCKET: self.mount_path,
            SECRET_KEY_URL: self.endpoint_url,
            SECRET_KEY_ACCESS: self.access_key,
            SECRET_KEY_SECRET: self.secret_key,
        }
        return [key for key, value in required.items() if not value]

    def validate_required(self) -> None:
        """
        Ensure all connection fields are populated.

        Raises:
            CredentialValidationError: If any required field is empty
        """
        missing = self.missing_fields()
        if missing:
            raise CredentialValidationError(self.source_name, missing)
