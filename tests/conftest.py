"""Shared pytest fixtures for filer injector tests."""

import pytest

from filer_injector.injection.template import load_sidecar_template
from filer_injector.models.credential import CredentialRecord
from filer_injector.models.sidecar import SidecarTemplate
from tests.fixtures.injector_resources import SIDECAR_CONFIG_PATH, filer_secret_data


@pytest.fixture
def sidecar_template() -> SidecarTemplate:
    """Sidecar template loaded from the sample configuration file."""
    return load_sidecar_template(SIDECAR_CONFIG_PATH)


@pytest.fixture
def make_credential():
    """Factory for credential records."""

    def _make(source_name: str = "acct-filer-conn-secret", **data) -> CredentialRecord:
        return CredentialRecord.from_secret_data(source_name, filer_secret_data(**data))

    return _make
