"""Shared test fixtures for apim-provision tests."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from apim_provision.azure_api import ApimClient, Credential, TokenCache
from apim_provision.settings import ApimSettings

FAR_FUTURE = 4_102_444_800  # 2100-01-01


@pytest.fixture(autouse=True)
def _mock_identity():
    """Prevent real Azure credential calls in every test."""
    mock_token = MagicMock()
    mock_token.token = "fake-token"
    mock_token.expires_on = FAR_FUTURE
    with (
        patch("apim_provision.azure_api._auth.DefaultAzureCredential") as default_cred,
        patch("apim_provision.azure_api._auth.ManagedIdentityCredential") as msi_cred,
    ):
        default_cred.return_value.get_token.return_value = mock_token
        msi_cred.return_value.get_token.return_value = mock_token
        yield default_cred


@pytest.fixture()
def settings() -> ApimSettings:
    return ApimSettings(
        azurerm_subscription_id="sub-1",
        azurerm_resource_group="rg-1",
        azurerm_apim="apim-1",
        _env_file=None,
    )


@pytest.fixture()
def token_cache() -> TokenCache:
    """A cache holding a credential that never expires during tests."""
    return TokenCache(Credential(token="fake-token", expires_on=FAR_FUTURE))


@pytest.fixture()
def apim_client(token_cache, settings) -> ApimClient:
    return ApimClient(token_cache, settings)


@pytest.fixture()
def mock_client() -> MagicMock:
    """An ApimClient double for service-level tests."""
    return MagicMock(spec=ApimClient)


@pytest.fixture()
def make_response():
    """Return a factory for ``requests.Response`` doubles."""

    def _make(status_code: int = 200, payload: object = None, method: str = "GET") -> MagicMock:
        resp = MagicMock()
        resp.status_code = status_code
        resp.ok = status_code < 400
        resp.json.return_value = payload if payload is not None else {}
        resp.content = b"" if status_code == 204 else b"{}"
        resp.text = "" if payload is None else str(payload)
        resp.reason = "Reason"
        resp.url = "https://management.azure.com/fake"
        resp.request.method = method
        return resp

    return _make
