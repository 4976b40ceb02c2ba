"""Authentication helpers for Azure ARM API calls."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential

from apim_provision.errors import AuthenticationError

logger = logging.getLogger(__name__)

AZURE_MGMT_URL = "https://management.azure.com"
ARM_SCOPE = f"{AZURE_MGMT_URL}/.default"


@dataclass(frozen=True)
class Credential:
    """A bearer token, its expiry (epoch seconds) and the login that issued it."""

    token: str
    expires_on: int
    login: TokenCredential | None = None

    def is_valid(self, now: float | None = None) -> bool:
        """Return *True* while the token has not yet expired."""
        current = time.time() if now is None else now
        return self.expires_on > current


def _login(use_managed_identity: bool = False) -> TokenCredential:
    """Return the azure-identity credential used to obtain ARM tokens.

    App Service deployments log in through the managed identity; everywhere
    else the usual ``DefaultAzureCredential`` chain applies.
    """
    if use_managed_identity:
        return ManagedIdentityCredential()
    return DefaultAzureCredential()


def ensure_valid_credential(
    existing: Credential | None = None,
    *,
    login: Callable[[], TokenCredential] = _login,
) -> Credential:
    """Return *existing* when still valid, otherwise log in and fetch a new token.

    Failures of the login or of the token fetch are raised as
    :class:`AuthenticationError`; nothing is retried here.
    """
    now = time.time()
    logger.debug(
        "ensure_valid_credential() token expires: %s now: %d",
        existing.expires_on if existing else "n/a",
        now,
    )
    if existing is not None and existing.is_valid(now):
        return existing

    try:
        login_credential = login()
        access_token = login_credential.get_token(ARM_SCOPE)
    except Exception as exc:
        logger.debug("ensure_valid_credential() error: %s", exc)
        raise AuthenticationError(f"Unable to obtain an ARM access token: {exc}") from exc

    return Credential(
        token=access_token.token,
        expires_on=access_token.expires_on,
        login=login_credential,
    )


class TokenCache:
    """Holds the last credential and replaces it once it expires.

    Pass one instance to every client that needs ARM tokens; the held
    credential is swapped for a new one, never mutated.
    """

    def __init__(
        self,
        credential: Credential | None = None,
        login: Callable[[], TokenCredential] = _login,
    ) -> None:
        self._credential = credential
        self._login = login

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def get(self) -> Credential:
        """Return a valid credential, refreshing the cached one if needed."""
        self._credential = ensure_valid_credential(self._credential, login=self._login)
        return self._credential

    def headers(self) -> dict[str, str]:
        """Return authorization headers built from a valid credential."""
        return {
            "Authorization": f"Bearer {self.get().token}",
            "Content-Type": "application/json",
        }
