"""API Management administrative REST operations.

Each method issues a single ARM call against the service instance selected by
the settings (subscription, resource group, service name) and returns the
parsed model.  Non-2xx responses raise :class:`~apim_provision.errors.ApimError`.

See https://learn.microsoft.com/rest/api/apimanagement/
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from apim_provision.azure_api._auth import AZURE_MGMT_URL, TokenCache
from apim_provision.azure_api._errors import _raise_for_status, _transport_error
from apim_provision.azure_api._pagination import _first_page, _paginate
from apim_provision.models.apim import (
    GroupRecord,
    ProductRecord,
    SubscriptionCreateParameters,
    SubscriptionRecord,
    UserRecord,
)
from apim_provision.settings import ApimSettings

logger = logging.getLogger(__name__)


def _resource_name(resource_id: str) -> str:
    """Return the last segment of an ARM resource id (or *resource_id* itself)."""
    return resource_id.rstrip("/").rsplit("/", 1)[-1]


class ApimClient:
    """Thin wrapper over the Microsoft.ApiManagement resource provider."""

    def __init__(self, token_cache: TokenCache, settings: ApimSettings) -> None:
        self.token_cache = token_cache
        self.settings = settings

    # -- plumbing ------------------------------------------------------------

    @property
    def service_url(self) -> str:
        s = self.settings
        return (
            f"{AZURE_MGMT_URL}/subscriptions/{s.azurerm_subscription_id}"
            f"/resourceGroups/{s.azurerm_resource_group}"
            f"/providers/Microsoft.ApiManagement/service/{s.azurerm_apim}"
        )

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(seg, safe="") for seg in segments)
        return f"{self.service_url}/{path}"

    def _params(self, **extra: str) -> dict[str, str]:
        return {"api-version": self.settings.apim_api_version, **extra}

    def _request(self, method: str, url: str, body: dict | None = None) -> dict:
        headers = self.token_cache.headers()
        try:
            resp = requests.request(
                method,
                url,
                headers=headers,
                params=self._params(),
                json=body,
                timeout=self.settings.apim_request_timeout,
            )
        except requests.RequestException as exc:
            raise _transport_error(method, url, exc) from exc
        _raise_for_status(resp)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    # -- subscriptions -------------------------------------------------------

    def get_subscription(self, subscription_id: str) -> SubscriptionRecord:
        logger.debug("subscription.get %s", subscription_id)
        return SubscriptionRecord.from_arm(
            self._request("GET", self._url("subscriptions", subscription_id))
        )

    def create_or_update_subscription(
        self,
        subscription_id: str,
        parameters: SubscriptionCreateParameters,
    ) -> SubscriptionRecord:
        logger.debug("subscription.createOrUpdate %s", subscription_id)
        return SubscriptionRecord.from_arm(
            self._request(
                "PUT",
                self._url("subscriptions", subscription_id),
                body=parameters.to_arm(),
            )
        )

    def regenerate_primary_key(self, subscription_id: str) -> None:
        logger.debug("subscription.regeneratePrimaryKey %s", subscription_id)
        self._request("POST", self._url("subscriptions", subscription_id, "regeneratePrimaryKey"))

    def regenerate_secondary_key(self, subscription_id: str) -> None:
        logger.debug("subscription.regenerateSecondaryKey %s", subscription_id)
        self._request(
            "POST", self._url("subscriptions", subscription_id, "regenerateSecondaryKey")
        )

    def list_user_subscriptions(self, user_id: str) -> list[SubscriptionRecord]:
        """Return the first page of the user's subscriptions.

        *user_id* may be either the full resource id or the short user name.
        """
        logger.debug("userSubscription.list %s", user_id)
        items = _first_page(
            self._url("users", _resource_name(user_id), "subscriptions"),
            self.token_cache.headers(),
            timeout=self.settings.apim_request_timeout,
            params=self._params(),
        )
        return [SubscriptionRecord.from_arm(item) for item in items]

    # -- users, products, groups ---------------------------------------------

    def list_users(self, odata_filter: str | None = None) -> list[UserRecord]:
        logger.debug("user.listByService filter=%s", odata_filter)
        params = self._params(**({"$filter": odata_filter} if odata_filter else {}))
        items = _paginate(
            self._url("users"),
            self.token_cache.headers(),
            timeout=self.settings.apim_request_timeout,
            params=params,
        )
        return [UserRecord.from_arm(item) for item in items]

    def get_product(self, product_name: str) -> ProductRecord:
        logger.debug("product.get %s", product_name)
        return ProductRecord.from_arm(self._request("GET", self._url("products", product_name)))

    def list_user_groups(self, user_name: str) -> list[GroupRecord]:
        logger.debug("userGroup.list %s", user_name)
        items = _paginate(
            self._url("users", user_name, "groups"),
            self.token_cache.headers(),
            timeout=self.settings.apim_request_timeout,
            params=self._params(),
        )
        return [GroupRecord.from_arm(item) for item in items]

    def add_group_user(self, group_name: str, user_name: str) -> dict:
        """Add *user_name* to *group_name* (``groupUser.create``)."""
        logger.debug("groupUser.create %s <- %s", group_name, user_name)
        return self._request("PUT", self._url("groups", group_name, "users", user_name))
