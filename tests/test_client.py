"""Tests for the API Management REST client."""

from unittest.mock import patch

import pytest
import requests

from apim_provision.azure_api import _resource_name
from apim_provision.errors import ApimError, ApimNotFoundError
from apim_provision.models.apim import SubscriptionCreateParameters, SubscriptionRecord

SERVICE_URL = (
    "https://management.azure.com/subscriptions/sub-1/resourceGroups/rg-1"
    "/providers/Microsoft.ApiManagement/service/apim-1"
)
USER_ID = f"{SERVICE_URL}/users/u-1"


def _subscription_payload(**props):
    return {
        "id": f"{SERVICE_URL}/subscriptions/s-1",
        "name": "s-1",
        "properties": {
            "ownerId": USER_ID,
            "scope": f"{SERVICE_URL}/products/starter",
            "displayName": "s-1",
            "state": "active",
            "primaryKey": "pk",
            "secondaryKey": "sk",
            **props,
        },
    }


class TestResourceName:
    def test_full_id(self) -> None:
        assert _resource_name(USER_ID) == "u-1"

    def test_short_name(self) -> None:
        assert _resource_name("u-1") == "u-1"


class TestSubscriptionRecordParsing:
    """Subscription contracts before and after the ownerId / scope rename."""

    def test_owner_and_scope(self) -> None:
        sub = SubscriptionRecord.from_arm(_subscription_payload())
        assert sub.userId == USER_ID
        assert sub.productId == f"{SERVICE_URL}/products/starter"

    def test_legacy_user_and_product_ids(self) -> None:
        sub = SubscriptionRecord.from_arm(
            {"name": "s-1", "properties": {"userId": USER_ID, "productId": "/products/p"}}
        )
        assert sub.userId == USER_ID
        assert sub.productId == "/products/p"


class TestSubscriptionCalls:
    """Single-resource subscription operations."""

    def test_get_subscription_builds_url_and_parses(self, apim_client, make_response):
        resp = make_response(payload=_subscription_payload())
        with patch("apim_provision.azure_api.requests.request", return_value=resp) as req:
            sub = apim_client.get_subscription("s-1")

        method, url = req.call_args.args
        assert method == "GET"
        assert url == f"{SERVICE_URL}/subscriptions/s-1"
        kwargs = req.call_args.kwargs
        assert kwargs["params"] == {"api-version": "2019-01-01"}
        assert kwargs["headers"]["Authorization"] == "Bearer fake-token"
        assert kwargs["timeout"] == 30
        assert sub.name == "s-1"
        assert sub.userId == USER_ID
        assert sub.primaryKey == "pk"
        assert sub.state == "active"

    def test_get_subscription_404_raises_not_found(self, apim_client, make_response):
        resp = make_response(404, {"error": {"code": "ResourceNotFound", "message": "gone"}})
        with (
            patch("apim_provision.azure_api.requests.request", return_value=resp),
            pytest.raises(ApimNotFoundError, match="gone") as exc_info,
        ):
            apim_client.get_subscription("missing")
        assert exc_info.value.status_code == 404

    def test_server_error_raises_apim_error(self, apim_client, make_response):
        resp = make_response(500, {"error": {"message": "boom"}})
        with (
            patch("apim_provision.azure_api.requests.request", return_value=resp),
            pytest.raises(ApimError) as exc_info,
        ):
            apim_client.get_subscription("s-1")
        assert not isinstance(exc_info.value, ApimNotFoundError)
        assert exc_info.value.status_code == 500

    def test_create_or_update_sends_owner_and_scope(self, apim_client, make_response):
        resp = make_response(201, _subscription_payload(), method="PUT")
        params = SubscriptionCreateParameters(
            userId=USER_ID,
            productId=f"{SERVICE_URL}/products/starter",
            displayName="s-1",
        )
        with patch("apim_provision.azure_api.requests.request", return_value=resp) as req:
            sub = apim_client.create_or_update_subscription("s-1", params)

        assert req.call_args.args == ("PUT", f"{SERVICE_URL}/subscriptions/s-1")
        assert req.call_args.kwargs["json"] == {
            "properties": {
                "ownerId": USER_ID,
                "scope": f"{SERVICE_URL}/products/starter",
                "displayName": "s-1",
                "state": "active",
            }
        }
        assert req.call_args.kwargs["params"] == {"api-version": "2019-01-01"}
        assert sub.userId == USER_ID
        assert sub.productId.endswith("/products/starter")

    def test_regenerate_keys_post_to_actions(self, apim_client, make_response):
        resp = make_response(204, method="POST")
        with patch("apim_provision.azure_api.requests.request", return_value=resp) as req:
            apim_client.regenerate_primary_key("s-1")
            apim_client.regenerate_secondary_key("s-1")

        urls = [c.args[1] for c in req.call_args_list]
        assert urls == [
            f"{SERVICE_URL}/subscriptions/s-1/regeneratePrimaryKey",
            f"{SERVICE_URL}/subscriptions/s-1/regenerateSecondaryKey",
        ]
        assert all(c.args[0] == "POST" for c in req.call_args_list)


class TestListCalls:
    """List endpoints and pagination."""

    def test_list_user_subscriptions_reads_first_page_only(self, apim_client, make_response):
        resp = make_response(
            payload={
                "value": [_subscription_payload()],
                "nextLink": f"{SERVICE_URL}/users/u-1/subscriptions?$skip=1",
            }
        )
        with patch("apim_provision.azure_api.requests.get", return_value=resp) as get:
            subs = apim_client.list_user_subscriptions(USER_ID)

        assert get.call_count == 1
        assert get.call_args.args[0] == f"{SERVICE_URL}/users/u-1/subscriptions"
        assert [s.name for s in subs] == ["s-1"]

    def test_list_users_passes_filter(self, apim_client, make_response):
        resp = make_response(
            payload={
                "value": [
                    {
                        "id": USER_ID,
                        "name": "u-1",
                        "properties": {
                            "email": "jane@example.com",
                            "firstName": "Jane",
                            "lastName": "Doe",
                            "identities": [{"provider": "AadB2C", "id": "oid-1"}],
                        },
                    }
                ],
            }
        )
        with patch("apim_provision.azure_api.requests.get", return_value=resp) as get:
            users = apim_client.list_users("email eq 'jane@example.com'")

        assert get.call_args.kwargs["params"] == {
            "api-version": "2019-01-01",
            "$filter": "email eq 'jane@example.com'",
        }
        assert users[0].email == "jane@example.com"
        assert users[0].objectId == "oid-1"

    def test_list_user_groups_follows_next_link(self, apim_client, make_response):
        page1 = make_response(
            payload={
                "value": [{"id": "g/a", "name": "a", "properties": {"displayName": "A"}}],
                "nextLink": f"{SERVICE_URL}/users/u-1/groups?$skiptoken=x",
            }
        )
        page2 = make_response(payload={"value": [{"id": "g/b", "name": "b"}]})
        with patch(
            "apim_provision.azure_api.requests.get", side_effect=[page1, page2]
        ) as get:
            groups = apim_client.list_user_groups("u-1")

        assert [g.name for g in groups] == ["a", "b"]
        assert get.call_count == 2
        # the continuation URL already embeds the query string
        assert get.call_args_list[1].kwargs["params"] is None

    def test_get_product(self, apim_client, make_response):
        resp = make_response(
            payload={
                "id": f"{SERVICE_URL}/products/starter",
                "name": "starter",
                "properties": {"displayName": "Starter", "state": "published"},
            }
        )
        with patch("apim_provision.azure_api.requests.request", return_value=resp) as req:
            product = apim_client.get_product("starter")

        assert req.call_args.args[1] == f"{SERVICE_URL}/products/starter"
        assert product.id == f"{SERVICE_URL}/products/starter"
        assert product.state == "published"

    def test_add_group_user(self, apim_client, make_response):
        resp = make_response(201, {"id": "x"}, method="PUT")
        with patch("apim_provision.azure_api.requests.request", return_value=resp) as req:
            apim_client.add_group_user("developers", "u-1")

        assert req.call_args.args == ("PUT", f"{SERVICE_URL}/groups/developers/users/u-1")


class TestTransportErrors:
    """Connection-level failures surface as ApimError."""

    def test_timeout_on_request(self, apim_client):
        with (
            patch(
                "apim_provision.azure_api.requests.request",
                side_effect=requests.ReadTimeout("read timed out"),
            ),
            pytest.raises(ApimError, match="read timed out") as exc_info,
        ):
            apim_client.get_subscription("s-1")
        assert isinstance(exc_info.value.__cause__, requests.ReadTimeout)
        assert exc_info.value.status_code is None

    def test_connection_error_while_paginating(self, apim_client, make_response):
        page1 = make_response(
            payload={"value": [{"name": "a"}], "nextLink": f"{SERVICE_URL}/users/u-1/groups?p=2"}
        )
        with (
            patch(
                "apim_provision.azure_api.requests.get",
                side_effect=[page1, requests.ConnectionError("reset")],
            ),
            pytest.raises(ApimError, match="reset"),
        ):
            apim_client.list_user_groups("u-1")

    def test_connection_error_on_first_page(self, apim_client):
        with (
            patch(
                "apim_provision.azure_api.requests.get",
                side_effect=requests.ConnectionError("refused"),
            ),
            pytest.raises(ApimError, match="refused"),
        ):
            apim_client.list_user_subscriptions("u-1")
