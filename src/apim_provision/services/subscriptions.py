"""Subscription lookup, creation and key rotation.

Every lookup goes through :func:`get_user_subscription`, which only returns a
subscription owned by the requesting user.  Key regeneration verifies
ownership first and returns the record re-fetched after the mutation.
"""

from __future__ import annotations

import logging

from ulid import ULID

from apim_provision.azure_api import ApimClient
from apim_provision.errors import ApimError, ApimNotFoundError, Err, Ok, ProvisioningError, Result
from apim_provision.models.apim import SubscriptionCreateParameters, SubscriptionRecord

logger = logging.getLogger(__name__)


def get_user_subscription(
    client: ApimClient,
    subscription_id: str,
    user_id: str,
) -> SubscriptionRecord | None:
    """Return subscription *subscription_id* if it belongs to *user_id*, else ``None``."""
    logger.debug("get_user_subscription %s", subscription_id)
    try:
        subscription = client.get_subscription(subscription_id)
    except ApimNotFoundError:
        return None
    if subscription.userId != user_id or not subscription.name:
        return None
    return subscription


def list_user_subscriptions(client: ApimClient, user_id: str) -> list[SubscriptionRecord]:
    """Return the user's subscriptions.

    Only the first result page is returned; the ``nextLink`` continuation is
    not followed.
    """
    logger.debug("list_user_subscriptions %s", user_id)
    return client.list_user_subscriptions(user_id)


def _regenerate_key(
    client: ApimClient,
    subscription_id: str,
    user_id: str,
    *,
    secondary: bool,
) -> SubscriptionRecord | None:
    if get_user_subscription(client, subscription_id, user_id) is None:
        return None
    if secondary:
        client.regenerate_secondary_key(subscription_id)
    else:
        client.regenerate_primary_key(subscription_id)
    return get_user_subscription(client, subscription_id, user_id)


def regenerate_primary_key(
    client: ApimClient,
    subscription_id: str,
    user_id: str,
) -> SubscriptionRecord | None:
    """Rotate the primary key of a subscription owned by *user_id*."""
    logger.debug("regenerate_primary_key %s", subscription_id)
    return _regenerate_key(client, subscription_id, user_id, secondary=False)


def regenerate_secondary_key(
    client: ApimClient,
    subscription_id: str,
    user_id: str,
) -> SubscriptionRecord | None:
    """Rotate the secondary key of a subscription owned by *user_id*."""
    logger.debug("regenerate_secondary_key %s", subscription_id)
    return _regenerate_key(client, subscription_id, user_id, secondary=True)


def add_user_subscription_to_product(
    client: ApimClient,
    user_id: str,
    product_name: str,
) -> Result[SubscriptionRecord]:
    """Create an active subscription for *user_id* on product *product_name*.

    Existing subscriptions are not looked up first, so a cancelled
    subscription for the same product can be replaced by a new active one.
    """
    logger.debug("add_user_subscription_to_product %s -> %s", user_id, product_name)
    try:
        product = client.get_product(product_name)
    except ApimNotFoundError:
        product = None
    except ApimError as exc:
        return Err(exc)
    if product is None or not product.id:
        return Err(ProvisioningError("Cannot find API management product for update"))

    subscription_id = str(ULID())
    # userId is the full user resource id; productId the full product resource id
    parameters = SubscriptionCreateParameters(
        displayName=subscription_id,
        productId=product.id,
        state="active",
        userId=user_id,
    )
    try:
        return Ok(client.create_or_update_subscription(subscription_id, parameters))
    except ApimError as exc:
        return Err(exc)
