"""End-to-end user provisioning: lookup, subscription, groups."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from apim_provision.azure_api import ApimClient
from apim_provision.errors import Err, Ok, ProvisioningError, Result
from apim_provision.models.apim import SubscriptionRecord, UserRecord
from apim_provision.services.directory import find_user_by_email
from apim_provision.services.groups import add_user_to_groups
from apim_provision.services.subscriptions import add_user_subscription_to_product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisioningReport:
    user: UserRecord
    subscription: SubscriptionRecord
    added_groups: list[str] = field(default_factory=list)


def provision_user(
    client: ApimClient,
    email: str,
    product_name: str,
    groups: Iterable[str] = (),
) -> Result[ProvisioningReport]:
    """Subscribe the user registered with *email* to a product and add it to *groups*.

    Steps run in order and the first failure is returned as-is.
    """
    user = find_user_by_email(client, email)
    if user is None or user.id is None:
        return Err(ProvisioningError(f"No API Management user found for {email}"))

    subscription = add_user_subscription_to_product(client, user.id, product_name)
    if isinstance(subscription, Err):
        return subscription

    added = add_user_to_groups(client, user, groups)
    if isinstance(added, Err):
        return added

    logger.info(
        "Provisioned %s: subscription %s, groups added %s",
        email,
        subscription.value.name,
        added.value,
    )
    return Ok(ProvisioningReport(user=user, subscription=subscription.value, added_groups=added.value))
