"""Resolve API Management users from their email address."""

from __future__ import annotations

import logging

from apim_provision.azure_api import ApimClient
from apim_provision.models.apim import UserRecord

logger = logging.getLogger(__name__)


def _odata_quote(value: str) -> str:
    """Quote *value* as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def find_user_by_email(client: ApimClient, email: str) -> UserRecord | None:
    """Return the API Management user registered with *email*, or ``None``.

    When several users share the email the first one returned by the service
    is used and a warning is logged.
    """
    logger.debug("find_user_by_email %s", email)
    results = client.list_users(f"email eq {_odata_quote(email)}")
    logger.debug("APIM users found: %d", len(results))
    if not results:
        return None
    if len(results) > 1:
        logger.warning(
            "%d API Management users share the email %s, using %s",
            len(results),
            email,
            results[0].id,
        )
    user = results[0]
    if not user.id or not user.name:
        return None
    return user
