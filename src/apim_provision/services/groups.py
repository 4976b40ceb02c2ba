"""Group membership synchronization."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from apim_provision.azure_api import ApimClient
from apim_provision.errors import ApimError, Err, GroupSyncError, Ok, ProvisioningError, Result
from apim_provision.models.apim import UserRecord

logger = logging.getLogger(__name__)


def missing_groups(desired: Iterable[str], current: Iterable[str]) -> list[str]:
    """Return the groups of *desired* not in *current*, keeping *desired* order."""
    existing = set(current)
    missing: list[str] = []
    for group in desired:
        if group not in existing and group not in missing:
            missing.append(group)
    return missing


def add_user_to_groups(
    client: ApimClient,
    user: UserRecord | None,
    groups: Iterable[str],
) -> Result[list[str]]:
    """Add *user* to every group in *groups* it does not already belong to.

    Returns ``Ok`` with the names of the groups added, in the order they were
    added.  If a call fails, ``Err(GroupSyncError)`` carries the groups added
    before the failure; those memberships are kept.
    """
    logger.debug("add_user_to_groups")
    if user is None or not user.name:
        return Err(ProvisioningError("Cannot parse user"))

    try:
        existing = client.list_user_groups(user.name)
    except ApimError as exc:
        return Err(exc)
    existing_names = {g.name for g in existing if g.name}
    logger.debug("add_user_to_groups|groups|%s", sorted(existing_names))

    to_add = missing_groups(groups, existing_names)
    if not to_add:
        logger.debug("add_user_to_groups|user already belongs to groups|%s", sorted(existing_names))
        return Ok([])

    # IMPORTANT: one membership at a time. The service mis-assigns users to
    # groups when several writes for the same user are in flight; never turn
    # this loop into a parallel map.
    added: list[str] = []
    for group in to_add:
        try:
            client.add_group_user(group, user.name)
        except ApimError as exc:
            logger.warning(
                "Adding user %s to group %s failed after %d group(s)", user.name, group, len(added)
            )
            return Err(
                GroupSyncError(f"Cannot add user to group {group}: {exc}", group=group, added=added)
            )
        added.append(group)
    return Ok(added)
