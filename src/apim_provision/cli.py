"""Command line interface for apim-provision.

Subcommands:
    apim-provision provision       – subscribe a user to a product and add groups
    apim-provision subscriptions   – list a user's subscriptions
    apim-provision regenerate-key  – rotate a subscription key
    apim-provision service         – show a service from the notification API
"""

import functools
import json
import logging
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError

from apim_provision import __version__
from apim_provision.errors import ApimProvisionError, Err, GroupSyncError

if TYPE_CHECKING:
    from apim_provision.azure_api import ApimClient


def _setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root ``apim_provision`` logger with uvicorn-style colours."""
    from uvicorn.logging import DefaultFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(
        DefaultFormatter(fmt="%(levelprefix)s %(name)s - %(message)s", use_colors=True)
    )
    app_logger = logging.getLogger("apim_provision")
    app_logger.handlers = [handler]
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Silence noisy third-party loggers
    logging.getLogger("azure").setLevel(logging.WARNING)


def _build_client() -> "ApimClient":
    """Create an :class:`ApimClient` from environment settings."""
    from apim_provision.azure_api import ApimClient, TokenCache, _login
    from apim_provision.settings import load_settings

    try:
        settings = load_settings()
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    cache = TokenCache(login=functools.partial(_login, settings.apim_use_managed_identity))
    return ApimClient(cache, settings)


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _fail(result: Err) -> None:
    error = result.error
    if isinstance(error, GroupSyncError):
        raise click.ClickException(f"{error} (groups added before failure: {error.added})")
    raise click.ClickException(str(error))


verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging.",
)


@click.group()
@click.version_option(version=__version__, prog_name="apim-provision")
def cli() -> None:
    """Azure API Management user provisioning."""


@cli.command()
@click.argument("email")
@click.option("--product", "product_name", required=True, help="Product to subscribe to.")
@click.option("--group", "groups", multiple=True, help="Group to add the user to (repeatable).")
@verbose_option
def provision(email: str, product_name: str, groups: tuple[str, ...], verbose: bool) -> None:
    """Subscribe the user registered with EMAIL to a product and add it to groups."""
    from apim_provision.services.provisioning import provision_user

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    client = _build_client()
    try:
        result = provision_user(client, email, product_name, groups)
    except ApimProvisionError as exc:
        raise click.ClickException(str(exc)) from exc
    if isinstance(result, Err):
        _fail(result)
        return
    report = result.value
    _echo_json(
        {
            "user": report.user.model_dump(),
            "subscription": report.subscription.model_dump(exclude={"primaryKey", "secondaryKey"}),
            "addedGroups": report.added_groups,
        }
    )


@cli.command()
@click.argument("email")
@verbose_option
def subscriptions(email: str, verbose: bool) -> None:
    """List the subscriptions of the user registered with EMAIL (first page only)."""
    from apim_provision.services.directory import find_user_by_email
    from apim_provision.services.subscriptions import list_user_subscriptions

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    client = _build_client()
    try:
        user = find_user_by_email(client, email)
        if user is None or user.id is None:
            raise click.ClickException(f"No API Management user found for {email}")
        subs = list_user_subscriptions(client, user.id)
    except ApimProvisionError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json([s.model_dump(exclude={"primaryKey", "secondaryKey"}) for s in subs])


@cli.command("regenerate-key")
@click.argument("email")
@click.argument("subscription_id")
@click.option(
    "--secondary",
    is_flag=True,
    default=False,
    help="Regenerate the secondary key instead of the primary one.",
)
@verbose_option
def regenerate_key(email: str, subscription_id: str, secondary: bool, verbose: bool) -> None:
    """Regenerate a key of SUBSCRIPTION_ID, owned by the user registered with EMAIL."""
    from apim_provision.services.directory import find_user_by_email
    from apim_provision.services.subscriptions import (
        regenerate_primary_key,
        regenerate_secondary_key,
    )

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    client = _build_client()
    regenerate = regenerate_secondary_key if secondary else regenerate_primary_key
    try:
        user = find_user_by_email(client, email)
        if user is None or user.id is None:
            raise click.ClickException(f"No API Management user found for {email}")
        subscription = regenerate(client, subscription_id, user.id)
    except ApimProvisionError as exc:
        raise click.ClickException(str(exc)) from exc
    if subscription is None:
        raise click.ClickException(f"Subscription {subscription_id} not found for {email}")
    _echo_json(subscription.model_dump())


@cli.command()
@click.argument("service_id")
@verbose_option
def service(service_id: str, verbose: bool) -> None:
    """Show SERVICE_ID as returned by the notification service API."""
    from apim_provision.notification_api import NotificationApiClient, to_result
    from apim_provision.settings import NotificationSettings

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        settings = NotificationSettings()
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    client = NotificationApiClient(
        settings.notification_api_url,
        settings.notification_api_key,
        timeout=settings.notification_api_timeout,
    )
    result = to_result(client.get_service(service_id))
    if isinstance(result, Err):
        _fail(result)
        return
    _echo_json(result.value.model_dump(mode="json"))
