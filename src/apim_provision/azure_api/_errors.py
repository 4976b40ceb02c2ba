"""Map ARM HTTP responses onto the package exceptions."""

from __future__ import annotations

import logging

import requests

from apim_provision.errors import ApimError, ApimNotFoundError

logger = logging.getLogger(__name__)


def _error_message(resp: requests.Response) -> str:
    """Extract the ARM ``error.message`` from *resp*, falling back to the raw body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.text[:500]


def _raise_for_status(resp: requests.Response) -> None:
    """Raise :class:`ApimError` (or :class:`ApimNotFoundError`) for non-2xx responses."""
    if resp.status_code < 400:
        return
    method = resp.request.method if resp.request is not None else "HTTP"
    message = f"{method} {resp.url} -> {resp.status_code}: {_error_message(resp)}"
    if resp.status_code == 404:
        raise ApimNotFoundError(message, status_code=404)
    logger.warning("Management API error: %s", message)
    raise ApimError(message, status_code=resp.status_code)


def _transport_error(method: str, url: str, exc: requests.RequestException) -> ApimError:
    """Wrap a connection-level failure (timeout, reset, DNS...) as :class:`ApimError`."""
    message = f"{method} {url} failed: {exc}"
    logger.warning("Management API request failed: %s", message)
    return ApimError(message)
