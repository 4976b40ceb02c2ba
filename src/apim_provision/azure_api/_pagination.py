"""ARM pagination helpers."""

from __future__ import annotations

import requests

from apim_provision.azure_api._errors import _raise_for_status, _transport_error


def _get(url: str, headers: dict[str, str], timeout: int, params: dict[str, str] | None) -> dict:
    try:
        resp = requests.get(url, headers=headers, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise _transport_error("GET", url, exc) from exc
    _raise_for_status(resp)
    return resp.json()


def _paginate(
    url: str,
    headers: dict[str, str],
    timeout: int = 30,
    params: dict[str, str] | None = None,
) -> list[dict]:
    """Fetch all pages from an ARM list endpoint and return the merged values."""
    items: list[dict] = []
    while url:
        data = _get(url, headers, timeout, params)
        items.extend(data.get("value", []))
        url = data.get("nextLink")
        # nextLink already carries the query string
        params = None
    return items


def _first_page(
    url: str,
    headers: dict[str, str],
    timeout: int = 30,
    params: dict[str, str] | None = None,
) -> list[dict]:
    """Fetch only the first page of an ARM list endpoint; ``nextLink`` is ignored."""
    return _get(url, headers, timeout, params).get("value", [])
