"""REST client for the notification / profile service.

Requests are authenticated with the API Management subscription key of the
caller.  Every call returns an :class:`ApiResponse` (or ``None`` when the body
of a successful response does not validate); :func:`to_result` turns it into
an :class:`~apim_provision.errors.Ok` / :class:`~apim_provision.errors.Err`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from apim_provision.errors import Err, Ok, Result
from apim_provision.models.notification import (
    DevelopmentProfile,
    ExtendedProfile,
    MessageCreated,
    NewMessage,
    Service,
    ServicePublic,
)

logger = logging.getLogger(__name__)

OCP_APIM_SUBSCRIPTION_KEY = "Ocp-Apim-Subscription-Key"

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ApiResponse(Generic[M]):
    """A decoded response: the model on 200/201, an error message otherwise."""

    status: int
    value: M | None = None
    error: str | None = None


def _decode(resp: requests.Response, model: type[M]) -> ApiResponse[M] | None:
    """Decode *resp* as *model* on 200/201, or as an error response otherwise."""
    if resp.status_code in (200, 201):
        try:
            return ApiResponse(status=resp.status_code, value=model.model_validate(resp.json()))
        except (ValueError, ValidationError) as exc:
            logger.warning("Invalid %s payload (status %s): %s", model.__name__, resp.status_code, exc)
            return None
    if resp.status_code == 401:
        return ApiResponse(status=401, error="Unauthorized")
    return ApiResponse(status=resp.status_code, error=resp.text[:500] or resp.reason)


def to_result(response: ApiResponse[M] | None) -> Result[M]:
    """Map a decoded response to ``Ok(value)`` or ``Err(exception)``."""
    if response is None:
        return Err(ValueError("Response is empty"))
    if response.status in (200, 201) and response.value is not None:
        return Ok(response.value)
    return Err(ValueError(f"Error parsing response: {response.status}"))


class NotificationApiClient:
    """Typed wrapper over the notification service admin and messaging endpoints."""

    def __init__(
        self,
        base_url: str,
        subscription_key: str,
        session: requests.Session | None = None,
        timeout: int = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.subscription_key = subscription_key
        self.session = session or requests.Session()

    def _call(
        self,
        method: str,
        path: str,
        model: type[M],
        body: BaseModel | None = None,
    ) -> ApiResponse[M] | None:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        kwargs: dict[str, object] = {
            "headers": {OCP_APIM_SUBSCRIPTION_KEY: self.subscription_key},
            "timeout": self.timeout,
        }
        if body is not None:
            # json= sets Content-Type: application/json
            kwargs["json"] = body.model_dump(mode="json", exclude_none=True)
        resp = self.session.request(method, url, **kwargs)  # type: ignore[arg-type]
        return _decode(resp, model)

    @staticmethod
    def _path(*segments: str) -> str:
        return "/" + "/".join(quote(seg, safe="") for seg in segments)

    def get_service(self, service_id: str) -> ApiResponse[Service] | None:
        return self._call("GET", self._path("adm", "services", service_id), Service)

    def send_message(
        self, fiscal_code: str, message: NewMessage
    ) -> ApiResponse[MessageCreated] | None:
        return self._call(
            "POST", self._path("api", "v1", "messages", fiscal_code), MessageCreated, message
        )

    def create_development_profile(
        self, fiscal_code: str, profile: DevelopmentProfile
    ) -> ApiResponse[ExtendedProfile] | None:
        return self._call(
            "POST", self._path("adm", "development-profiles", fiscal_code), ExtendedProfile, profile
        )

    def create_service(self, service: Service) -> ApiResponse[ServicePublic] | None:
        return self._call("POST", self._path("adm", "services"), ServicePublic, service)

    def update_service(
        self, service_id: str, service: Service
    ) -> ApiResponse[ServicePublic] | None:
        return self._call("PUT", self._path("adm", "services", service_id), ServicePublic, service)
