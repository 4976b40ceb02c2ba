"""Settings loaded from environment variables."""

import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class ApimSettings(BaseSettings):
    """Configuration for the API Management provisioning helpers.

    Values are read from environment variables (case-insensitive) and
    optionally from a ``.env`` file in the working directory.  The
    ``azurerm_*`` triple scopes every management API call to a single
    API Management service instance.
    """

    azurerm_subscription_id: str = ""
    azurerm_resource_group: str = ""
    azurerm_apim: str = ""

    apim_api_version: str = "2019-01-01"
    apim_use_managed_identity: bool = False
    apim_request_timeout: int = 30

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _validate_apim_vars(self) -> "ApimSettings":
        missing: list[str] = []
        if not self.azurerm_subscription_id:
            missing.append("AZURERM_SUBSCRIPTION_ID")
        if not self.azurerm_resource_group:
            missing.append("AZURERM_RESOURCE_GROUP")
        if not self.azurerm_apim:
            missing.append("AZURERM_APIM")
        if missing:
            raise ValueError(
                f"API Management provisioning requires {', '.join(missing)} to be set."
            )
        if self.apim_request_timeout <= 0:
            raise ValueError("APIM_REQUEST_TIMEOUT must be a positive number of seconds.")
        return self


class NotificationSettings(BaseSettings):
    """Endpoint and subscription key of the notification service API."""

    notification_api_url: str = ""
    notification_api_key: str = ""
    notification_api_timeout: int = 30

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _validate_notification_vars(self) -> "NotificationSettings":
        missing = [
            name
            for name, value in (
                ("NOTIFICATION_API_URL", self.notification_api_url),
                ("NOTIFICATION_API_KEY", self.notification_api_key),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"The notification API client requires {', '.join(missing)} to be set.")
        return self


def load_settings(**overrides: object) -> ApimSettings:
    """Build settings from the environment, applying keyword *overrides*."""
    settings = ApimSettings(**overrides)  # type: ignore[arg-type]
    logger.debug(
        "Loaded settings for APIM %s/%s",
        settings.azurerm_resource_group,
        settings.azurerm_apim,
    )
    return settings
