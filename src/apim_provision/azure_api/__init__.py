"""Azure ARM helpers for API Management.

This package re-exports its public names so that callers can use
``from apim_provision.azure_api import X``.
"""

import requests as requests  # noqa: F401  # re-export for mock patching

# -- Auth & constants -------------------------------------------------------
from apim_provision.azure_api._auth import (  # noqa: F401
    ARM_SCOPE,
    AZURE_MGMT_URL,
    Credential,
    TokenCache,
    _login,
    ensure_valid_credential,
)

# -- Pagination --------------------------------------------------------------
from apim_provision.azure_api._pagination import _first_page, _paginate  # noqa: F401

# -- Management client -------------------------------------------------------
from apim_provision.azure_api.client import ApimClient, _resource_name  # noqa: F401
