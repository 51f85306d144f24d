"""
HTTP layer: OAuth token refresh and the REST client.

Depends on tda_core for symbol conversion and trade aggregation; no dependency from
tda_core back to client.
"""

from client.api import OptionChainRequest, StaticToken, TdaApiError, TdaClient, TokenSource
from client.auth import AccessToken, AuthData, TdaAuthError, TokenRefresher, refresh_access_token

__all__ = [
    "AccessToken",
    "AuthData",
    "OptionChainRequest",
    "StaticToken",
    "TdaApiError",
    "TdaAuthError",
    "TdaClient",
    "TokenRefresher",
    "TokenSource",
    "refresh_access_token",
]
