"""
OAuth2 token service.

Issues and validates opaque bearer tokens for registered clients, acting
for themselves or for an authenticated user.
"""

from oauth2_server.config import Settings
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import (
    InvalidClient,
    InvalidRequest,
    InvalidToken,
    NotFound,
    OAuth2Error,
    UnauthorizedClient,
    UnsupportedGrantType,
    UnsupportedResponseType,
)
from oauth2_server.schemas import OAuth2Client, OAuth2Code, OAuth2CodeRecord, OAuth2Token, User
from oauth2_server.service import OAuth2Service

__all__ = [
    "Settings",
    "DatabaseManager",
    "OAuth2Service",
    "OAuth2Client",
    "OAuth2Code",
    "OAuth2CodeRecord",
    "OAuth2Token",
    "User",
    "OAuth2Error",
    "NotFound",
    "InvalidRequest",
    "UnauthorizedClient",
    "InvalidClient",
    "InvalidToken",
    "UnsupportedGrantType",
    "UnsupportedResponseType",
]
