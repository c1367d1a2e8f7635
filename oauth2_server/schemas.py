"""
Pydantic descriptors returned by the token service.

These are detached from the database session, so callers can keep them
after the session is closed.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Resource owner as seen by the token service"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    nickname: Optional[str] = None


class OAuth2Client(BaseModel):
    """
    A registered client.

    client_secret is the stored bcrypt hash, never the plaintext secret.
    user_id is the identity the client acts as for client_credentials.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    client_id: str
    client_secret: str
    user_id: Optional[int] = None


class OAuth2Code(BaseModel):
    """Authorization code handed to the user agent"""

    code: str


class OAuth2CodeRecord(BaseModel):
    """A consumed authorization code row"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    client_id: int
    user_id: int
    code: str
    created: int


class OAuth2Token(BaseModel):
    """Access/refresh token pair"""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    access_token_expires: int = Field(..., description="Unix time the access token stops working")
    refresh_token_expires: int
    token_type: str = "bearer"
    user_id: Optional[int] = None
    client_id: int


class TokenResponse(BaseModel):
    """Token endpoint response body (RFC 6749 section 5.1)"""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: str


class TokenInfoResponse(BaseModel):
    user_id: Optional[int] = None
    client_id: int
    expires_at: int
