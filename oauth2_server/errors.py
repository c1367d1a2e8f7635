"""
OAuth2 error taxonomy.

The core raises these; the HTTP layer turns them into
{"error": ..., "error_description": ...} responses.
"""


class OAuth2Error(Exception):
    """Base class for every error surfaced by the token service"""

    error = "server_error"
    status_code = 500
    www_authenticate = None

    def __init__(self, description: str = None):
        self.description = description or self.__class__.__doc__
        super().__init__(self.description)

    def to_dict(self) -> dict:
        return {"error": self.error, "error_description": self.description}

    def headers(self) -> dict:
        if self.www_authenticate:
            return {"WWW-Authenticate": self.www_authenticate}
        return {}


class NotFound(OAuth2Error):
    """The requested resource was not found"""

    error = "not_found"
    status_code = 404


class InvalidRequest(OAuth2Error):
    """The request is missing a parameter or is otherwise malformed"""

    error = "invalid_request"
    status_code = 400


class UnauthorizedClient(OAuth2Error):
    """The client is not authorized to use this grant"""

    error = "unauthorized_client"
    status_code = 400


class InvalidClient(OAuth2Error):
    """Client authentication failed"""

    error = "invalid_client"
    status_code = 401
    www_authenticate = "Basic"


class UnsupportedGrantType(OAuth2Error):
    """The grant type is not supported by this server"""

    error = "unsupported_grant_type"
    status_code = 400


class UnsupportedResponseType(OAuth2Error):
    """The response type is not supported by this server"""

    error = "unsupported_response_type"
    status_code = 400


class InvalidToken(OAuth2Error):
    """The access token is missing, unknown or expired"""

    error = "invalid_token"
    status_code = 401
    www_authenticate = 'Bearer error="invalid_token"'
