"""
FastAPI OAuth2 endpoints.

The router expects an OAuth2Service on app.state.oauth2_service. Logging
users in is the host application's job: it must override the current_user
dependency for /oauth2/authorize to work.
"""

from typing import Dict, Optional
from urllib.parse import parse_qsl, unquote_plus, urlencode, urlparse, urlunparse

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from loguru import logger

from oauth2_server.errors import (
    InvalidClient,
    InvalidRequest,
    InvalidToken,
    NotFound,
    OAuth2Error,
    UnsupportedGrantType,
    UnsupportedResponseType,
)
from oauth2_server.schemas import OAuth2Token, TokenInfoResponse, TokenResponse, User
from oauth2_server.service import OAuth2Service

router = APIRouter(prefix="/oauth2", tags=["oauth2"])

http_basic = HTTPBasic(auto_error=False)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}

# ==================== DEPENDENCIES ====================

def get_oauth2_service(request: Request) -> OAuth2Service:
    return request.app.state.oauth2_service


def current_user() -> User:
    """Resource owner for /authorize. Replace via app.dependency_overrides."""
    raise HTTPException(status_code=401, detail="Login required")


def require_bearer_token(
    authorization: Optional[str] = Header(None),
    service: OAuth2Service = Depends(get_oauth2_service),
) -> OAuth2Token:
    """
    Dependency: validate an "Authorization: Bearer <token>" header.

    Returns the live token so the route can see which user it acts for.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidToken("Missing bearer token")

    access_token = authorization[len("Bearer "):].strip()
    if not access_token:
        raise InvalidToken("Missing bearer token")

    try:
        return service.tokens.get_token_by_access_token(access_token)
    except NotFound:
        raise InvalidToken("Invalid or expired token")


# ==================== HELPER FUNCTIONS ====================

def _add_params(url: str, params: Dict[str, Optional[str]]) -> str:
    parsed = urlparse(url)
    query = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query.update({k: v for k, v in params.items() if v is not None})
    return str(urlunparse(parsed._replace(query=urlencode(query))))


def _add_fragment(url: str, params: Dict[str, Optional[str]]) -> str:
    fragment = urlencode({k: v for k, v in params.items() if v is not None})
    return str(urlunparse(urlparse(url)._replace(fragment=fragment)))


def _token_response(token: OAuth2Token, expires_in: int) -> JSONResponse:
    body = TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=expires_in,
        refresh_token=token.refresh_token,
    )
    return JSONResponse(body.model_dump(), headers=NO_STORE_HEADERS)


async def oauth2_error_handler(request: Request, exc: OAuth2Error) -> JSONResponse:
    """Turn core errors into RFC 6749 style JSON errors"""
    logger.info(f"[OAUTH2] {request.method} {request.url.path} -> {exc.error}: {exc.description}")
    return JSONResponse(
        exc.to_dict(),
        status_code=exc.status_code,
        headers={**NO_STORE_HEADERS, **exc.headers()},
    )


# ==================== ENDPOINTS ====================

@router.post("/token", response_model=TokenResponse)
def token(
    grant_type: str = Form(...),
    code: Optional[str] = Form(None),
    client_id: Optional[str] = Form(None),
    client_secret: Optional[str] = Form(None),
    credentials: Optional[HTTPBasicCredentials] = Depends(http_basic),
    service: OAuth2Service = Depends(get_oauth2_service),
):
    """Token endpoint for the authorization_code and client_credentials grants."""
    # Basic credentials are form-urlencoded before base64 (RFC 6749 section 2.3.1)
    if credentials is not None:
        client_id = unquote_plus(credentials.username)
        client_secret = unquote_plus(credentials.password)

    if not client_id or client_secret is None:
        raise InvalidClient("Client credentials are required")

    client = service.authenticate_client(client_id, client_secret)

    if grant_type == "authorization_code":
        if not code:
            raise InvalidRequest("The code parameter is required")
        issued = service.tokens.generate_token_from_code(client, code)
    elif grant_type == "client_credentials":
        issued = service.tokens.generate_token_for_client(client)
    else:
        raise UnsupportedGrantType(f"Unsupported grant_type: {grant_type}")

    return _token_response(issued, service.tokens.access_token_expiry)


@router.get("/authorize")
def authorize(
    response_type: str = Query(...),
    client_id: str = Query(...),
    redirect_uri: str = Query(...),
    state: Optional[str] = Query(None),
    user: User = Depends(current_user),
    service: OAuth2Service = Depends(get_oauth2_service),
):
    """
    Authorization endpoint for the code and implicit grants.

    An unknown client or an unregistered redirect_uri is reported directly;
    every other outcome is a redirect back to the client.
    """
    client = service.clients.get_client_by_client_id(client_id)

    if not service.clients.validate_redirect_uri(client, redirect_uri):
        raise InvalidRequest("This value for redirect_uri is not permitted")

    if response_type == "code":
        issued_code = service.codes.generate_code_for_user(client, user)
        location = _add_params(redirect_uri, {"code": issued_code.code, "state": state})
    elif response_type == "token":
        issued = service.tokens.generate_token_for_user(client, user)
        location = _add_fragment(redirect_uri, {
            "access_token": issued.access_token,
            "token_type": issued.token_type,
            "expires_in": str(service.tokens.access_token_expiry),
            "state": state,
        })
    else:
        unsupported = UnsupportedResponseType(f"Unsupported response_type: {response_type}")
        location = _add_params(redirect_uri, {**unsupported.to_dict(), "state": state})

    return RedirectResponse(url=location, status_code=302, headers=NO_STORE_HEADERS)


@router.get("/tokeninfo", response_model=TokenInfoResponse)
def tokeninfo(access: OAuth2Token = Depends(require_bearer_token)):
    """Describe the bearer token presented with this request."""
    return TokenInfoResponse(
        user_id=access.user_id,
        client_id=access.client_id,
        expires_at=access.access_token_expires,
    )
