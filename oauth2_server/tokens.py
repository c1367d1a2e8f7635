"""
Access/refresh token issuance and bearer token lookup.

Supported grants:
  - authorization_code: exchange a one-time code for a token
  - implicit: token issued straight to an authenticated user
  - client_credentials: client acts on behalf of itself

Tokens are opaque random strings stored with their expiry times. They are
never updated after insert.
"""

import time
from typing import Callable, Optional

from loguru import logger
from sqlalchemy import select

from oauth2_server import models
from oauth2_server.codes import CodeStore
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import NotFound
from oauth2_server.log_config import mask
from oauth2_server.schemas import OAuth2Client, OAuth2Token, User
from oauth2_server.security import TokenGenerator, UrlSafeTokenGenerator
from oauth2_server.users import UserResolver


class TokenIssuer:
    """Mints and looks up bearer tokens"""

    def __init__(
        self,
        db: DatabaseManager,
        code_store: CodeStore,
        users: UserResolver,
        generator: Optional[TokenGenerator] = None,
        clock: Callable[[], float] = time.time,
        access_token_expiry: Optional[int] = None,
        refresh_token_expiry: Optional[int] = None,
    ):
        settings = db.settings
        self.db = db
        self.code_store = code_store
        self.users = users
        self.generator = generator or UrlSafeTokenGenerator(settings.token_bytes)
        self.clock = clock
        self.access_token_expiry = (
            access_token_expiry if access_token_expiry is not None else settings.access_token_expiry
        )
        self.refresh_token_expiry = (
            refresh_token_expiry if refresh_token_expiry is not None else settings.refresh_token_expiry
        )

    def _now(self) -> int:
        return int(self.clock())

    def _mint(self, client: OAuth2Client, user_id: Optional[int]) -> OAuth2Token:
        """Generate and persist a token pair bound to (client, user_id)"""
        now = self._now()
        token = OAuth2Token(
            access_token=self.generator.generate(),
            refresh_token=self.generator.generate(),
            access_token_expires=now + self.access_token_expiry,
            refresh_token_expires=now + self.refresh_token_expiry,
            token_type="bearer",
            user_id=user_id,
            client_id=client.id,
        )

        with self.db.session_scope() as session:
            session.add(
                models.OAuth2TokenRecord(
                    oauth2_client_id=client.id,
                    access_token=token.access_token,
                    refresh_token=token.refresh_token,
                    user_id=user_id,
                    created=now,
                    access_token_expires=token.access_token_expires,
                    refresh_token_expires=token.refresh_token_expires,
                )
            )

        logger.info(
            f"[TOKEN] Issued token {mask(token.access_token)} for client {client.client_id}, user {user_id}"
        )
        return token

    # ==================== GRANTS ====================

    def generate_token_for_user(self, client: OAuth2Client, user: User) -> OAuth2Token:
        """Create an access token for a specific user (implicit grant, and the end of the code grant)."""
        return self._mint(client, user.id)

    def generate_token_for_client(self, client: OAuth2Client) -> OAuth2Token:
        """
        Create an access token for the client_credentials grant.

        There is no third party (resource owner) here. The client acts on
        behalf of itself, so the token is bound to the client's own user.
        """
        return self._mint(client, client.user_id)

    def generate_token_from_code(self, client: OAuth2Client, code: str) -> OAuth2Token:
        """
        Exchange a one-time authorization code for an access and refresh token.

        Errors from consuming the code propagate unchanged, and no token is
        stored in that case.
        """
        record = self.code_store.consume_code(code, client)
        user = self.users.find_by_id(record.user_id)
        return self.generate_token_for_user(client, user)

    # ==================== LOOKUP ====================

    def get_token_by_access_token(self, access_token: str) -> OAuth2Token:
        """
        Return token information for a live access token.

        This is how a resource server validates a bearer credential and finds
        out which user it belongs to.

        Raises:
            NotFound: the token is unknown or has expired
        """
        table = models.OAuth2TokenRecord

        with self.db.session_scope() as session:
            row = session.execute(
                select(table).where(
                    table.access_token == access_token,
                    table.access_token_expires > self._now(),
                )
            ).scalar_one_or_none()

            if row is None:
                logger.debug(f"[TOKEN] Access token not recognized: {mask(access_token)}")
                raise NotFound("Access token not recognized")

            return OAuth2Token(
                access_token=row.access_token,
                refresh_token=row.refresh_token,
                access_token_expires=row.access_token_expires,
                refresh_token_expires=row.refresh_token_expires,
                token_type="bearer",
                user_id=row.user_id,
                client_id=row.oauth2_client_id,
            )
