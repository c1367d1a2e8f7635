"""
Wires the token service components together for the HTTP layer.
"""

import time
from typing import Callable, Optional

from loguru import logger

from oauth2_server.clients import ClientDirectory
from oauth2_server.codes import CodeStore
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import InvalidClient, NotFound
from oauth2_server.schemas import OAuth2Client
from oauth2_server.security import (
    BcryptSecretHasher,
    SecretHasher,
    TokenGenerator,
    UrlSafeTokenGenerator,
)
from oauth2_server.tokens import TokenIssuer
from oauth2_server.users import SqlUserResolver, UserResolver


class OAuth2Service:
    """
    Entry point for an OAuth2 endpoint layer.

    Usage:
        db = DatabaseManager(settings)
        service = OAuth2Service(db)
        client = service.authenticate_client("my-app", "s3cret")
        token = service.tokens.generate_token_for_client(client)
    """

    def __init__(
        self,
        db: DatabaseManager,
        users: Optional[UserResolver] = None,
        hasher: Optional[SecretHasher] = None,
        generator: Optional[TokenGenerator] = None,
        clock: Callable[[], float] = time.time,
    ):
        settings = db.settings
        self.db = db
        self.settings = settings
        self.users = users or SqlUserResolver(db)

        hasher = hasher or BcryptSecretHasher(settings.bcrypt_rounds)
        generator = generator or UrlSafeTokenGenerator(settings.token_bytes)

        self.clients = ClientDirectory(db, hasher=hasher)
        self.codes = CodeStore(db, generator=generator, clock=clock)
        self.tokens = TokenIssuer(db, self.codes, self.users, generator=generator, clock=clock)

    def authenticate_client(self, client_id: str, client_secret: str) -> OAuth2Client:
        """
        Resolve a client and check its secret.

        Raises:
            InvalidClient: unknown client_id or wrong secret
        """
        try:
            client = self.clients.get_client_by_client_id(client_id)
        except NotFound:
            raise InvalidClient("Client authentication failed")

        if not self.clients.validate_secret(client, client_secret):
            raise InvalidClient("Client authentication failed")

        logger.debug(f"[CLIENT] Authenticated client: {client.client_id}")
        return client
