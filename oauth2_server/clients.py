"""
Client lookup, secret verification and redirect URI allow-listing.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import select

from oauth2_server.database import DatabaseManager
from oauth2_server.errors import NotFound
from oauth2_server.log_config import mask
from oauth2_server.models import OAuth2ClientRecord, OAuth2RedirectUriRecord
from oauth2_server.schemas import OAuth2Client
from oauth2_server.security import BcryptSecretHasher, SecretHasher


def validate_secret(hasher: SecretHasher, client: OAuth2Client, secret: str) -> bool:
    """Check a supplied secret against the client's stored hash. Never raises on mismatch."""
    result = hasher.verify(secret, client.client_secret)
    if not result:
        logger.warning(f"[CLIENT] Secret verification failed for client: {client.client_id}")
    return result


class ClientDirectory:
    """Resolves public client identifiers to registered clients"""

    def __init__(self, db: DatabaseManager, hasher: Optional[SecretHasher] = None):
        self.db = db
        self.hasher = hasher or BcryptSecretHasher(db.settings.bcrypt_rounds)

    def get_client_by_client_id(self, client_id: str) -> OAuth2Client:
        """
        Look up a client by its public identifier.

        Raises:
            NotFound: no client is registered under client_id
        """
        with self.db.session_scope() as session:
            row = session.execute(
                select(OAuth2ClientRecord).where(OAuth2ClientRecord.client_id == client_id)
            ).scalar_one_or_none()

            if row is None:
                logger.warning(f"[CLIENT] Unknown client_id: {mask(client_id, 12)}")
                raise NotFound("OAuth2 client_id not recognized")

            return OAuth2Client.model_validate(row)

    def validate_secret(self, client: OAuth2Client, secret: str) -> bool:
        return validate_secret(self.hasher, client, secret)

    def validate_redirect_uri(self, client: OAuth2Client, redirect_uri: str) -> bool:
        """True if redirect_uri is registered for this client, compared exactly."""
        with self.db.session_scope() as session:
            candidates = session.execute(
                select(OAuth2RedirectUriRecord.uri).where(
                    OAuth2RedirectUriRecord.oauth2_client_id == client.id,
                    OAuth2RedirectUriRecord.uri == redirect_uri,
                )
            ).scalars().all()

        # Exact, case-sensitive match regardless of column collation
        if redirect_uri not in candidates:
            logger.debug(f"[CLIENT] Redirect URI not registered for {client.client_id}: {redirect_uri}")
            return False
        return True
