"""
One-time authorization codes.

A code is bound to a (client, user) pair when issued. Exchanging it deletes
the row first and only then checks expiry and ownership, so a code can be
presented at most once whether or not the exchange succeeds.
"""

import time
from typing import Callable, Optional

from loguru import logger
from sqlalchemy import delete, select

from oauth2_server import models
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import InvalidRequest, UnauthorizedClient
from oauth2_server.log_config import mask
from oauth2_server.schemas import OAuth2Client, OAuth2Code, OAuth2CodeRecord, User
from oauth2_server.security import TokenGenerator, UrlSafeTokenGenerator


class CodeStore:
    """Issues and consumes authorization codes"""

    def __init__(
        self,
        db: DatabaseManager,
        generator: Optional[TokenGenerator] = None,
        clock: Callable[[], float] = time.time,
        code_expiry: Optional[int] = None,
        use_returning: Optional[bool] = None,
    ):
        """
        Args:
            db: Database manager
            generator: Source of code values
            clock: Returns the current unix time
            code_expiry: Seconds a code stays exchangeable (defaults to settings)
            use_returning: Force DELETE ... RETURNING on or off (defaults to dialect support)
        """
        self.db = db
        self.generator = generator or UrlSafeTokenGenerator(db.settings.token_bytes)
        self.clock = clock
        self.code_expiry = code_expiry if code_expiry is not None else db.settings.code_expiry
        self.use_returning = db.supports_delete_returning if use_returning is None else use_returning

    def _now(self) -> int:
        return int(self.clock())

    # ==================== ISSUE ====================

    def generate_code_for_user(self, client: OAuth2Client, user: User) -> OAuth2Code:
        """Create a code for a user. The code is later exchanged for a token."""
        code = self.generator.generate()

        with self.db.session_scope() as session:
            session.add(
                models.OAuth2CodeRecord(
                    client_id=client.id,
                    user_id=user.id,
                    code=code,
                    created=self._now(),
                )
            )

        logger.info(f"[CODE] Issued code {mask(code)} for client {client.client_id}, user {user.id}")
        return OAuth2Code(code=code)

    # ==================== CONSUME ====================

    def _take(self, code: str) -> Optional[OAuth2CodeRecord]:
        """
        Fetch and delete the row for this code in one committed transaction.

        Returns None if the code does not exist or a concurrent caller
        deleted it first.
        """
        table = models.OAuth2CodeRecord

        with self.db.session_scope() as session:
            if self.use_returning:
                row = session.execute(
                    delete(table)
                    .where(table.code == code)
                    .returning(table.id, table.client_id, table.user_id, table.code, table.created)
                    .execution_options(synchronize_session=False)
                ).first()
                if row is None:
                    return None
                return OAuth2CodeRecord(**row._mapping)

            row = session.execute(select(table).where(table.code == code)).scalar_one_or_none()
            if row is None:
                return None
            record = OAuth2CodeRecord.model_validate(row)

            result = session.execute(
                delete(table)
                .where(table.id == record.id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning(f"[CODE] Lost race consuming code {mask(code)}")
                return None
            return record

    def consume_code(self, code: str, client: OAuth2Client) -> OAuth2CodeRecord:
        """
        Exchange a code exactly once.

        The row is deleted before validation, so an expired or mismatched
        code is still used up.

        Raises:
            InvalidRequest: code unknown, already used, or expired
            UnauthorizedClient: code was issued to a different client
        """
        record = self._take(code)

        if record is None:
            logger.warning(f"[CODE] Code not recognized: {mask(code)}")
            raise InvalidRequest("The supplied code was not recognized")

        if record.created + self.code_expiry < self._now():
            logger.warning(f"[CODE] Code expired: {mask(code)}")
            raise InvalidRequest("The supplied code has expired")

        if record.client_id != client.id:
            logger.warning(
                f"[CODE] Client mismatch for code {mask(code)}: "
                f"issued to {record.client_id}, presented by {client.id}"
            )
            raise UnauthorizedClient(
                "The client_id associated with the code did not match the authenticated client credentials"
            )

        logger.debug(f"[CODE] Code consumed for client {client.client_id}, user {record.user_id}")
        return record
