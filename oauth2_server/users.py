"""
User lookup for the token service.

User records belong to the host application; the token service only needs
to turn a stored user id back into a User.
"""

from abc import ABC, abstractmethod

from loguru import logger

from oauth2_server import models
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import NotFound
from oauth2_server.schemas import User


class UserResolver(ABC):
    """Abstract base class for user lookups."""

    @abstractmethod
    def find_by_id(self, user_id: int) -> User:
        """Return the user or raise NotFound."""
        pass


class SqlUserResolver(UserResolver):
    """Resolves users from the users table"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def find_by_id(self, user_id: int) -> User:
        with self.db.session_scope() as session:
            row = session.get(models.User, user_id)
            if row is None:
                logger.warning(f"[USER] User not found: {user_id}")
                raise NotFound("User not found")
            return User.model_validate(row)
