"""
Configuration for the OAuth2 token service.

Values come from the environment (a local .env file is loaded first).
Expiry values are in seconds.
"""

import os

import dotenv
from loguru import logger

dotenv.load_dotenv()

# 10 minutes
ACCESS_TOKEN_EXPIRY = 600

# 1 hour
REFRESH_TOKEN_EXPIRY = 3600

# 10 minutes
CODE_EXPIRY = 600

# Raw bytes of randomness behind every code and token value
MIN_TOKEN_BYTES = 32


class Settings:
    """Settings for the token service"""

    def __init__(self):
        self.database_url = os.getenv("OAUTH2_DATABASE_URL", "sqlite:///./oauth2.db")

        # Connection pooling
        self.pool_size = int(os.getenv("DB_POOL_SIZE", "10"))
        self.max_overflow = int(os.getenv("DB_MAX_OVERFLOW", "20"))
        self.pool_recycle = int(os.getenv("DB_POOL_RECYCLE", "1500"))
        self.echo = os.getenv("DB_ECHO", "False").lower() == "true"

        self.access_token_expiry = int(os.getenv("ACCESS_TOKEN_EXPIRY", str(ACCESS_TOKEN_EXPIRY)))
        self.refresh_token_expiry = int(os.getenv("REFRESH_TOKEN_EXPIRY", str(REFRESH_TOKEN_EXPIRY)))
        self.code_expiry = int(os.getenv("CODE_EXPIRY", str(CODE_EXPIRY)))

        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", "12"))

        self.token_bytes = int(os.getenv("TOKEN_BYTES", str(MIN_TOKEN_BYTES)))
        if self.token_bytes < MIN_TOKEN_BYTES:
            logger.warning(
                f"TOKEN_BYTES={self.token_bytes} is below {MIN_TOKEN_BYTES} - using {MIN_TOKEN_BYTES}"
            )
            self.token_bytes = MIN_TOKEN_BYTES

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def __repr__(self) -> str:
        return (
            f"Settings(database_url={self.database_url!r}, "
            f"access_token_expiry={self.access_token_expiry}, "
            f"refresh_token_expiry={self.refresh_token_expiry}, "
            f"code_expiry={self.code_expiry})"
        )
