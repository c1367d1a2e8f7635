"""
SQLAlchemy models for OAuth2 clients, codes and tokens.

Timestamps are unix seconds (integers).
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class User(Base):
    """Resource owners. Only the id matters to the token service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nickname = Column(String(255), nullable=True)


class OAuth2ClientRecord(Base):
    """Registered OAuth2 clients"""

    __tablename__ = "oauth2_clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(255), unique=True, nullable=False, index=True)
    client_secret = Column(String(255), nullable=False)  # bcrypt hash
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    redirect_uris = relationship(
        "OAuth2RedirectUriRecord",
        back_populates="client",
        cascade="all, delete-orphan",
    )


class OAuth2RedirectUriRecord(Base):
    """Redirect URIs allowed per client (exact match only)"""

    __tablename__ = "oauth2_redirect_uris"
    __table_args__ = (
        UniqueConstraint("oauth2_client_id", "uri", name="uq_oauth2_redirect_uri"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    oauth2_client_id = Column(Integer, ForeignKey("oauth2_clients.id"), nullable=False, index=True)
    uri = Column(String(2000), nullable=False)

    client = relationship("OAuth2ClientRecord", back_populates="redirect_uris")


class OAuth2CodeRecord(Base):
    """One-time authorization codes"""

    __tablename__ = "oauth2_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("oauth2_clients.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    code = Column(String(255), unique=True, nullable=False)
    created = Column(Integer, nullable=False)


class OAuth2TokenRecord(Base):
    """Issued access/refresh token pairs. Never updated after insert."""

    __tablename__ = "oauth2_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    oauth2_client_id = Column(Integer, ForeignKey("oauth2_clients.id"), nullable=False, index=True)
    access_token = Column(String(255), unique=True, nullable=False)
    refresh_token = Column(String(255), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created = Column(Integer, nullable=False)
    access_token_expires = Column(Integer, nullable=False, index=True)
    refresh_token_expires = Column(Integer, nullable=False)
