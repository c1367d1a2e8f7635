"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database, a fast bcrypt hasher
and a clock it can move forward.
"""

import pytest

from oauth2_server import models
from oauth2_server.config import Settings
from oauth2_server.database import DatabaseManager
from oauth2_server.schemas import OAuth2Client, User
from oauth2_server.security import BcryptSecretHasher, TokenGenerator
from oauth2_server.service import OAuth2Service

START_TIME = 1_700_000_000


class FakeClock:
    """Callable clock returning a settable unix time"""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class QueuedTokenGenerator(TokenGenerator):
    """Hands out predetermined values in order"""

    def __init__(self, *values: str):
        self.values = list(values)

    def generate(self) -> str:
        return self.values.pop(0)


def seed_user(db: DatabaseManager, nickname: str) -> User:
    with db.session_scope() as session:
        row = models.User(nickname=nickname)
        session.add(row)
        session.flush()
        return User.model_validate(row)


def seed_client(db, hasher, client_id, secret, redirect_uris=(), user_id=None) -> OAuth2Client:
    with db.session_scope() as session:
        row = models.OAuth2ClientRecord(
            client_id=client_id,
            client_secret=hasher.hash(secret),
            user_id=user_id,
        )
        row.redirect_uris = [models.OAuth2RedirectUriRecord(uri=uri) for uri in redirect_uris]
        session.add(row)
        session.flush()
        return OAuth2Client.model_validate(row)


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("OAUTH2_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRY", raising=False)
    monkeypatch.delenv("REFRESH_TOKEN_EXPIRY", raising=False)
    monkeypatch.delenv("CODE_EXPIRY", raising=False)
    monkeypatch.delenv("TOKEN_BYTES", raising=False)
    return Settings()


@pytest.fixture
def db(settings):
    manager = DatabaseManager(settings)
    manager.create_tables()
    yield manager
    manager.drop_tables()
    manager.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hasher():
    return BcryptSecretHasher(rounds=4)


@pytest.fixture
def service(db, hasher, clock):
    return OAuth2Service(db, hasher=hasher, clock=clock)


@pytest.fixture
def client_owner(db):
    return seed_user(db, "client-owner")


@pytest.fixture
def user(db):
    return seed_user(db, "alice")


@pytest.fixture
def oauth_client(db, hasher, client_owner):
    return seed_client(
        db, hasher, "client-c", "s1",
        redirect_uris=["https://app/cb"],
        user_id=client_owner.id,
    )


@pytest.fixture
def other_client(db, hasher):
    return seed_client(db, hasher, "client-d", "s2", redirect_uris=["https://other/cb"])
