"""Full authorization code flow against the library components."""

import pytest

from oauth2_server.clients import ClientDirectory
from oauth2_server.codes import CodeStore
from oauth2_server.errors import InvalidRequest, NotFound
from oauth2_server.tokens import TokenIssuer
from oauth2_server.users import SqlUserResolver
from tests.conftest import QueuedTokenGenerator, seed_client, seed_user


def test_code_flow(db, hasher, clock):
    seed_client(db, hasher, "C", "s1", redirect_uris=["https://app/cb"])
    user = seed_user(db, "U")

    clients = ClientDirectory(db, hasher=hasher)
    codes = CodeStore(db, generator=QueuedTokenGenerator("abc"), clock=clock)
    tokens = TokenIssuer(db, codes, SqlUserResolver(db), clock=clock)

    client = clients.get_client_by_client_id("C")
    assert clients.validate_secret(client, "s1")
    assert clients.validate_redirect_uri(client, "https://app/cb")

    assert codes.generate_code_for_user(client, user).code == "abc"

    token = tokens.generate_token_from_code(client, "abc")
    assert token.user_id == user.id

    with pytest.raises(InvalidRequest):
        tokens.generate_token_from_code(client, "abc")

    clock.advance(300)
    assert tokens.get_token_by_access_token(token.access_token) == token

    clock.advance(300)
    with pytest.raises(NotFound):
        tokens.get_token_by_access_token(token.access_token)
