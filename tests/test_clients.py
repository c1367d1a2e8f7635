"""Tests for the client directory."""

import pytest

from oauth2_server.errors import InvalidClient, NotFound
from tests.conftest import seed_client


class TestGetClientByClientId:

    def test_returns_full_client(self, service, oauth_client, client_owner):
        client = service.clients.get_client_by_client_id("client-c")

        assert client == oauth_client
        assert client.id == oauth_client.id
        assert client.client_id == "client-c"
        assert client.client_secret.startswith("$2b$")
        assert client.user_id == client_owner.id

    def test_unknown_client_raises_not_found(self, service, oauth_client):
        with pytest.raises(NotFound):
            service.clients.get_client_by_client_id("nope")

    def test_lookup_is_exact(self, service, oauth_client):
        with pytest.raises(NotFound):
            service.clients.get_client_by_client_id("client-")

    def test_client_without_user(self, service, other_client):
        assert service.clients.get_client_by_client_id("client-d").user_id is None

    def test_validate_secret(self, service, oauth_client):
        assert service.clients.validate_secret(oauth_client, "s1") is True
        assert service.clients.validate_secret(oauth_client, "s2") is False


class TestValidateRedirectUri:

    def test_registered_uri(self, service, oauth_client):
        assert service.clients.validate_redirect_uri(oauth_client, "https://app/cb") is True

    @pytest.mark.parametrize("uri", [
        "https://app/cb/",
        "https://app/cb?x=1",
        "https://app/c",
        "https://APP/cb",
        "https://app/cb/extra",
        "",
    ])
    def test_no_prefix_or_fuzzy_matching(self, service, oauth_client, uri):
        assert service.clients.validate_redirect_uri(oauth_client, uri) is False

    def test_uri_of_other_client(self, service, oauth_client, other_client):
        assert service.clients.validate_redirect_uri(oauth_client, "https://other/cb") is False
        assert service.clients.validate_redirect_uri(other_client, "https://other/cb") is True

    def test_multiple_uris(self, db, hasher, service):
        client = seed_client(db, hasher, "multi", "x", redirect_uris=["https://a/cb", "https://b/cb"])
        assert service.clients.validate_redirect_uri(client, "https://a/cb") is True
        assert service.clients.validate_redirect_uri(client, "https://b/cb") is True


class TestAuthenticateClient:

    def test_valid_credentials(self, service, oauth_client):
        assert service.authenticate_client("client-c", "s1") == oauth_client

    def test_wrong_secret(self, service, oauth_client):
        with pytest.raises(InvalidClient):
            service.authenticate_client("client-c", "wrong")

    def test_unknown_client(self, service):
        with pytest.raises(InvalidClient):
            service.authenticate_client("ghost", "s1")
