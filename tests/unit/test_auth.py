"""Unit tests for token handling against the auth server (osiam_client/auth.py)."""
import pytest

from osiam_client.auth import AuthService
from osiam_client.exceptions import (
    ConfigurationError,
    ConnectionSetupError,
    DeserializationError,
    InvalidArgumentError,
    UnauthorizedError,
)
from osiam_client.token import AccessToken

AUTH = "http://localhost:8080/osiam-auth-server"

TOKEN_RESPONSE = {
    "access_token": "c5d116cb-2758-4e7c-9aad-6f1acd6fe5fb",
    "token_type": "bearer",
    "expires_in": 28799,
    "scope": "ADMIN",
    "refresh_token": "f5b9c2c4-7f2b-4e8a-a8a3-3d3e3a5f1c7a",
}


@pytest.fixture
def auth(fake_transport):
    return AuthService(
        AUTH + "/",
        client_id="example-client",
        client_secret="secret",
        client_redirect_uri="http://localhost:5000/oauth2",
        transport=fake_transport,
    )


def test_client_credentials_grant(auth, fake_transport):
    fake_transport.queue(TOKEN_RESPONSE)

    token = auth.retrieve_access_token("ADMIN")

    call = fake_transport.last_call
    assert call["method"] == "POST"
    assert call["url"] == f"{AUTH}/oauth/token"
    assert call["auth"] == ("example-client", "secret")
    assert call["data"] == {"grant_type": "client_credentials", "scope": "ADMIN"}
    assert token.token == TOKEN_RESPONSE["access_token"]
    assert token.scopes == frozenset({"ADMIN"})


def test_client_credentials_without_scopes_sends_no_scope(auth, fake_transport):
    fake_transport.queue(TOKEN_RESPONSE)
    auth.retrieve_access_token()
    assert "scope" not in fake_transport.last_call["data"]


def test_password_grant(auth, fake_transport):
    fake_transport.queue(TOKEN_RESPONSE)

    auth.retrieve_access_token_with_password("marissa", "koala", "GET", "POST")

    assert fake_transport.last_call["data"] == {
        "grant_type": "password",
        "username": "marissa",
        "password": "koala",
        "scope": "GET POST",
    }


def test_password_grant_requires_credentials(auth, fake_transport):
    with pytest.raises(InvalidArgumentError):
        auth.retrieve_access_token_with_password("marissa", "")
    assert fake_transport.calls == []


def test_authorization_code_grant(auth, fake_transport):
    fake_transport.queue(TOKEN_RESPONSE)

    auth.retrieve_access_token_with_code("abc123")

    assert fake_transport.last_call["data"] == {
        "grant_type": "authorization_code",
        "code": "abc123",
        "redirect_uri": "http://localhost:5000/oauth2",
    }


def test_authorization_code_grant_needs_redirect_uri(fake_transport):
    auth = AuthService(AUTH, client_id="example-client", client_secret="secret", transport=fake_transport)
    with pytest.raises(ConfigurationError, match="redirect URI"):
        auth.retrieve_access_token_with_code("abc123")
    assert fake_transport.calls == []


def test_missing_client_credentials(fake_transport):
    auth = AuthService(AUTH, client_id="example-client", transport=fake_transport)
    with pytest.raises(ConfigurationError):
        auth.retrieve_access_token()
    assert fake_transport.calls == []


def test_refresh_sends_refresh_token(auth, fake_transport):
    fake_transport.queue(TOKEN_RESPONSE)
    old = AccessToken(token="old", refresh_token="r1")

    auth.refresh_access_token(old, "GET")

    assert fake_transport.last_call["data"] == {
        "grant_type": "refresh_token",
        "refresh_token": "r1",
        "scope": "GET",
    }


def test_refresh_without_refresh_token(auth, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError, match="no refresh token"):
        auth.refresh_access_token(access_token)
    assert fake_transport.calls == []


def test_authorization_uri(auth):
    uri = auth.get_authorization_uri("GET", "POST")
    assert uri == (
        f"{AUTH}/oauth/authorize?client_id=example-client&response_type=code"
        "&redirect_uri=http%3A%2F%2Flocalhost%3A5000%2Foauth2&scope=GET+POST"
    )


def test_validate_access_token(auth, fake_transport, access_token):
    fake_transport.queue({
        "token": access_token.token,
        "expires_at": 4102444800000,
        "scopes": ["GET", "POST"],
        "client_id": "example-client",
        "expired": False,
    })

    validated = auth.validate_access_token(access_token)

    call = fake_transport.last_call
    assert call["url"] == f"{AUTH}/token/validation"
    assert call["headers"]["Authorization"] == f"Bearer {access_token.token}"
    assert validated.client_id == "example-client"
    assert not validated.is_expired()


def test_revoke_access_token(auth, fake_transport, access_token):
    fake_transport.queue(status_code=200)
    auth.revoke_access_token(access_token)
    assert fake_transport.last_call["url"] == f"{AUTH}/token/revocation"


def test_revoke_all_access_tokens(auth, fake_transport, access_token):
    fake_transport.queue(status_code=200)
    auth.revoke_all_access_tokens("cef9452e-00a9-4cec-a086-d171374ffbef", access_token)
    assert fake_transport.last_call["url"] == f"{AUTH}/token/revocation/cef9452e-00a9-4cec-a086-d171374ffbef"


def test_bad_client_credentials(auth, fake_transport):
    fake_transport.queue(
        {"error": "invalid_client", "error_description": "Bad client credentials"},
        status_code=401,
    )
    with pytest.raises(UnauthorizedError, match="Bad client credentials"):
        auth.retrieve_access_token()


def test_malformed_token_response(auth, fake_transport):
    fake_transport.queue({"token_type": "bearer"})
    with pytest.raises(DeserializationError, match="access token"):
        auth.retrieve_access_token()


def test_malformed_token_response_does_not_leak_tokens(auth, fake_transport):
    fake_transport.queue({"acces_token": "leaked-bearer", "refresh_token": "leaked-refresh"})

    with pytest.raises(DeserializationError) as exc_info:
        auth.retrieve_access_token()

    assert "leaked" not in str(exc_info.value)


def test_connection_failure(auth, fake_transport):
    import requests

    fake_transport.fail_with(requests.ConnectionError("refused"))
    with pytest.raises(ConnectionSetupError):
        auth.retrieve_access_token()
