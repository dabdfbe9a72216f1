"""Unit tests for the generic resource engine (osiam_client/resource_client.py)."""
import json

import pytest
import requests

from osiam_client.exceptions import (
    ConfigurationError,
    ConflictError,
    ConnectionSetupError,
    DeserializationError,
    ForbiddenError,
    InvalidArgumentError,
    NoResultError,
)
from osiam_client.query import MAX_COUNT, QueryBuilder
from osiam_client.resource_client import ResourceClient
from osiam_client.resources import SCIM_USER_SCHEMA, Group, User

BASE = "http://localhost:8080/osiam-resource-server"

ALICE = {
    "id": "a1b2",
    "schemas": [SCIM_USER_SCHEMA],
    "userName": "alice",
    "emails": [{"value": "alice@example.com", "primary": True}],
    "meta": {"created": "2013-07-31T21:43:18.000+02:00", "resourceType": "User"},
}


@pytest.fixture
def users(fake_transport):
    return ResourceClient(BASE, User, transport=fake_transport)


# ============================================================================
# Construction
# ============================================================================

def test_path_defaults_to_resource_class():
    assert ResourceClient(BASE, User).path == "Users"
    assert ResourceClient(BASE, Group).path == "Groups"


def test_explicit_path_wins():
    assert ResourceClient(BASE, User, path="Accounts").path == "Accounts"


def test_empty_endpoint_is_configuration_error():
    with pytest.raises(ConfigurationError):
        ResourceClient("", User)


# ============================================================================
# get / delete
# ============================================================================

def test_get_sends_bearer_request_and_decodes(users, fake_transport, access_token):
    fake_transport.queue(ALICE)

    user = users.get("a1b2", access_token)

    assert isinstance(user, User)
    assert user.id == "a1b2"
    assert user.user_name == "alice"
    call = fake_transport.last_call
    assert call["method"] == "GET"
    assert call["url"] == f"{BASE}/Users/a1b2"
    assert call["headers"]["Authorization"] == f"Bearer {access_token.token}"
    assert call["headers"]["Accept"] == "application/json"


@pytest.mark.parametrize("resource_id", ["", None])
def test_get_with_empty_id_sends_nothing(users, fake_transport, access_token, resource_id):
    with pytest.raises(InvalidArgumentError):
        users.get(resource_id, access_token)
    assert fake_transport.calls == []


def test_get_without_token_sends_nothing(users, fake_transport):
    with pytest.raises(InvalidArgumentError):
        users.get("a1b2", None)
    assert fake_transport.calls == []


def test_get_quotes_id_in_path(users, fake_transport, access_token):
    fake_transport.queue(ALICE)
    users.get("a/b", access_token)
    assert fake_transport.last_call["url"] == f"{BASE}/Users/a%2Fb"


def test_delete_returns_nothing(users, fake_transport, access_token):
    fake_transport.queue(status_code=204)

    assert users.delete("a1b2", access_token) is None
    assert fake_transport.last_call["method"] == "DELETE"
    assert fake_transport.last_call["url"] == f"{BASE}/Users/a1b2"


def test_delete_with_empty_id_sends_nothing(users, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError):
        users.delete("", access_token)
    assert fake_transport.calls == []


# ============================================================================
# create / update / replace
# ============================================================================

def test_create_then_get_round_trips(users, fake_transport, access_token):
    fake_transport.queue(ALICE, status_code=201).queue(ALICE)
    new_user = User(user_name="alice", emails=[{"value": "alice@example.com", "primary": True}])

    created = users.create(new_user, access_token)
    fetched = users.get(created.id, access_token)

    assert created.id == "a1b2"
    assert fetched == created
    assert fetched.user_name == new_user.user_name
    assert fetched.emails == new_user.emails


def test_create_posts_serialized_resource(users, fake_transport, access_token):
    fake_transport.queue(ALICE, status_code=201)

    users.create(User(user_name="alice"), access_token)

    call = fake_transport.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == f"{BASE}/Users"
    assert call["headers"]["Content-Type"] == "application/json"
    assert json.loads(call["data"]) == {"schemas": [SCIM_USER_SCHEMA], "userName": "alice"}


def test_create_requires_resource(users, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError, match="User must not be null"):
        users.create(None, access_token)
    assert fake_transport.calls == []


def test_update_patches_only_set_fields(users, fake_transport, access_token):
    fake_transport.queue({**ALICE, "displayName": "Alice"})

    updated = users.update("a1b2", User(display_name="Alice"), access_token)

    call = fake_transport.last_call
    assert call["method"] == "PATCH"
    assert call["url"] == f"{BASE}/Users/a1b2"
    assert json.loads(call["data"]) == {"schemas": [SCIM_USER_SCHEMA], "displayName": "Alice"}
    assert updated.display_name == "Alice"


def test_replace_puts_whole_resource(users, fake_transport, access_token):
    fake_transport.queue(ALICE)
    replacement = User.from_dict(ALICE)

    users.replace("a1b2", replacement, access_token)

    call = fake_transport.last_call
    assert call["method"] == "PUT"
    assert json.loads(call["data"]) == ALICE


def test_modify_requires_id_and_resource(users, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError):
        users.update("", User(user_name="alice"), access_token)
    with pytest.raises(InvalidArgumentError):
        users.replace("a1b2", None, access_token)
    assert fake_transport.calls == []


def test_unserializable_resource_is_rejected_locally(users, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError):
        users.create(User(user_name="alice", extra={"bad": object()}), access_token)
    assert fake_transport.calls == []


# ============================================================================
# search / get_all
# ============================================================================

def test_search_with_defaults_omits_paging(users, fake_transport, access_token):
    fake_transport.queue({"totalResults": 0, "Resources": []})

    users.search(QueryBuilder().build(), access_token)

    params = fake_transport.last_call["params"]
    assert "startIndex" not in params
    assert "count" not in params


def test_search_sends_count_but_not_default_start_index(users, fake_transport, access_token):
    fake_transport.queue({"totalResults": 0, "Resources": []})

    users.search(QueryBuilder().count(10).build(), access_token)

    params = fake_transport.last_call["params"]
    assert params["count"] == "10"
    assert "startIndex" not in params


def test_search_sends_filter_and_sorting(users, fake_transport, access_token):
    fake_transport.queue({"totalResults": 0, "Resources": []})
    query = (QueryBuilder()
             .filter('userName eq "alice"')
             .attributes("userName", "emails")
             .descending("meta.created")
             .start_index(11)
             .build())

    users.search(query, access_token)

    assert fake_transport.last_call["url"] == f"{BASE}/Users"
    assert fake_transport.last_call["params"] == {
        "attributes": "userName,emails",
        "filter": 'userName eq "alice"',
        "sortBy": "meta.created",
        "sortOrder": "descending",
        "startIndex": "11",
    }


def test_search_decodes_typed_result(users, fake_transport, access_token):
    fake_transport.queue({
        "totalResults": 7,
        "itemsPerPage": 2,
        "startIndex": 3,
        "Resources": [ALICE, {"id": "b2c3", "userName": "bob"}],
    })

    result = users.search(QueryBuilder().build(), access_token)

    assert result.total_results == 7
    assert result.items_per_page == 2
    assert result.start_index == 3
    assert [u.user_name for u in result.resources] == ["alice", "bob"]
    assert all(isinstance(u, User) for u in result.resources)


def test_search_requires_query(users, fake_transport, access_token):
    with pytest.raises(InvalidArgumentError):
        users.search(None, access_token)
    assert fake_transport.calls == []


def test_get_all_requests_max_count_and_drops_total(users, fake_transport, access_token):
    fake_transport.queue({"totalResults": 1, "Resources": [ALICE]})

    result = users.get_all(access_token)

    assert fake_transport.last_call["params"] == {"count": str(MAX_COUNT)}
    assert isinstance(result, list)
    assert result[0].id == "a1b2"


# ============================================================================
# Failures
# ============================================================================

def test_not_found_uses_server_description(users, fake_transport, access_token):
    fake_transport.queue({"description": "no such user"}, status_code=404, reason="Not Found")

    with pytest.raises(NoResultError) as exc_info:
        users.get("missing", access_token)

    assert exc_info.value.message == "no such user"
    assert exc_info.value.status_code == 404


def test_forbidden_reports_token_scopes(users, fake_transport, access_token):
    fake_transport.queue({"description": "ignored"}, status_code=403)

    with pytest.raises(ForbiddenError) as exc_info:
        users.delete("a1b2", access_token)

    assert exc_info.value.message == "Insufficient scopes: GET POST"


def test_conflict_on_create(users, fake_transport, access_token):
    fake_transport.queue({"description": "userName already taken"}, status_code=409)

    with pytest.raises(ConflictError, match="userName already taken"):
        users.create(User(user_name="alice"), access_token)


def test_transport_failure_is_connection_setup_error(users, fake_transport, access_token):
    cause = requests.ConnectionError("connection refused")
    fake_transport.fail_with(cause)

    with pytest.raises(ConnectionSetupError, match="Cannot connect to server") as exc_info:
        users.get("a1b2", access_token)

    assert exc_info.value.__cause__ is cause


def test_timeout_is_connection_setup_error(users, fake_transport, access_token):
    fake_transport.fail_with(requests.Timeout("read timed out"))

    with pytest.raises(ConnectionSetupError):
        users.get_all(access_token)


@pytest.mark.parametrize("text", ["not json", "[1, 2]", ""])
def test_malformed_success_body_is_deserialization_error(users, fake_transport, access_token, text):
    fake_transport.queue(text=text)

    with pytest.raises(DeserializationError):
        users.get("a1b2", access_token)


def test_malformed_search_body_is_deserialization_error(users, fake_transport, access_token):
    fake_transport.queue({"totalResults": "many", "Resources": []})

    with pytest.raises(DeserializationError, match="search result"):
        users.search(QueryBuilder().build(), access_token)


def test_uses_shared_transport_when_none_injected(monkeypatch, fake_transport, access_token):
    from osiam_client import transport as transport_module

    transport_module.set_transport(fake_transport)
    fake_transport.queue(ALICE)

    ResourceClient(BASE, User).get("a1b2", access_token)

    assert len(fake_transport.calls) == 1
