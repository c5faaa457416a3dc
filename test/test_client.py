from bearer_client import (
    ApiClient,
    ApiClientError,
    ClientSettings,
    Controller,
    JsonFileCredentialStore,
    RequestsTransport,
)
from unittest.mock import MagicMock, patch
import threading
import pytest
import json


class Controllers(Controller):
    Users = "Users"
    Files = "Files"


@pytest.fixture
def settings(tmp_path):
    return ClientSettings(
        base_url="https://api.example.com",
        token_file=str(tmp_path / ".token.json"),
        timeout=7.0
    )


def saved_tokens(settings):
    with open(settings.token_file) as f:
        return json.load(f)[settings.credentials_key]


def test_default_wiring(settings):
    client = ApiClient(settings)

    assert isinstance(client.transport, RequestsTransport)
    assert client.transport.timeout == 7.0
    assert isinstance(client.credentials.store, JsonFileCredentialStore)
    assert client.credentials.store.token_file == settings.token_file
    assert client.on_error is None


@patch.dict("os.environ", {"API_CLIENT_BASE_URL": "https://env.example.com"}, clear=True)
def test_from_env():
    client = ApiClient.from_env(transport=MagicMock())
    assert client.base_url == "https://env.example.com"


def test_authorize_persists_to_token_file(settings):
    client = ApiClient(
        settings,
        on_authorizing=lambda login: (True, "A", "R"),
        transport=MagicMock()
    )

    assert client.authorize({"user": "u"}) is True
    assert saved_tokens(settings) == {"access_token": "A", "refresh_token": "R"}

    restarted = ApiClient(settings, transport=MagicMock())
    assert restarted.has_access_token() is True
    assert restarted.has_refresh_token() is True
    assert restarted.credentials.access_token == "A"


def test_auto_refresh_on_unauthorized(settings, ok, http_error):
    transport = MagicMock()
    transport.send.side_effect = [http_error(401), ok({"id": 1})]
    refresh = MagicMock(return_value=(True, "A2", "R2"))

    client = ApiClient(settings, on_refreshing=refresh, transport=transport)
    client.credentials.set("A", "R")

    assert client.get(Controllers.Users, ["1"]) == {"id": 1}
    refresh.assert_called_once_with("A", "R")
    assert saved_tokens(settings) == {"access_token": "A2", "refresh_token": "R2"}
    headers = transport.send.call_args_list[1].args[2]
    assert headers["Authorization"] == "Bearer A2"


def test_auto_refresh_declines_other_failures(settings, http_error):
    transport = MagicMock()
    transport.send.side_effect = http_error(500)
    refresh = MagicMock()

    client = ApiClient(settings, on_refreshing=refresh, transport=transport)
    client.credentials.set("A", "R")

    assert client.get(Controllers.Users) is None
    refresh.assert_not_called()


def test_custom_policy_takes_precedence(settings):
    policy = MagicMock(return_value=False)
    client = ApiClient(
        settings,
        on_refreshing=MagicMock(),
        on_error=policy,
        transport=MagicMock()
    )
    assert client.on_error is policy


def test_without_policy_failures_are_raised(settings, http_error):
    transport = MagicMock()
    transport.send.side_effect = http_error(401)
    client = ApiClient(settings, transport=transport)

    with pytest.raises(ApiClientError):
        client.get(Controllers.Users)


def test_concurrent_unauthorized_requests_refresh_once(
    settings,
    ok,
    http_error
):
    """Two requests failing with the same expired token share one refresh."""
    barrier = threading.Barrier(2, timeout=5)
    transport = MagicMock()

    def send(method, url, headers, body=None):
        if headers.get("Authorization") == "Bearer A":
            barrier.wait()
            raise http_error(401)
        return ok({"token": headers["Authorization"]})

    transport.send.side_effect = send
    refresh = MagicMock(return_value=(True, "A2", "R2"))

    client = ApiClient(settings, on_refreshing=refresh, transport=transport)
    client.credentials.set("A", "R")
    results = []

    def worker():
        results.append(client.get(Controllers.Users))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads: t.start()
    for t in threads: t.join()

    refresh.assert_called_once_with("A", "R")
    assert results == [{"token": "Bearer A2"}] * 2
    assert client.credentials.access_token == "A2"
    assert client.credentials.refresh_token == "R2"
