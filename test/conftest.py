from bearer_client import (
    BaseAPIClient,
    CredentialState,
    MemoryCredentialStore,
    TransportError,
    TransportResponse,
)
from unittest.mock import MagicMock
import pytest
import json


@pytest.fixture
def ok():
    """Factory for successful transport responses carrying JSON."""
    def build(payload=None, status=200):
        body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        return TransportResponse(status, {"Content-Type": "application/json"}, body)

    return build


@pytest.fixture
def http_error():
    """Factory for transport errors with a status code and JSON body."""
    def build(status, payload=None):
        body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        return TransportError(f"HTTP {status}", status_code=status, body=body)

    return build


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def credentials(store):
    state = CredentialState(store)
    state.set("access-1", "refresh-1")
    return state


@pytest.fixture
def transport():
    """A transport whose `send` is scripted through `side_effect`."""
    return MagicMock()


@pytest.fixture
def on_error():
    return MagicMock(return_value=True)


@pytest.fixture
def client(credentials, transport, on_error):
    return BaseAPIClient(
        "https://api.example.com",
        credentials=credentials,
        transport=transport,
        on_error=on_error
    )
