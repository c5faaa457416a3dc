from .auth import AuthResult, Authenticator, CredentialPair, CredentialState
from .base_client import (
    BaseAPIClient,
    DataDirection,
    Outcome,
    RequestMethod,
    refresh_on_unauthorized,
)
from .client import ApiClient
from .config import ClientSettings
from .exceptions import (
    ApiClientError,
    BearerClientError,
    CredentialStoreError,
    DeserializationError,
    MissingCapabilityError,
    TransportError,
)
from .routes import Controller, RouteBuilder, compose_url
from .serialization import JsonSerializer
from .stores import CredentialStore, JsonFileCredentialStore, MemoryCredentialStore
from .transport import RequestsTransport, Transport, TransportResponse

__all__ = [
    "ApiClient",
    "ApiClientError",
    "AuthResult",
    "Authenticator",
    "BaseAPIClient",
    "BearerClientError",
    "ClientSettings",
    "Controller",
    "CredentialPair",
    "CredentialState",
    "CredentialStore",
    "CredentialStoreError",
    "DataDirection",
    "DeserializationError",
    "JsonFileCredentialStore",
    "JsonSerializer",
    "MemoryCredentialStore",
    "MissingCapabilityError",
    "Outcome",
    "RequestMethod",
    "RequestsTransport",
    "RouteBuilder",
    "Transport",
    "TransportError",
    "TransportResponse",
    "compose_url",
    "refresh_on_unauthorized",
]
