from typing import Any, Optional

from .auth import Authenticator, CredentialState, LoginCapability, RefreshCapability
from .base_client import BaseAPIClient, ErrorPolicy, refresh_on_unauthorized
from .config import ClientSettings
from .serialization import JsonSerializer
from .stores import CredentialStore, JsonFileCredentialStore
from .transport import RequestsTransport, Transport


class ApiClient(BaseAPIClient):
    """
    Ready-to-use client wiring credentials, login/refresh and dispatch.

    The credential state and the authenticator are shared by every
    request made through this instance.

    Parameters
    ----------
    settings : ClientSettings
        Base URL, token file and transport settings.
    on_authorizing : callable, optional
        Login capability, see `Authenticator`.
    on_refreshing : callable, optional
        Refresh capability, see `Authenticator`.
    on_error : callable, optional
        Error policy. Defaults to refreshing on HTTP 401 when a refresh
        capability is given; without either, failures are raised.
    store : CredentialStore, optional
        Overrides the JSON file store built from `settings`.
    transport : Transport, optional
        Overrides the `requests` transport built from `settings`.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        on_authorizing: Optional[LoginCapability] = None,
        on_refreshing: Optional[RefreshCapability] = None,
        on_error: Optional[ErrorPolicy] = None,
        store: Optional[CredentialStore] = None,
        transport: Optional[Transport] = None
    ) -> None:
        self.settings = settings

        if store is None:
            store = JsonFileCredentialStore(
                token_file=settings.token_file,
                namespace=settings.credentials_key
            )

        credentials = CredentialState(store)
        self.authenticator = Authenticator(
            credentials,
            on_authorizing=on_authorizing,
            on_refreshing=on_refreshing
        )

        if on_error is None and on_refreshing is not None:
            on_error = refresh_on_unauthorized(self.authenticator)

        super().__init__(
            settings.base_url,
            credentials=credentials,
            transport=transport or RequestsTransport(timeout=settings.timeout),
            serializer=JsonSerializer(indent=settings.json_indent),
            on_error=on_error
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "API_CLIENT_",
        **kwargs: Any
    ) -> "ApiClient":
        return cls(ClientSettings.from_env(prefix), **kwargs)

    def authorize(self, login: Any) -> bool:
        return self.authenticator.authorize(login)

    def refresh_access_token(self) -> bool:
        return self.authenticator.refresh_access_token()

    def has_access_token(self) -> bool:
        return self.credentials.has_access_token()

    def has_refresh_token(self) -> bool:
        return self.credentials.has_refresh_token()

    def restore_credentials(self) -> bool:
        return self.credentials.restore()

    def store_credentials(self) -> None:
        self.credentials.persist()
