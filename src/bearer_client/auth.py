from concurrent.futures import Future
from typing import Any, Callable, NamedTuple, Optional, Tuple
from threading import Lock, RLock
import logging

from .exceptions import MissingCapabilityError
from .stores import CredentialStore

log = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class CredentialPair(NamedTuple):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class AuthResult(NamedTuple):
    """Value returned by the login and refresh capabilities."""

    success: bool
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


LoginCapability = Callable[[Any], Tuple[bool, Optional[str], Optional[str]]]
RefreshCapability = Callable[
    [Optional[str], Optional[str]],
    Tuple[bool, Optional[str], Optional[str]]
]


class CredentialState:
    """
    In-memory holder of the access/refresh token pair.

    The pair is swapped as a whole under a lock, so readers never see one
    token updated and the other not. Durability goes through the injected
    `CredentialStore`; `set` never persists on its own.

    `lock` is reentrant and guards the in-memory pair together with its
    stored copy: restoring reads both keys and applies them while holding
    it, and persisting writes both keys while holding it. Flows that
    update and persist credentials hold it across `set` and `persist` so
    the store never ends up with tokens from two different pairs.

    Parameters
    ----------
    store : CredentialStore
        Backing store for the two tokens.
    """

    def __init__(
        self,
        store: CredentialStore
    ) -> None:
        self.store = store
        self.lock = RLock()
        self._pair = CredentialPair()

    @property
    def pair(self) -> CredentialPair:
        return self._pair

    @property
    def is_empty(self) -> bool:
        return self._pair == CredentialPair()

    @property
    def access_token(self) -> Optional[str]:
        return self._pair.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._pair.refresh_token

    def has_access_token(self) -> bool:
        if self._pair.access_token is None:
            self._restore_if_empty()
        return bool(self._pair.access_token)

    def has_refresh_token(self) -> bool:
        if self._pair.refresh_token is None:
            self._restore_if_empty()
        return bool(self._pair.refresh_token)

    def set(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str]
    ) -> None:
        with self.lock:
            self._pair = CredentialPair(access_token, refresh_token)

    def replace(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str]
    ) -> None:
        """Set and persist a new pair as one critical section."""
        with self.lock:
            self.set(access_token, refresh_token)
            self.persist()

    def clear(self) -> None:
        """
        Log out: drop both tokens in memory and in the store.

        Without the stored copy being blanked, the next lazy restore
        would bring the old tokens back.
        """
        self.replace(None, None)

    def _restore_if_empty(self) -> None:
        with self.lock:
            if self.is_empty:
                self.restore()

    def restore(self) -> bool:
        """
        Load both tokens from the store.

        Returns
        -------
        bool
            True if the store could be read, False otherwise. Store errors
            are logged and swallowed; the in-memory pair is left untouched
            in that case.
        """
        with self.lock:
            try:
                access = self.store.get(ACCESS_TOKEN_KEY)
                refresh = self.store.get(REFRESH_TOKEN_KEY)
            except Exception as e:
                log.warning(f"Error restoring credentials: {e}")
                return False

            self.set(access, refresh)
            return True

    def persist(self) -> None:
        """
        Write both tokens to the store.

        Raises whatever the store raises; a token that was accepted but
        not stored must not go unnoticed.
        """
        with self.lock:
            pair = self._pair
            self.store.put(ACCESS_TOKEN_KEY, pair.access_token)
            self.store.put(REFRESH_TOKEN_KEY, pair.refresh_token)


class Authenticator:
    """
    Drives the login and refresh flows of a `CredentialState`.

    The network side of both flows is delegated to application supplied
    capabilities that return `(success, access_token, refresh_token)`.
    A capability reporting success with an empty token is treated as a
    failure and leaves the state untouched.

    Refreshes are serialized: while one refresh is running, other callers
    wait for it and share its result instead of issuing their own.

    Parameters
    ----------
    state : CredentialState
        Credentials to read and update.
    on_authorizing : callable, optional
        Login capability, called with the caller's login payload.
    on_refreshing : callable, optional
        Refresh capability, called with the current access and refresh
        tokens.
    """

    def __init__(
        self,
        state: CredentialState,
        *,
        on_authorizing: Optional[LoginCapability] = None,
        on_refreshing: Optional[RefreshCapability] = None
    ) -> None:
        self.state = state
        self.on_authorizing = on_authorizing
        self.on_refreshing = on_refreshing
        self._lock = Lock()
        self._in_flight: Optional[Future] = None

    @staticmethod
    def _accept(result, flow: str) -> Optional[CredentialPair]:
        success, access, refresh = result
        if not success:
            return None
        if not access or not refresh:
            log.warning(f"{flow} reported success without both tokens, ignoring")
            return None
        return CredentialPair(access, refresh)

    def authorize(self, login: Any) -> bool:
        """
        Log in with `login` and store the returned credentials.

        Returns
        -------
        bool
            True if the login capability succeeded. On failure the
            current credentials are left as they were.
        """
        if self.on_authorizing is None:
            raise MissingCapabilityError("No login capability configured")

        pair = self._accept(self.on_authorizing(login), "Login")
        if pair is None:
            log.info("Authorization failed")
            return False

        self.state.replace(*pair)
        log.info("Authorization succeeded")
        return True

    def refresh_access_token(
        self,
        stale_access_token: Optional[str] = None
    ) -> bool:
        """
        Obtain a new credential pair from the current one.

        Parameters
        ----------
        stale_access_token : str, optional
            Access token a failed request was sent with. If the state no
            longer holds it, another caller has already refreshed and
            True is returned without calling the refresh capability.

        Returns
        -------
        bool
            True if the state now holds refreshed credentials.
        """
        if self.on_refreshing is None:
            raise MissingCapabilityError("No refresh capability configured")

        with self._lock:
            if (
                stale_access_token is not None
                and self.state.access_token != stale_access_token
            ):
                log.debug("Access token already refreshed by another caller")
                return True

            flight = self._in_flight
            owner = flight is None
            if owner:
                flight = Future()
                self._in_flight = flight

        if not owner:
            return flight.result()

        try:
            refreshed = self._refresh()
        except BaseException as e:
            flight.set_exception(e)
            raise
        else:
            flight.set_result(refreshed)
        finally:
            with self._lock:
                self._in_flight = None

        return refreshed

    def _refresh(self) -> bool:
        current = self.state.pair
        pair = self._accept(
            self.on_refreshing(current.access_token, current.refresh_token),
            "Refresh"
        )
        if pair is None:
            log.info("Access token refresh failed")
            return False

        self.state.replace(*pair)
        log.info("Access token refreshed")
        return True
