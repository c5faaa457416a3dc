from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence, Union
from requests.structures import CaseInsensitiveDict
from pathlib import Path
from enum import Enum
import logging
import os

from .auth import Authenticator, CredentialState
from .exceptions import ApiClientError, TransportError
from .routes import Controller, RouteBuilder, compose_url
from .serialization import JsonSerializer
from .transport import Transport, TransportResponse

ErrorPolicy = Callable[[ApiClientError], bool]
Route = Union[RouteBuilder, Sequence[str], None]
DataSource = Union[bytes, bytearray, str, os.PathLike, None]


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class DataDirection(Enum):
    UPLOAD = "UPLOAD"
    DOWNLOAD = "DOWNLOAD"


class Outcome(NamedTuple):
    """Result of a single dispatch: a value, or a classified failure."""

    value: Any = None
    failure: Optional[ApiClientError] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def refresh_on_unauthorized(authenticator: Authenticator) -> ErrorPolicy:
    """
    Error policy that refreshes the access token on HTTP 401.

    Any other failure is declined. Concurrent 401s caused by the same
    expired token end up sharing a single refresh.
    """
    def policy(failure: ApiClientError) -> bool:
        if not failure.is_unauthorized:
            return False
        return authenticator.refresh_access_token(failure.access_token)

    return policy


class BaseAPIClient:
    """
    Authenticated HTTP client for a controller-based REST API.

    Every request is sent to `<base_url>/<controller><route>` with an
    `Authorization: Bearer <token>` header taken from the current
    credential state. Caller headers are applied afterwards and win on
    key collisions.

    When a request fails and `handle_errors` is True, the failure is
    handed to `on_error`. If the policy returns True the request is sent
    again, exactly once, with whatever credentials are current at that
    point; a second failure is raised. If the policy returns False the
    request yields None. With `handle_errors=False`, or when no policy is
    configured, the failure is raised straight away.

    Parameters
    ----------
    base_url : str
        API address, without trailing slash.
    credentials : CredentialState
        Token holder shared by every request of this client.
    transport : Transport
        Performs the actual HTTP round trips.
    serializer : JsonSerializer, optional
        JSON codec for request and response bodies.
    on_error : callable, optional
        Error policy, `on_error(ApiClientError) -> bool`.

    Attributes
    ----------
    logger : logging.Logger
        Client logger (`bearer_client.client`).
    """

    def __init__(
        self,
        base_url: str,
        *,
        credentials: CredentialState,
        transport: Transport,
        serializer: Optional[JsonSerializer] = None,
        on_error: Optional[ErrorPolicy] = None
    ):
        self.base_url = base_url
        self.credentials = credentials
        self.transport = transport
        self.serializer = serializer or JsonSerializer()
        self.on_error = on_error

        self.logger = logging.getLogger("bearer_client.client")
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            fmt = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
            handler.setFormatter(fmt)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

    def url_for(
        self,
        controller: Controller,
        route: Route = None
    ) -> str:
        if isinstance(route, str):
            route = RouteBuilder(route)
        elif route is not None and not isinstance(route, RouteBuilder):
            route = RouteBuilder(*route)
        return compose_url(self.base_url, controller, route)

    # Dispatch

    def _prepare_headers(
        self,
        headers: Optional[Mapping[str, str]],
        defaults: Optional[Mapping[str, str]] = None
    ):
        merged = CaseInsensitiveDict(defaults or {})

        token = None
        if self.credentials.has_access_token():
            token = self.credentials.access_token
            merged["Authorization"] = f"Bearer {token}"

        if headers:
            merged.update(headers)

        return dict(merged), token

    def _attempt(
        self,
        method: str,
        url: str,
        *,
        body: Optional[bytes],
        headers: Optional[Mapping[str, str]],
        defaults: Optional[Mapping[str, str]],
        on_success: Callable[[TransportResponse], Any]
    ) -> Outcome:
        """Send one request and map the transport result to an `Outcome`."""
        request_headers, token = self._prepare_headers(headers, defaults)
        self.logger.debug(f"{method} {url}")

        try:
            response = self.transport.send(method, url, request_headers, body)
        except TransportError as e:
            failure = ApiClientError.from_transport_error(
                e,
                method=method,
                url=url,
                access_token=token
            )
            self.logger.warning(f"Request failed: {failure}")
            return Outcome(failure=failure)

        return Outcome(value=on_success(response))

    def _execute(
        self,
        attempt: Callable[[], Outcome],
        handle_errors: bool
    ) -> Any:
        outcome = attempt()
        if outcome.ok:
            return outcome.value

        failure = outcome.failure
        if not handle_errors or self.on_error is None:
            raise failure

        if not self.on_error(failure):
            self.logger.info(f"Recovery declined for {failure.method} {failure.url}")
            return None

        self.logger.info(f"Retrying {failure.method} {failure.url}")
        retried = attempt()
        if retried.ok:
            return retried.value
        raise retried.failure

    # Public requests

    def request(
        self,
        method: Union[RequestMethod, str],
        controller: Controller,
        route: Route = None,
        *,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        handle_errors: bool = True,
        response_type: Optional[Callable[..., Any]] = None
    ) -> Any:
        """
        Send a JSON request and decode the JSON response.

        Parameters
        ----------
        method : RequestMethod or str
            HTTP method. GET requests carry no body.
        controller : Controller
            Target controller.
        route : RouteBuilder or sequence of str, optional
            Extra path segments after the controller.
        body : any, optional
            JSON-serializable payload for non-GET requests. None sends an
            empty body.
        headers : mapping, optional
            Extra headers; they override the defaults, Authorization
            included.
        handle_errors : bool, default=True
            Route failures through the error policy instead of raising.
        response_type : callable, optional
            See `JsonSerializer.decode`.

        Returns
        -------
        any
            Decoded response, or None when recovery was declined.

        Raises
        ------
        ApiClientError
            If the request failed and was not handled, or failed again
            after a retry.
        DeserializationError
            If the response body cannot be decoded.
        """
        method = RequestMethod(method).value
        url = self.url_for(controller, route)

        payload = None
        defaults = None
        if method != RequestMethod.GET.value:
            defaults = {"Content-Type": "application/json"}
            if body is not None:
                payload = self.serializer.encode(body)

        def decode(response: TransportResponse) -> Any:
            return self.serializer.decode(response.body, response_type)

        return self._execute(
            lambda: self._attempt(
                method,
                url,
                body=payload,
                headers=headers,
                defaults=defaults,
                on_success=decode
            ),
            handle_errors
        )

    def get(self, controller: Controller, route: Route = None, **kwargs: Any) -> Any:
        return self.request(RequestMethod.GET, controller, route, **kwargs)

    def post(self, controller: Controller, route: Route = None, **kwargs: Any) -> Any:
        return self.request(RequestMethod.POST, controller, route, **kwargs)

    def put(self, controller: Controller, route: Route = None, **kwargs: Any) -> Any:
        return self.request(RequestMethod.PUT, controller, route, **kwargs)

    def patch(self, controller: Controller, route: Route = None, **kwargs: Any) -> Any:
        return self.request(RequestMethod.PATCH, controller, route, **kwargs)

    def delete(self, controller: Controller, route: Route = None, **kwargs: Any) -> Any:
        return self.request(RequestMethod.DELETE, controller, route, **kwargs)

    def request_data(
        self,
        direction: DataDirection,
        controller: Controller,
        source: DataSource = None,
        route: Route = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        handle_errors: bool = True,
        method: Optional[str] = None
    ) -> Optional[bytes]:
        """
        Upload or download raw bytes.

        Parameters
        ----------
        direction : DataDirection
            UPLOAD sends `source` as the request body; DOWNLOAD fetches the
            response body.
        controller : Controller
            Target controller.
        source : bytes or path, optional
            In-memory buffer or file path. For UPLOAD it is the data to
            send. For DOWNLOAD a path means "write the body to this file";
            anything else returns the body.
        route : RouteBuilder or sequence of str, optional
            Extra path segments after the controller.
        headers : mapping, optional
            Extra headers, applied last.
        handle_errors : bool, default=True
            Route failures through the error policy instead of raising.
        method : str, optional
            Override the HTTP method (POST for UPLOAD, GET for DOWNLOAD).

        Returns
        -------
        bytes or None
            Response body; None for downloads written to a file or when
            recovery was declined.
        """
        direction = DataDirection(direction)
        url = self.url_for(controller, route)
        is_path = isinstance(source, (str, os.PathLike))

        if direction is DataDirection.UPLOAD:
            if source is None:
                raise ValueError("UPLOAD requires a byte buffer or a file path")
            method = method or RequestMethod.POST.value
            payload = Path(source).read_bytes() if is_path else bytes(source)
            defaults = {"Content-Type": "application/octet-stream"}
            on_success = self._body_of
        else:
            method = method or RequestMethod.GET.value
            payload = None
            defaults = None
            if is_path:
                target = Path(source)

                def on_success(response: TransportResponse) -> None:
                    target.write_bytes(response.body)
                    return None
            else:
                on_success = self._body_of

        return self._execute(
            lambda: self._attempt(
                method,
                url,
                body=payload,
                headers=headers,
                defaults=defaults,
                on_success=on_success
            ),
            handle_errors
        )

    @staticmethod
    def _body_of(response: TransportResponse) -> bytes:
        return response.body
