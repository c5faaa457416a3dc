from typing import Any, Callable, Dict, Optional


class BearerClientError(Exception):
    """Base exception for every error raised by this package."""


class DeserializationError(BearerClientError):
    """
    Raised when a response body cannot be decoded into the expected type.

    Never handed to the error policy and never retried.
    """


class CredentialStoreError(BearerClientError):
    """Raised by a credential store when it cannot write a value."""


class TransportError(BearerClientError):
    """
    Raised by a transport when a round trip does not produce a 2xx answer.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    status_code : int, optional
        HTTP status, or None when no response was received at all.
    headers : dict, optional
        Response headers, when a response was received.
    body : bytes, optional
        Raw response body, when a response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body


class ApiClientError(BearerClientError):
    """
    A transport failure classified for the error policy.

    Created by the dispatcher from a `TransportError`, it exposes the
    status code, the response headers and the raw response body so that
    an `on_error` policy can decide whether to recover and retry.

    The body is obtained through `body_reader` the first time `body` or
    `text` is accessed; the reader is called at most once and its result
    cached. A transport that closes its connection before reporting the
    failure (as `RequestsTransport` does) has already buffered the body,
    so for it the reader only hands over those bytes.

    Attributes
    ----------
    method : str
        HTTP method of the failed request.
    url : str
        Fully composed URL of the failed request.
    status_code : int or None
        HTTP status, None for network level failures.
    headers : dict
        Response headers (empty for network level failures).
    cause : Exception or None
        The original low level error.
    access_token : str or None
        Access token the failed attempt was sent with.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        body_reader: Optional[Callable[[], Optional[bytes]]] = None,
        cause: Optional[BaseException] = None,
        access_token: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.cause = cause
        self.access_token = access_token
        self._body_reader = body_reader
        self._body: Optional[bytes] = None
        self._body_read = False

    @classmethod
    def from_transport_error(
        cls,
        error: TransportError,
        *,
        method: str,
        url: str,
        access_token: Optional[str] = None,
    ) -> "ApiClientError":
        status = error.status_code
        message = (
            f"HTTP {status} from {method} {url}"
            if status is not None
            else f"{method} {url} failed: {error}"
        )
        classified = cls(
            message,
            method=method,
            url=url,
            status_code=status,
            headers=error.headers,
            body_reader=lambda: error.body,
            cause=error.__cause__ or error,
            access_token=access_token,
        )
        classified.__cause__ = error
        return classified

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def body(self) -> Optional[bytes]:
        """Raw response body, or None when no response was received."""
        if not self._body_read:
            reader, self._body_reader = self._body_reader, None
            self._body = reader() if reader is not None else None
            self._body_read = True
        return self._body

    @property
    def text(self) -> str:
        body = self.body
        if not body:
            return ""
        return body.decode("utf-8", errors="replace")

    def get_response(
        self,
        target_type: Optional[Callable[..., Any]] = None,
    ) -> Any:
        """
        Decode the error body as JSON.

        Parameters
        ----------
        target_type : callable, optional
            Same meaning as `response_type` on `BaseAPIClient.request`.

        Raises
        ------
        DeserializationError
            If the body is not valid JSON or does not fit `target_type`.
        """
        from .serialization import JsonSerializer

        return JsonSerializer().decode(self.body or b"", target_type)


class MissingCapabilityError(BearerClientError):
    """Raised when a login or refresh flow runs without its capability."""
