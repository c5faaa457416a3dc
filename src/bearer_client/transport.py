from typing import Dict, NamedTuple, Optional, Protocol
import logging
import requests

from .exceptions import TransportError

log = logging.getLogger(__name__)


class TransportResponse(NamedTuple):
    status_code: int
    headers: Dict[str, str]
    body: bytes


class Transport(Protocol):
    """
    One HTTP round trip.

    Implementations return a `TransportResponse` for 2xx answers and raise
    `TransportError` for everything else. They must not retry internally.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[bytes] = None
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """
    `Transport` backed by `requests`.

    Every call opens its own `requests.Session` and closes it before
    returning, whatever the outcome.

    Parameters
    ----------
    timeout : float, optional
        Per-request timeout in seconds. Defaults to 30.
    """

    def __init__(
        self,
        timeout: float = 30.0
    ) -> None:
        self.timeout = timeout

    def _open(self) -> requests.Session:
        return requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[bytes] = None
    ) -> TransportResponse:
        with self._open() as session:
            try:
                resp = session.request(
                    method,
                    url,
                    headers=headers,
                    data=body,
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                log.error(f"Connection error on {method} {url}: {e}")
                raise TransportError(str(e)) from e

            content = resp.content
            response_headers = dict(resp.headers)

            try:
                resp.raise_for_status()
            except requests.exceptions.HTTPError as e:
                raise TransportError(
                    str(e),
                    status_code=resp.status_code,
                    headers=response_headers,
                    body=content
                ) from e

            return TransportResponse(resp.status_code, response_headers, content)
