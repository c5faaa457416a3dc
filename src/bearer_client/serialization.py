from typing import Any, Callable, Optional
import dataclasses
import json

from .exceptions import DeserializationError


class JsonSerializer:
    """
    JSON encoder/decoder used for request and response payloads.

    Parameters
    ----------
    indent : int, optional
        Indentation passed to `json.dumps`. Defaults to 2.
    """

    def __init__(
        self,
        indent: Optional[int] = 2
    ) -> None:
        self.indent = indent

    def encode(
        self,
        value: Any
    ) -> bytes:
        """Serialize `value` to UTF-8 JSON. Dataclasses become objects."""
        return json.dumps(
            value,
            indent=self.indent,
            default=self._default
        ).encode("utf-8")

    @staticmethod
    def _default(value: Any) -> Any:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return dataclasses.asdict(value)
        raise TypeError(
            f"Object of type {type(value).__name__} is not JSON serializable"
        )

    def decode(
        self,
        data: bytes,
        target_type: Optional[Callable[..., Any]] = None
    ) -> Any:
        """
        Decode a JSON payload and optionally build `target_type` from it.

        Parameters
        ----------
        data : bytes
            Raw response body. An empty body decodes to None.
        target_type : callable, optional
            None returns the plain JSON value. A dataclass is built with
            the decoded object as keyword arguments. Any other callable is
            called with the decoded value.

        Raises
        ------
        DeserializationError
            If the payload is malformed or does not fit `target_type`.
        """
        if not data or not data.strip():
            return None

        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DeserializationError(f"Malformed JSON payload: {e}") from e

        if target_type is None:
            return payload

        try:
            if dataclasses.is_dataclass(target_type):
                if not isinstance(payload, dict):
                    raise TypeError(
                        f"expected a JSON object, got {type(payload).__name__}"
                    )
                return target_type(**payload)
            return target_type(payload)
        except (TypeError, ValueError, KeyError) as e:
            name = getattr(target_type, "__name__", repr(target_type))
            raise DeserializationError(
                f"Cannot build {name} from response: {e}"
            ) from e
