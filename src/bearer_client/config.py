from dataclasses import dataclass
from typing import Optional
import os


@dataclass(frozen=True)
class ClientSettings:
    """
    Connection and persistence settings for an `ApiClient`.

    Attributes
    ----------
    base_url : str
        API address. A trailing slash is stripped.
    token_file : str
        JSON file the credentials are persisted in.
    credentials_key : str
        Namespace key the two tokens are stored under.
    timeout : float
        Per-request timeout in seconds.
    json_indent : int or None
        Indentation of JSON request bodies.
    """

    base_url: str
    token_file: str = ".token.json"
    credentials_key: str = "ApiCredentials"
    timeout: float = 30.0
    json_indent: Optional[int] = 2

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(
        cls,
        prefix: str = "API_CLIENT_"
    ) -> "ClientSettings":
        """
        Build settings from environment variables.

        Reads `<prefix>BASE_URL` (required), `<prefix>TOKEN_FILE`,
        `<prefix>CREDENTIALS_KEY`, `<prefix>TIMEOUT` and
        `<prefix>JSON_INDENT`.

        Raises
        ------
        ValueError
            If the base URL is missing or a numeric value is malformed.
        """
        base_url_var = f"{prefix}BASE_URL"
        base_url = os.getenv(base_url_var)
        if not base_url:
            raise ValueError(f"Missing environment variable: {base_url_var}")

        timeout = os.getenv(f"{prefix}TIMEOUT", "30")
        indent = os.getenv(f"{prefix}JSON_INDENT", "2")

        try:
            timeout_value = float(timeout)
            indent_value = int(indent) if indent.strip() else None
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e

        return cls(
            base_url=base_url,
            token_file=os.getenv(f"{prefix}TOKEN_FILE", ".token.json"),
            credentials_key=os.getenv(f"{prefix}CREDENTIALS_KEY", "ApiCredentials"),
            timeout=timeout_value,
            json_indent=indent_value,
        )
