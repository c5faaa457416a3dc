from typing import Dict, Optional, Protocol
from threading import Lock
import logging
import json
import os

from .exceptions import CredentialStoreError

log = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Key/value store the credential state persists its tokens into."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: Optional[str]) -> None:
        ...


class MemoryCredentialStore:
    """Process-local store, mostly useful for tests and short scripts."""

    def __init__(
        self,
        initial: Optional[Dict[str, Optional[str]]] = None
    ) -> None:
        self.data: Dict[str, Optional[str]] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: Optional[str]) -> None:
        self.data[key] = value


class JsonFileCredentialStore:
    """
    Persists credentials in a local JSON file.

    All values live under a single namespace object so that the file can
    be shared with other data::

        {"ApiCredentials": {"access_token": "...", "refresh_token": "..."}}

    Reads are tolerant: a missing, unreadable or malformed file behaves
    like an empty store. Writes are not: any I/O failure is raised as
    `CredentialStoreError`.

    Parameters
    ----------
    token_file : str, optional
        Path of the JSON file. Defaults to ".token.json".
    namespace : str, optional
        Top-level key holding the credentials. Defaults to
        "ApiCredentials".
    """

    def __init__(
        self,
        token_file: str = ".token.json",
        namespace: str = "ApiCredentials"
    ) -> None:
        self.token_file = token_file
        self.namespace = namespace
        self._lock = Lock()

    def _load(self) -> Dict:
        """
        Load the whole file.

        Returns
        -------
        dict
            File contents, or an empty dictionary if the file is missing
            or is not a JSON object.
        """
        if not os.path.exists(self.token_file):
            return {}

        with open(self.token_file, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError:
                log.warning(f"Ignoring malformed credential file {self.token_file}")
                return {}

        if not isinstance(data, dict):
            return {}

        return data

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            section = self._load().get(self.namespace)
        if not isinstance(section, dict):
            return None
        value = section.get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            try:
                data = self._load()
            except (OSError, ValueError):
                data = {}

            section = data.get(self.namespace)
            if not isinstance(section, dict):
                section = {}
            section[key] = value
            data[self.namespace] = section

            # Write to a sibling file first so a crash never truncates the store.
            tmp_file = f"{self.token_file}.tmp"
            try:
                with open(tmp_file, "w") as f:
                    json.dump(data, f)
                os.replace(tmp_file, self.token_file)
            except OSError as e:
                raise CredentialStoreError(
                    f"Cannot write credentials to {self.token_file}: {e}"
                ) from e
