from bearer_client.config import ClientSettings
from unittest.mock import patch
import pytest


@patch.dict("os.environ", {
    "API_CLIENT_BASE_URL": "https://api.example.com/",
    "API_CLIENT_TOKEN_FILE": "/tmp/creds.json",
    "API_CLIENT_CREDENTIALS_KEY": "MyApp",
    "API_CLIENT_TIMEOUT": "12.5",
    "API_CLIENT_JSON_INDENT": "",
}, clear=True)
def test_from_env_reads_all_values():
    settings = ClientSettings.from_env()

    assert settings.base_url == "https://api.example.com"
    assert settings.token_file == "/tmp/creds.json"
    assert settings.credentials_key == "MyApp"
    assert settings.timeout == 12.5
    assert settings.json_indent is None


@patch.dict("os.environ", {"SVC_BASE_URL": "https://svc"}, clear=True)
def test_from_env_defaults_and_prefix():
    settings = ClientSettings.from_env(prefix="SVC_")

    assert settings.base_url == "https://svc"
    assert settings.token_file == ".token.json"
    assert settings.credentials_key == "ApiCredentials"
    assert settings.timeout == 30.0
    assert settings.json_indent == 2


@patch.dict("os.environ", {}, clear=True)
def test_from_env_missing_base_url():
    with pytest.raises(ValueError, match="API_CLIENT_BASE_URL"):
        ClientSettings.from_env()


@patch.dict("os.environ", {
    "API_CLIENT_BASE_URL": "https://svc",
    "API_CLIENT_TIMEOUT": "soon",
}, clear=True)
def test_from_env_bad_timeout():
    with pytest.raises(ValueError):
        ClientSettings.from_env()


def test_invalid_settings():
    with pytest.raises(ValueError):
        ClientSettings(base_url="")
    with pytest.raises(ValueError):
        ClientSettings(base_url="https://svc", timeout=0)
