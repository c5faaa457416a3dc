from bearer_client import (
    ApiClient,
    ApiClientError,
    ClientSettings,
    Controller,
    DataDirection,
)
from dataclasses import dataclass
import requests


class Controllers(Controller):
    Auth = "Auth"
    Users = "Users"
    Files = "Files"


@dataclass
class User:
    id: int
    name: str


BASE_URL = "https://api.example.com"


def login(credentials):
    """Exchange username/password for a token pair."""
    resp = requests.post(f"{BASE_URL}/Auth/login", json=credentials, timeout=30)
    if resp.status_code != 200:
        return False, None, None
    data = resp.json()
    return True, data.get("access_token"), data.get("refresh_token")


def refresh(access_token, refresh_token):
    resp = requests.post(
        f"{BASE_URL}/Auth/refresh",
        json={"refresh_token": refresh_token},
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=30
    )
    if resp.status_code != 200:
        return False, None, None
    data = resp.json()
    return True, data.get("access_token"), data.get("refresh_token", refresh_token)


if __name__ == "__main__":
    client = ApiClient(
        ClientSettings(base_url=BASE_URL),
        on_authorizing=login,
        on_refreshing=refresh,
    )

    # Reuse stored credentials when possible, log in otherwise.
    if not client.has_access_token():
        client.authorize({"username": "demo", "password": "demo"})

    user = client.get(Controllers.Users, ["1"], response_type=User)
    print(user)

    created = client.post(Controllers.Users, body=User(0, "ada"), response_type=User)
    print(created)

    client.request_data(DataDirection.DOWNLOAD, Controllers.Files, "avatar.png", ["1", "avatar"])

    try:
        client.delete(Controllers.Users, ["1"], handle_errors=False)
    except ApiClientError as e:
        print(e.status_code, e.get_response())
