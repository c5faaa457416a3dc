from bearer_client.routes import Controller, RouteBuilder, compose_url
import pytest


class Controllers(Controller):
    Users = "Users"
    Orders = "order-api"


BASE = "https://api.example.com"


def test_empty_route_renders_nothing():
    assert RouteBuilder().render() == ""
    assert str(RouteBuilder()) == ""


def test_route_renders_leading_slash_and_joins():
    assert RouteBuilder("1", "posts").render() == "/1/posts"


def test_compose_without_route():
    assert compose_url(BASE, Controllers.Users, RouteBuilder()) == (
        "https://api.example.com/Users"
    )
    assert compose_url(BASE, Controllers.Users) == "https://api.example.com/Users"


def test_compose_with_route():
    assert compose_url(BASE, Controllers.Users, RouteBuilder("1", "posts")) == (
        "https://api.example.com/Users/1/posts"
    )


def test_controller_renders_member_name():
    assert compose_url(BASE, Controllers.Orders) == "https://api.example.com/Orders"


@pytest.mark.parametrize("segments", [(), ("a",), ("a", "b", "c")])
def test_equal_segments_compose_identically(segments):
    built = RouteBuilder().add(*segments)
    direct = RouteBuilder(*segments)
    from_list = RouteBuilder.from_segments(list(segments))

    assert built == direct == from_list
    assert compose_url(BASE, Controllers.Users, built) == compose_url(
        BASE, Controllers.Users, from_list
    )


def test_add_returns_new_builder():
    route = RouteBuilder("users")
    extended = route.add("1")
    assert route.segments == ("users",)
    assert extended.segments == ("users", "1")


def test_segments_are_not_normalized():
    """Slashes are passed through; the composer does not collapse them."""
    assert compose_url(BASE + "/", Controllers.Users, RouteBuilder("a/b")) == (
        "https://api.example.com//Users/a/b"
    )
