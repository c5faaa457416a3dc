from enum import Enum
from typing import Iterable, Tuple


class Controller(Enum):
    """
    Base class for an application's closed set of API controllers.

    Each member renders to its own name as a path segment::

        class Controllers(Controller):
            Users = "Users"
            Orders = "Orders"
    """

    @property
    def segment(self) -> str:
        return self.name


class RouteBuilder:
    """
    Ordered sequence of path segments appended after the controller.

    Segments are passed through untouched; escaping or validating them is
    left to the caller.
    """

    def __init__(self, *segments: str) -> None:
        self._segments: Tuple[str, ...] = tuple(str(s) for s in segments)

    @classmethod
    def from_segments(cls, segments: Iterable[str]) -> "RouteBuilder":
        return cls(*segments)

    @property
    def segments(self) -> Tuple[str, ...]:
        return self._segments

    def add(self, *segments: str) -> "RouteBuilder":
        """Return a new builder with `segments` appended."""
        return RouteBuilder(*self._segments, *segments)

    def render(self) -> str:
        if not self._segments:
            return ""
        return "/" + "/".join(self._segments)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"RouteBuilder{self._segments!r}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RouteBuilder):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)


def compose_url(
    base_address: str,
    controller: Controller,
    route: RouteBuilder | None = None
) -> str:
    """
    Build `<base_address>/<controller><route>`.

    Double slashes are not collapsed: `base_address` is expected to come
    without a trailing slash.
    """
    suffix = route.render() if route is not None else ""
    return f"{base_address}/{controller.segment}{suffix}"
