"""
OSC address routing.

Routes are slash-delimited templates whose segments are either literals or
`{name}` parameters. A parameter matches exactly one non-empty segment and
binds its text under `name`.

Registered routes:
    /lights/{id}/{color}  → CommandKind.COLOR
    /reset/{id}           → CommandKind.RESET
"""

from enum import Enum
from typing import Dict, Iterable, NamedTuple, Optional, Tuple

from qlight.errors import RouteError


class CommandKind(Enum):
    COLOR = "color"
    RESET = "reset"


def split_address(address: str) -> Optional[Tuple[str, ...]]:
    """Split an OSC address into segments, or None if it is not absolute."""
    if not address.startswith("/"):
        return None
    return tuple(address[1:].split("/"))


class Route:
    """A path template bound to a command kind.

    Args:
        template: Path template, e.g. "/lights/{id}/{color}"
        kind: CommandKind reported when the template matches

    Raises:
        RouteError: If the template is not absolute, has empty segments,
                    or repeats a parameter name
    """

    def __init__(self, template: str, kind: CommandKind):
        segments = split_address(template)
        if segments is None:
            raise RouteError(f"Route template must start with '/': {template}")

        parsed = []
        names = []
        for segment in segments:
            if not segment:
                raise RouteError(f"Empty segment in route template: {template}")
            if segment.startswith("{") and segment.endswith("}"):
                name = segment[1:-1]
                if not name:
                    raise RouteError(f"Empty parameter name in route template: {template}")
                if name in names:
                    raise RouteError(f"Duplicate parameter '{name}' in route template: {template}")
                names.append(name)
                parsed.append((True, name))
            else:
                parsed.append((False, segment))

        self.template = template
        self.kind = kind
        self.params: Tuple[str, ...] = tuple(names)
        self._segments: Tuple[Tuple[bool, str], ...] = tuple(parsed)

    @property
    def literal_count(self) -> int:
        return sum(1 for is_param, _ in self._segments if not is_param)

    def match(self, segments: Tuple[str, ...]) -> Optional[Dict[str, str]]:
        """Return bound parameters if the segments match this route."""
        if len(segments) != len(self._segments):
            return None

        params = {}
        for (is_param, value), segment in zip(self._segments, segments):
            if is_param:
                if not segment:
                    return None
                params[value] = segment
            elif segment != value:
                return None
        return params

    def __repr__(self):
        return f"Route({self.template!r}, {self.kind})"


class RouteMatch(NamedTuple):
    kind: CommandKind
    params: Dict[str, str]
    route: Route


class Router:
    """Immutable routing table.

    Routes are tried most specific first: more literal segments win, ties keep
    registration order.
    """

    def __init__(self, routes: Iterable[Route]):
        ordered = list(routes)
        ordered.sort(key=lambda route: -route.literal_count)
        self._routes: Tuple[Route, ...] = tuple(ordered)

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def match(self, address: str) -> Optional[RouteMatch]:
        """Match an OSC address against the table.

        Returns:
            RouteMatch with the command kind and bound parameters, or None
            when no route matches

        Examples:
            >>> default_router().match("/lights/123/red").params
            {'id': '123', 'color': 'red'}
            >>> default_router().match("/unknown/path") is None
            True
        """
        segments = split_address(address)
        if segments is None:
            return None

        for route in self._routes:
            params = route.match(segments)
            if params is not None:
                return RouteMatch(route.kind, params, route)
        return None


DEFAULT_ROUTES = (
    ("/lights/{id}/{color}", CommandKind.COLOR),
    ("/reset/{id}", CommandKind.RESET),
)


def default_router() -> Router:
    return Router(Route(template, kind) for template, kind in DEFAULT_ROUTES)
