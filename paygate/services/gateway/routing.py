"""Declarative route table with `:name` path parameters.

Routes are compiled once at startup into an immutable, ordered table. Matching
walks the table in registration order and the first route whose method and
full path match wins.
"""

import re
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import Response


Handler = Callable[[Request, dict[str, str]], Awaitable[Response]]

_PARAM_SEGMENT = re.compile(r":(\w+)")


@dataclass(frozen=True)
class Route:
    """One compiled (method, template, handler) entry."""

    method: str
    template: str
    handler: Handler
    pattern: re.Pattern[str]
    param_names: tuple[str, ...]

    @classmethod
    def compile(cls, method: str, template: str, handler: Handler) -> "Route":
        """Build a route, turning each `:name` into a single-segment capture.

        Example::

            Route.compile("GET", "/customers/:id", handler)
            # pattern ^/customers/([^/]+)$, param_names ("id",)
        """

        pieces = _PARAM_SEGMENT.split(template)
        # split() alternates literal text and captured parameter names.
        literals, names = pieces[0::2], pieces[1::2]
        regex = "".join(
            re.escape(literal) + ("([^/]+)" if i < len(names) else "") for i, literal in enumerate(literals)
        )
        return cls(
            method=method,
            template=template,
            handler=handler,
            pattern=re.compile(regex),
            param_names=tuple(names),
        )

    def match(self, method: str, path: str) -> dict[str, str] | None:
        if method != self.method:
            return None
        found = self.pattern.fullmatch(path)
        if found is None:
            return None
        return dict(zip(self.param_names, found.groups()))


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: dict[str, str]


class RouteTable:
    """Immutable ordered collection of routes."""

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route matching `method` and the whole `path`.

        `path` must be the path component only; no trailing-slash or query
        normalization is applied.
        """

        for route in self._routes:
            params = route.match(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def describe(self) -> list[tuple[str, str]]:
        return [(route.method, route.template) for route in self._routes]

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
