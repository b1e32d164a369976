"""Insertion-ordered route table.

Routes are matched in registration order and the first structural match
wins, so register specific routes before catch-alls::

    table.add(Route("/posts/create", ...))
    table.add(Route("/posts/{id}", ...))     # would also match /posts/create

Literal routes (no placeholders) are additionally indexed by path. That
lookup runs before the ordered regex scan, so static routes never pay
for regex evaluation. Unless the table is case-sensitive the index is
keyed by the lower-cased path, matching the regex matchers.
"""

from collections import defaultdict
from collections.abc import Iterator

from waypost.routing.pattern import normalize_path
from waypost.routing.route import MatchResult, Route


class RouteTable:
    """Append-only collection of routes.

    Mutated only during registration. ``match()`` never writes, so the
    table can be read from any number of threads once it's built.
    """

    __slots__ = ("_case_sensitive", "_routes", "_static")

    def __init__(self, *, case_sensitive: bool = False) -> None:
        self._case_sensitive = case_sensitive
        self._routes: list[Route] = []
        self._static: dict[str, list[Route]] = defaultdict(list)

    def _static_key(self, path: str) -> str:
        return path if self._case_sensitive else path.lower()

    def add(self, route: Route) -> None:
        self._routes.append(route)
        if route.is_static:
            self._static[self._static_key(route.path)].append(route)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, method: str, path: str) -> MatchResult:
        """Find the route for *method* and *path*.

        *path* is normalized first (percent-decoded, trailing slash
        stripped). Returns an empty ``MatchResult`` when nothing matches.
        """
        method = method.upper()
        path = normalize_path(path)

        for route in self._static.get(self._static_key(path), ()):
            if route.allows(method):
                return MatchResult(route=route)

        for route in self._routes:
            if not route.allows(method):
                continue
            params = route.compiled.match(path)
            if params is not None:
                return MatchResult(route=route, parameters=params)

        return MatchResult()
