"""Deep link parsing.

An incoming URL or string is parsed into a location plus parameters using
the same matching rules as ``RouteTable.resolve``. Anything that cannot be
parsed or matched raises ``RouteNotFoundError``, exactly like an unknown
in-app location.

Accepted forms::

    /employee/42
    /employee/42?tab=leave
    hrconnect://app/employee/42        (host is ignored)
    https://example.com/employee/42
"""

from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlsplit

from waypoint.errors import RouteNotFoundError
from waypoint.routing.route import RouteMatch
from waypoint.routing.table import RouteTable


@dataclass(frozen=True, slots=True)
class DeepLink:
    """A parsed deep link."""

    location: str
    match: RouteMatch
    query: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.match.route.name

    @property
    def parameters(self) -> dict[str, str]:
        return self.match.params


def parse_deep_link(table: RouteTable, url: str) -> DeepLink:
    """Parse *url* into a ``DeepLink`` matched against *table*.

    Raises ``RouteNotFoundError`` for empty or malformed input and for
    paths that match no registered pattern.
    """
    raw = url.strip()
    if not raw:
        raise RouteNotFoundError(url, "Empty deep link")

    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise RouteNotFoundError(url, f"Unparseable deep link {url!r}: {exc}") from None

    path = parts.path
    # The host of a custom-scheme link is ignored like any other host, so
    # "app://employee/42" resolves "/42". Only a link with no path at all,
    # such as "app://home", has its host read as the location.
    if parts.scheme and parts.scheme not in ("http", "https") and parts.netloc and not path:
        path = "/" + parts.netloc

    match = table.resolve(path or "/")
    return DeepLink(
        location=match.location,
        match=match,
        query=dict(parse_qsl(parts.query, keep_blank_values=True)),
    )
