"""Static wiring checks for a route table and guard chain.

Guards decide at runtime, so redirect loops can only be proven at
navigation time. These checks catch the misconfigurations visible without
running anything:

- a route requires a tag that no guard handles (the tag is silently open)
- a guard's fallback matches no route
- a guard's fallback route requires that same guard's tag (the guard
  denies its own fallback, a guaranteed loop for context-free guards)
- fallback edges that form a cycle if every guard on the way denies
  (often benign when guards are mutually exclusive, so only a warning)
"""

from dataclasses import dataclass, field
from enum import Enum

from waypoint.errors import RouteNotFoundError
from waypoint.guards.chain import GuardChain
from waypoint.routing.table import RouteTable


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class CheckIssue:
    """A single problem found by ``check_wiring``."""

    severity: Severity
    category: str
    message: str
    route: str | None = None


@dataclass(slots=True)
class CheckResult:
    """Result of a wiring check."""

    issues: list[CheckIssue] = field(default_factory=list)
    routes_checked: int = 0
    guards_checked: int = 0

    @property
    def errors(self) -> list[CheckIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[CheckIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [f"Checked {self.routes_checked} routes, {self.guards_checked} guards."]
        for issue in self.issues:
            where = f" [{issue.route}]" if issue.route else ""
            lines.append(f"  {issue.severity.value}: {issue.category}{where}: {issue.message}")
        if self.ok:
            lines.append("OK" if not self.warnings else f"OK with {len(self.warnings)} warning(s)")
        else:
            lines.append(f"FAILED: {len(self.errors)} error(s)")
        return "\n".join(lines)


def check_wiring(table: RouteTable, chain: GuardChain) -> CheckResult:
    """Validate *table* against *chain* without evaluating any guard."""
    result = CheckResult(routes_checked=len(table), guards_checked=len(chain))
    guard_tags = chain.tags
    required_tags = {tag for route in table.routes for tag in route.requires}

    for route in table.routes:
        for tag in sorted(route.requires - guard_tags):
            result.issues.append(
                CheckIssue(
                    Severity.ERROR,
                    "unguarded-tag",
                    f"requires {tag!r} but no guard is registered for it",
                    route=route.name,
                )
            )

    for tag in sorted(guard_tags - required_tags):
        result.issues.append(
            CheckIssue(Severity.WARNING, "unused-guard", f"no route requires {tag!r}")
        )

    # route name -> route names its guards may redirect to
    edges: dict[str, set[str]] = {route.name: set() for route in table.routes}
    for tag, guard in chain.entries:
        fallback = getattr(guard, "fallback", None)
        if not isinstance(fallback, str):
            continue
        try:
            target = table.resolve(fallback).route
        except RouteNotFoundError:
            result.issues.append(
                CheckIssue(
                    Severity.ERROR,
                    "fallback-not-found",
                    f"guard {type(guard).__name__} ({tag!r}) falls back to {fallback!r}, "
                    "which matches no route",
                )
            )
            continue
        if tag in target.requires:
            result.issues.append(
                CheckIssue(
                    Severity.ERROR,
                    "self-guarded-fallback",
                    f"guard {type(guard).__name__} ({tag!r}) falls back to {fallback!r}, "
                    f"which itself requires {tag!r}",
                    route=target.name,
                )
            )
        for route in table.routes:
            if tag in route.requires and route.name != target.name:
                edges[route.name].add(target.name)

    for cycle in _find_cycles(edges):
        result.issues.append(
            CheckIssue(
                Severity.WARNING,
                "fallback-cycle",
                "fallbacks form a cycle if every guard denies: " + " -> ".join(cycle),
            )
        )
    return result


def _find_cycles(edges: dict[str, set[str]]) -> list[tuple[str, ...]]:
    """Return each elementary cycle once, rotated to start at its smallest name."""
    found: set[tuple[str, ...]] = set()

    def visit(node: str, path: list[str]) -> None:
        for nxt in sorted(edges.get(node, ())):
            if nxt in path:
                cycle = path[path.index(nxt) :]
                start = cycle.index(min(cycle))
                found.add((*cycle[start:], *cycle[:start], min(cycle)))
                continue
            visit(nxt, [*path, nxt])

    for node in sorted(edges):
        visit(node, [node])
    return sorted(found)
