"""
burgerhero.auth.guard

Role-gated navigation.

Responsibilities:
- Describe the client-visible route surface and which roles each group allows.
- Evaluate the guard as a pure function of (is_authed, role, allowed roles).
- Resolve an arbitrary path to "render" or "redirect to X".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from urllib.parse import urlsplit

from burgerhero.auth.models import Role

SIGN_IN_PATH = "/auth"
FALLBACK_PATH = "/"

ROLE_HOME: dict[Role, str] = {
    Role.admin: "/admin",
    Role.staff: "/staff",
    Role.client: "/app",
}


class GuardState(enum.StrEnum):
    unauthenticated = "UNAUTHENTICATED"
    wrong_role = "AUTHENTICATED_WRONG_ROLE"
    authorized = "AUTHENTICATED_AUTHORIZED"


@dataclass(frozen=True, slots=True)
class RouteGroup:
    prefix: str
    # None marks a public group.
    allowed_roles: frozenset[Role] | None = None
    # Public pages are matched exactly; protected groups own their whole subtree.
    exact: bool = False

    def matches(self, path: str) -> bool:
        if self.exact:
            return path == self.prefix
        return path == self.prefix or path.startswith(self.prefix + "/")


ROUTES: tuple[RouteGroup, ...] = (
    RouteGroup("/", exact=True),
    RouteGroup("/auth", exact=True),
    RouteGroup("/plans", exact=True),
    RouteGroup("/checkout", exact=True),
    RouteGroup("/app", allowed_roles=frozenset({Role.client})),
    RouteGroup("/admin", allowed_roles=frozenset({Role.admin})),
    RouteGroup("/staff", allowed_roles=frozenset({Role.staff})),
)


@dataclass(frozen=True, slots=True)
class GuardDecision:
    state: GuardState
    redirect_to: str | None = None

    @property
    def renders(self) -> bool:
        return self.state is GuardState.authorized


@dataclass(frozen=True, slots=True)
class NavigationResult:
    path: str
    action: str  # "render" | "redirect"
    location: str
    guard: GuardState | None = None


def role_home(role: Role | None) -> str:
    return ROLE_HOME.get(role or Role.client, ROLE_HOME[Role.client])


def evaluate_guard(
    *,
    is_authed: bool,
    role: Role | None,
    allowed_roles: frozenset[Role] | None,
) -> GuardDecision:
    if not is_authed:
        return GuardDecision(GuardState.unauthenticated, SIGN_IN_PATH)
    if allowed_roles is not None and (role is None or role not in allowed_roles):
        return GuardDecision(GuardState.wrong_role, role_home(role))
    return GuardDecision(GuardState.authorized)


def normalize_path(raw: str) -> str:
    path = urlsplit(raw or "/").path or "/"
    if not path.startswith("/"):
        path = "/" + path
    while "//" in path:
        path = path.replace("//", "/")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def match_route(path: str) -> RouteGroup | None:
    for group in ROUTES:
        if group.matches(path):
            return group
    return None


def resolve_navigation(raw_path: str, *, is_authed: bool, role: Role | None) -> NavigationResult:
    path = normalize_path(raw_path)
    group = match_route(path)
    if group is None:
        return NavigationResult(path=path, action="redirect", location=FALLBACK_PATH)
    if group.allowed_roles is None:
        return NavigationResult(path=path, action="render", location=path)

    decision = evaluate_guard(is_authed=is_authed, role=role, allowed_roles=group.allowed_roles)
    if decision.renders:
        return NavigationResult(path=path, action="render", location=path, guard=decision.state)
    return NavigationResult(
        path=path,
        action="redirect",
        location=decision.redirect_to or FALLBACK_PATH,
        guard=decision.state,
    )


# --- Module Notes -----------------------------------------------------------
# Nothing here is persisted: the decision is recomputed from the auth store on every
# navigation, so a role change takes effect on the next request.
