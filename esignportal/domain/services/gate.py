"""
Access gate for portal routes.

Maps the current identity and a route's requirements to a decision. The
gate is a total function: it never raises, every input yields a decision.

Evaluation order for protected routes (first match wins):
    1. session still resolving     -> LOADING
    2. no identity                 -> REDIRECT_LOGIN
    3. role not in allowed roles   -> REDIRECT_UNAUTHORIZED
    4. employee without onboarding -> REDIRECT_ONBOARDING
    5. otherwise                   -> RENDER
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from esignportal.core.auth import Role
from esignportal.domain.models import User

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"
ONBOARDING_PATH = "/first-login"
ROOT_PATH = "/"
HR_HOME_PATH = "/dashboard/hr"
EMPLOYEE_HOME_PATH = "/dashboard/employee"


class GateDecision(str, Enum):
    LOADING = "loading"
    RENDER = "render"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"
    REDIRECT_ONBOARDING = "redirect_onboarding"
    REDIRECT_HOME = "redirect_home"


class RouteAccess(str, Enum):
    PROTECTED = "protected"
    GUEST = "guest"  # anonymous only, authenticated clients go home
    PUBLIC = "public"


@dataclass(frozen=True, slots=True)
class RouteRequirements:
    allowed_roles: frozenset[Role] | None = None
    requires_onboarding: bool = True
    access: RouteAccess = RouteAccess.PROTECTED


def _roles(*roles: Role) -> frozenset[Role]:
    return frozenset(roles)


PUBLIC = RouteRequirements(access=RouteAccess.PUBLIC)
GUEST = RouteRequirements(access=RouteAccess.GUEST)
ANY_AUTHENTICATED = RouteRequirements()
EMPLOYEE_ONLY = RouteRequirements(allowed_roles=_roles(Role.EMPLOYEE))
HR_ONLY = RouteRequirements(allowed_roles=_roles(Role.HR))
ONBOARDING = RouteRequirements(allowed_roles=_roles(Role.EMPLOYEE), requires_onboarding=False)

ROUTES: dict[str, RouteRequirements] = {
    LOGIN_PATH: GUEST,
    "/password-reset": PUBLIC,
    UNAUTHORIZED_PATH: PUBLIC,
    "/health": PUBLIC,
    ONBOARDING_PATH: ONBOARDING,
    EMPLOYEE_HOME_PATH: EMPLOYEE_ONLY,
    "/dashboard/employee/pending": EMPLOYEE_ONLY,
    "/dashboard/employee/documents": EMPLOYEE_ONLY,
    HR_HOME_PATH: HR_ONLY,
    "/dashboard/hr/requests": HR_ONLY,
    "/dashboard/hr/create": HR_ONLY,
    "/dashboard/hr/users": HR_ONLY,
    "/request/{id}": ANY_AUTHENTICATED,
    "/profile": ANY_AUTHENTICATED,
}

_PLACEHOLDER = re.compile(r"\{[^/]+\}")
_PATTERNS: list[tuple[re.Pattern[str], RouteRequirements]] = [
    (re.compile("^" + _PLACEHOLDER.sub("[^/]+", path) + "(/.*)?$"), requirements)
    for path, requirements in sorted(ROUTES.items(), key=lambda item: -len(item[0]))
]


def requirements_for(path: str) -> RouteRequirements | None:
    """Return the requirements of the most specific declared route prefix."""
    for pattern, requirements in _PATTERNS:
        if pattern.match(path):
            return requirements
    return None


def evaluate(
    user: User | None,
    requirements: RouteRequirements,
    *,
    resolving: bool = False,
) -> GateDecision:
    """Decide whether a route renders for ``user`` or where to redirect."""
    if resolving:
        return GateDecision.LOADING

    if requirements.access == RouteAccess.PUBLIC:
        return GateDecision.RENDER

    if requirements.access == RouteAccess.GUEST:
        return GateDecision.REDIRECT_HOME if user is not None else GateDecision.RENDER

    if user is None:
        return GateDecision.REDIRECT_LOGIN

    if requirements.allowed_roles is not None and user.role not in requirements.allowed_roles:
        return GateDecision.REDIRECT_UNAUTHORIZED

    # Incomplete onboarding overrides a role match.
    if requirements.requires_onboarding and user.needs_onboarding:
        return GateDecision.REDIRECT_ONBOARDING

    return GateDecision.RENDER


def home_path(role: Role | str) -> str:
    return HR_HOME_PATH if role == Role.HR else EMPLOYEE_HOME_PATH


def resolve_root(user: User | None) -> str:
    """Target of the root path: the role's dashboard, or login when anonymous."""
    if user is None:
        return LOGIN_PATH
    return home_path(user.role)


def redirect_target(decision: GateDecision, user: User | None) -> str | None:
    """Location for a redirect decision, ``None`` for RENDER and LOADING."""
    if decision == GateDecision.REDIRECT_LOGIN:
        return LOGIN_PATH
    if decision == GateDecision.REDIRECT_UNAUTHORIZED:
        return UNAUTHORIZED_PATH
    if decision == GateDecision.REDIRECT_ONBOARDING:
        return ONBOARDING_PATH
    if decision == GateDecision.REDIRECT_HOME:
        return resolve_root(user)
    return None
