"""
burgerhero.services.navigation

Where to send a user right after authenticating.
"""

from __future__ import annotations

from burgerhero.auth.guard import role_home
from burgerhero.auth.models import Role
from burgerhero.stores.pending_plan import PendingPlan

CHECKOUT_PATH = "/checkout"


def sanitize_next_path(raw: str | None) -> str | None:
    # Only same-origin paths; "//host" would be protocol-relative.
    if not raw:
        return None
    value = raw.strip()
    if not value.startswith("/") or value.startswith("//"):
        return None
    return value


def post_auth_redirect(
    role: Role,
    *,
    pending_plan: PendingPlan | None = None,
    next_path: str | None = None,
) -> str:
    if role is not Role.client:
        # Staff and admins ignore checkout intents.
        return role_home(role)
    if pending_plan is not None:
        return CHECKOUT_PATH
    return sanitize_next_path(next_path) or role_home(role)
