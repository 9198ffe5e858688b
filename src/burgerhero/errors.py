"""
burgerhero.errors

Error taxonomy shared by backend clients, services and the API layer.

Responsibilities:
- Distinguish user-correctable auth failures from fatal session failures.
- Carry a user-visible message; HTTP mapping lives in `api.errors`.
"""

from __future__ import annotations


class BurgerHeroError(Exception):
    """
    Base class for expected failures. Anything else reaching the API layer
    is treated as a programming error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthFailure(BurgerHeroError):
    """Bad credentials or rejected sign-up input; shown inline."""


class ProfileUnrecoverable(BurgerHeroError):
    """
    A session exists but no profile row could be loaded or repaired.
    Fatal for the session: the caller must force sign-out.
    """


class NetworkOrBackendError(BurgerHeroError):
    """
    Transport failure or non-2xx backend response. The operation is abandoned
    and local state is left as it was before the call.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# --- Module Notes -----------------------------------------------------------
# Clients translate httpx errors into these types at the boundary so services never
# need to import httpx exception classes.
