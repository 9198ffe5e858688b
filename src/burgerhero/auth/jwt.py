"""
burgerhero.auth.jwt

Session access-token helpers.

Responsibilities:
- Decode identity-provider access tokens (HS256) and expose their claims.
- Verify the signature when the project JWT secret is configured; otherwise
  read the claims unverified, since the provider re-checks the token on
  every backend call anyway.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt
from jwt import InvalidTokenError


@dataclass(frozen=True, slots=True)
class JwtConfig:
    audience: str
    secret: str | None = None
    alg: str = "HS256"


class JwtValidationError(Exception):
    pass


def decode_claims(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        if cfg.secret:
            return jwt.decode(
                token,
                cfg.secret,
                algorithms=[cfg.alg],
                audience=cfg.audience,
                options={"require": ["exp", "sub"]},
            )
        # Expiry is checked by the caller against its refresh margin, not here.
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False, "verify_aud": False},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def token_expiry(*, cfg: JwtConfig, token: str) -> int:
    claims = decode_claims(cfg=cfg, token=token)
    exp = claims.get("exp")
    if exp is None:
        raise JwtValidationError("token has no exp claim")
    return int(exp)


# --- Module Notes -----------------------------------------------------------
# Used by `backend.identity` when a token response omits `expires_at`, and always
# when a secret is configured.
