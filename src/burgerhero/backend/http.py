"""
burgerhero.backend.http

Shared request plumbing for backend clients.

Responsibilities:
- Build the headers Supabase expects (apikey + bearer).
- Translate httpx transport errors and non-2xx responses into
  `NetworkOrBackendError` at the client boundary.
"""

from __future__ import annotations

from typing import Any

import httpx

from burgerhero.errors import NetworkOrBackendError


def api_headers(*, anon_key: str, access_token: str | None = None) -> dict[str, str]:
    return {
        "apikey": anon_key,
        "Authorization": f"Bearer {access_token or anon_key}",
    }


def error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error", "hint"):
            value = body.get(key)
            if value:
                return str(value)
    return response.reason_phrase


async def send(http: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    try:
        return await http.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise NetworkOrBackendError(f"Backend timed out: {method} {url}") from e
    except httpx.HTTPError as e:
        raise NetworkOrBackendError(f"Backend unreachable: {e}") from e


def raise_for_backend(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise NetworkOrBackendError(error_message(response), status_code=response.status_code)


def first_row(body: Any) -> dict[str, Any] | None:
    # PostgREST returns arrays for table reads and for set-returning functions.
    if isinstance(body, list):
        return body[0] if body else None
    if isinstance(body, dict):
        return body
    return None
