"""
burgerhero.api.__main__

Entrypoint for `python -m burgerhero.api`. Runs uvicorn against an app
factory so `dev` can use auto-reload.
"""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from burgerhero.api.app import create_app
from burgerhero.settings import get_settings


def build_app() -> FastAPI:
    return create_app(settings=get_settings())


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "burgerhero.api.__main__:build_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.env == "dev",
        log_config=None,  # structlog owns formatting
    )


if __name__ == "__main__":
    main()
