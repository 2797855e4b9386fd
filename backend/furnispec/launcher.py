"""Meuble Spec launcher — runs the API server with uvicorn."""

from __future__ import annotations

import uvicorn

from furnispec.config import settings


def main() -> None:
    print(f"Starting {settings.app_name} on http://{settings.host}:{settings.port}")
    print("Press Ctrl+C to stop.\n")

    uvicorn.run(
        "furnispec.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
