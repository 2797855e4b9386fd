"""Meuble Spec Service — FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from furnispec import __version__
from furnispec.config import settings
from furnispec.api.routes_presets import router as presets_router
from furnispec.api.routes_parse import router as parse_router
from furnispec.api.routes_price import router as price_router
from furnispec.api.routes_generate import router as generate_router
from furnispec.api.routes_configurations import router as configurations_router


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Parse, validate and price custom furniture codes such as M1(1000,400,1000)Eb.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(presets_router, prefix="/api")
app.include_router(parse_router, prefix="/api")
app.include_router(price_router, prefix="/api")
app.include_router(generate_router, prefix="/api")
app.include_router(configurations_router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__}
