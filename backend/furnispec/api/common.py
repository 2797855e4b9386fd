"""Shared dependencies for the API routers."""

from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException

from furnispec.config import settings
from furnispec.core.configurations.store import ConfigurationStore
from furnispec.core.pipeline import check_code
from furnispec.core.presets.registry import PresetRegistry, default_registry
from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.gateway.coordinator import GenerationCoordinator
from furnispec.gateway.generation import GenerationGateway


@lru_cache
def get_registry() -> PresetRegistry:
    if settings.presets_file:
        return PresetRegistry.from_json(settings.presets_file)
    return default_registry


@lru_cache
def get_coordinator() -> GenerationCoordinator:
    gateway = GenerationGateway(
        settings.generation_url,
        timeout=settings.generation_timeout,
        retries=settings.generation_retries,
        backoff=settings.generation_backoff,
    )
    return GenerationCoordinator(gateway, cache_size=settings.generation_cache_size)


@lru_cache
def get_store() -> ConfigurationStore:
    return ConfigurationStore(settings.configurations_dir)


def require_valid(code: str) -> ValidatedSpecification:
    """Parse and validate ``code`` or raise a 422 listing every problem."""
    syntax_error, result = check_code(code, get_registry())
    if syntax_error is not None:
        raise HTTPException(
            status_code=422,
            detail=[{
                "code": "syntax",
                "message": syntax_error.message,
                "field": "code",
                "position": syntax_error.position,
            }],
        )
    if not result.ok:
        raise HTTPException(
            status_code=422,
            detail=[{"code": e.code, "message": e.message, "field": e.field} for e in result.errors],
        )
    return result.spec
