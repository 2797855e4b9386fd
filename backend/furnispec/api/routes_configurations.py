"""Configuration endpoints — finalize, list and delete saved designs."""

import logging

from fastapi import APIRouter, HTTPException

from furnispec.api.common import get_coordinator, get_store
from furnispec.api.routes_price import quote_request
from furnispec.core.configurations.store import ConfigurationNotFoundError
from furnispec.gateway.generation import GatewayError
from furnispec.models.schemas import ConfigurationRequest, ConfigurationResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["configurations"])


@router.post("/configurations", response_model=ConfigurationResponse, status_code=201)
async def create_configuration(req: ConfigurationRequest):
    """Run the full pipeline and store the result.

    A generation failure does not block saving: the record keeps its price
    and is marked with artifact_status "pending".
    """
    spec, _tier, quote = quote_request(req)

    artifacts = None
    try:
        artifacts = await get_coordinator().generate(spec, closed=req.closed)
    except GatewayError as e:
        logger.warning(f"Saving {spec.code} without artifacts: {e.message}")

    try:
        record = get_store().create(
            req.name,
            spec,
            quote,
            artifacts=artifacts,
            thumbnail_url=req.thumbnail_url,
            config_data=req.config_data,
        )
    except ValueError as exc:
        raise HTTPException(422, detail=str(exc))
    return record


@router.get("/configurations", response_model=list[ConfigurationResponse])
async def list_configurations():
    return get_store().list_all()


@router.get("/configurations/{config_id}", response_model=ConfigurationResponse)
async def get_configuration(config_id: str):
    try:
        return get_store().get(config_id)
    except ConfigurationNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))


@router.delete("/configurations/{config_id}", status_code=204)
async def delete_configuration(config_id: str):
    try:
        get_store().delete(config_id)
    except ConfigurationNotFoundError as exc:
        raise HTTPException(404, detail=str(exc))
