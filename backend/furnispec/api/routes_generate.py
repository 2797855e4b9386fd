"""Generate endpoint — forward a validated code to the rendering service."""

import logging

from fastapi import APIRouter, HTTPException

from furnispec.api.common import get_coordinator, require_valid
from furnispec.gateway.generation import GatewayError
from furnispec.models.schemas import GenerateRequest, GenerateResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


@router.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest):
    """Return GLB/DXF URLs for a code. 409 if a newer request replaced this one."""
    spec = require_valid(req.prompt)
    try:
        result = await get_coordinator().generate(spec, closed=req.closed, target=req.target)
    except GatewayError as e:
        logger.warning(f"Generation failed for {spec.code}: {e.message}")
        raise HTTPException(502, detail=e.message)
    if result is None:
        raise HTTPException(409, detail="Superseded by a newer request for the same target")
    return GenerateResponse(glb_url=result.glb_url, dxf_url=result.dxf_url)
