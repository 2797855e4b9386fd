"""Preset listing endpoint."""

from fastapi import APIRouter, HTTPException

from furnispec.api.common import get_registry
from furnispec.core.presets.registry import PresetTemplate
from furnispec.models.schemas import PresetResponse

router = APIRouter(tags=["presets"])


def _to_response(template: PresetTemplate) -> PresetResponse:
    return PresetResponse(
        id=template.id,
        name=template.name,
        description=template.description,
        dimension_arity=template.dimension_arity,
        dimension_ranges=[[r.minimum, r.maximum] for r in template.dimension_ranges],
        allowed_flags=sorted(template.allowed_flags),
        required_flags=sorted(template.required_flags),
        default_code=template.default_code,
    )


@router.get("/presets", response_model=list[PresetResponse])
async def list_presets():
    return [_to_response(t) for t in get_registry()]


@router.get("/presets/{preset_id}", response_model=PresetResponse)
async def get_preset(preset_id: str):
    template = get_registry().lookup(preset_id)
    if template is None:
        raise HTTPException(404, detail=f"Unknown preset '{preset_id}'")
    return _to_response(template)
