"""Parse endpoint — checks a furniture code without pricing it."""

from fastapi import APIRouter

from furnispec.api.common import require_valid
from furnispec.models.schemas import CodeRequest, SpecResponse

router = APIRouter(tags=["parse"])


@router.post("/parse", response_model=SpecResponse)
async def parse_code(req: CodeRequest):
    """Parse and validate a code. Returns the canonical form or every error."""
    spec = require_valid(req.code)
    return SpecResponse(
        code=spec.code,
        preset_id=spec.preset_id,
        dimensions=list(spec.dimensions),
        flags=list(spec.flags),
        max_height=spec.max_height,
    )
