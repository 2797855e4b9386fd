"""Price endpoint — quote a furniture code against a tier and supplements."""

from fastapi import APIRouter, HTTPException

from furnispec.api.common import require_valid
from furnispec.core.pricing.engine import UnknownSupplementError, price
from furnispec.core.pricing.supplements import build_selection
from furnispec.models.schemas import PriceRequest, QuoteResponse

router = APIRouter(tags=["price"])


def quote_request(req: PriceRequest):
    """Validate the code and price it. Shared with the configurations router."""
    spec = require_valid(req.code)
    tier = req.resolve_tier()
    catalog = req.resolve_catalog()
    try:
        selection = build_selection(
            spec,
            catalog,
            material=req.material,
            base=req.base,
            drawers=req.drawers,
            drawer_count=req.drawer_count,
            wardrobe_rail=req.wardrobe_rail,
        )
        quote = price(spec, tier, selection, catalog)
    except UnknownSupplementError as e:
        raise HTTPException(422, detail=[{"code": "unknown_supplement", "message": str(e), "field": e.code}])
    return spec, tier, quote


@router.post("/price", response_model=QuoteResponse)
async def price_code(req: PriceRequest):
    spec, tier, quote = quote_request(req)
    return QuoteResponse.from_quote(spec.code, tier, quote)
