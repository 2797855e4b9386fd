"""Pydantic schemas for API request/response validation."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from furnispec.config import settings
from furnispec.core.pricing.engine import (
    PriceQuote,
    PriceTier,
    Supplement,
    SupplementCatalog,
    SupplementKind,
    SupplementUnit,
)


class CodeRequest(BaseModel):
    code: str

    @field_validator("code")
    @classmethod
    def code_within_limits(cls, v: str) -> str:
        if not v:
            raise ValueError("Code cannot be empty")
        if len(v) > settings.max_code_length:
            raise ValueError(f"Code longer than {settings.max_code_length} characters")
        return v


class TierInput(BaseModel):
    name: str
    description: str = ""
    price_per_cubic_meter: Decimal = Field(gt=0)

    def to_tier(self) -> PriceTier:
        return PriceTier(
            name=self.name,
            description=self.description,
            price_per_cubic_meter=self.price_per_cubic_meter,
        )


class SupplementInput(BaseModel):
    code: str
    kind: SupplementKind
    unit_price: Decimal = Field(ge=0)
    unit: SupplementUnit = SupplementUnit.UNIT


class PriceRequest(CodeRequest):
    tier: Optional[TierInput] = None
    catalog: list[SupplementInput] = []
    material: Optional[str] = None
    base: Optional[str] = None
    drawers: Optional[str] = None
    drawer_count: int = Field(default=0, ge=0)
    wardrobe_rail: Optional[str] = None

    def resolve_tier(self) -> PriceTier:
        if self.tier is not None:
            return self.tier.to_tier()
        return PriceTier(name="default", price_per_cubic_meter=Decimal(str(settings.default_price_per_m3)))

    def resolve_catalog(self) -> SupplementCatalog:
        return SupplementCatalog(
            Supplement(code=s.code, kind=s.kind, unit_price=s.unit_price, unit=s.unit)
            for s in self.catalog
        )


class GenerateRequest(BaseModel):
    prompt: str
    closed: bool = False
    target: Optional[str] = None


class GenerateResponse(BaseModel):
    glb_url: str
    dxf_url: Optional[str] = None


class ConfigurationRequest(PriceRequest):
    name: str
    closed: bool = False
    thumbnail_url: Optional[str] = None
    config_data: dict[str, Any] = {}


class SpecResponse(BaseModel):
    code: str
    preset_id: str
    dimensions: list[int]
    flags: list[str]
    max_height: Optional[int] = None


class SupplementLineResponse(BaseModel):
    code: str
    kind: SupplementKind
    unit_price: Decimal
    quantity: Decimal
    amount: Decimal


class QuoteResponse(BaseModel):
    code: str
    tier: str
    volume_m3: Decimal
    base_price: Decimal
    supplements_total: Decimal
    total_price: int
    lines: list[SupplementLineResponse] = []

    @classmethod
    def from_quote(cls, code: str, tier: PriceTier, quote: PriceQuote) -> "QuoteResponse":
        return cls(
            code=code,
            tier=tier.name,
            volume_m3=quote.volume_cubic_meters,
            base_price=quote.base_price,
            supplements_total=quote.supplements_total,
            total_price=quote.total_price,
            lines=[
                SupplementLineResponse(
                    code=line.code,
                    kind=line.kind,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    amount=line.amount,
                )
                for line in quote.lines
            ],
        )


class PresetResponse(BaseModel):
    id: str
    name: str
    description: str
    dimension_arity: int
    dimension_ranges: list[list[int]]
    allowed_flags: list[str]
    required_flags: list[str]
    default_code: str


class ConfigurationResponse(BaseModel):
    id: str
    name: str
    prompt: str
    config_data: dict[str, Any] = {}
    price: int
    glb_url: Optional[str] = None
    dxf_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    artifact_status: str
    created_at: str
