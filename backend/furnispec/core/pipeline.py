"""Parse -> validate -> price, in one synchronous call."""

from __future__ import annotations

from dataclasses import dataclass, field

from furnispec.core.presets.registry import PresetRegistry, default_registry
from furnispec.core.pricing.engine import (
    PriceQuote,
    PriceTier,
    SupplementCatalog,
    SupplementSelection,
    price,
)
from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.core.spec.parser import SpecSyntaxError, parse
from furnispec.core.spec.validator import SpecValidationError, ValidationResult, validate


@dataclass
class QuoteOutcome:
    spec: ValidatedSpecification | None = None
    quote: PriceQuote | None = None
    syntax_error: SpecSyntaxError | None = None
    validation_errors: list[SpecValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.quote is not None


def check_code(code: str, registry: PresetRegistry = default_registry) -> tuple[SpecSyntaxError | None, ValidationResult | None]:
    """Parse and validate. Returns (syntax_error, None) or (None, validation_result)."""
    parsed = parse(code)
    if not parsed.ok:
        return parsed.error, None
    return None, validate(parsed.spec, registry)


def quote_code(
    code: str,
    tier: PriceTier,
    catalog: SupplementCatalog = SupplementCatalog(),
    selection: SupplementSelection = SupplementSelection(),
    registry: PresetRegistry = default_registry,
) -> QuoteOutcome:
    syntax_error, result = check_code(code, registry)
    if syntax_error is not None:
        return QuoteOutcome(syntax_error=syntax_error)
    if not result.ok:
        return QuoteOutcome(validation_errors=result.errors)
    return QuoteOutcome(spec=result.spec, quote=price(result.spec, tier, selection, catalog))
