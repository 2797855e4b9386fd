"""Pricing engine: validated specification -> manufacturing price.

    volume_m3         = width * depth * height / 1e9
    base_price        = volume_m3 * tier.price_per_cubic_meter
    supplements_total = sum(unit_price * quantity)
    total_price       = round_half_away_from_zero(base_price + supplements_total)

For sloped presets the 4th slot (maximum height) is not part of the volume;
``height`` is always ``dimensions[2]``.

The engine assumes a tier with a positive price; rejecting a bad tier is the
caller's job. Everything here is a pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.utils.units import volume_m3

ZERO = Decimal(0)


def to_decimal(value) -> Decimal:
    """Exact Decimal for ints, strings and floats as written."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class SupplementKind(str, Enum):
    MATERIAL = "material"
    BASE = "base"
    DRAWER = "drawer"
    WARDROBE_RAIL = "wardrobe_rail"


class SupplementUnit(str, Enum):
    UNIT = "unit"
    FOOT = "foot"
    METER = "m"
    CUBIC_METER = "m3"


class UnknownSupplementError(KeyError):
    """Raised when a selection names a supplement the catalog does not carry."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)

    def __str__(self) -> str:
        return f"Unknown supplement '{self.code}'"


@dataclass(frozen=True)
class PriceTier:
    name: str
    price_per_cubic_meter: Decimal
    description: str = ""


@dataclass(frozen=True)
class Supplement:
    code: str
    kind: SupplementKind
    unit_price: Decimal
    unit: SupplementUnit = SupplementUnit.UNIT

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "unit", SupplementUnit(self.unit))
        if self.unit_price < 0:
            raise ValueError(f"Supplement '{self.code}' has a negative unit price")


class SupplementCatalog:
    """Unit prices for supplements, keyed by supplement code."""

    def __init__(self, supplements: Iterable[Supplement] = ()):
        self._items = MappingProxyType({s.code: s for s in supplements})

    def __getitem__(self, code: str) -> Supplement:
        try:
            return self._items[code]
        except KeyError:
            raise UnknownSupplementError(code) from None

    def __contains__(self, code: object) -> bool:
        return code in self._items

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def of_kind(self, kind: SupplementKind) -> list[Supplement]:
        return [s for s in self._items.values() if s.kind == kind]


@dataclass(frozen=True)
class SupplementSelection:
    """Quantities per supplement code chosen by the caller."""

    quantities: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        clean = {}
        for code, qty in self.quantities.items():
            qty = to_decimal(qty)
            if qty < 0:
                raise ValueError(f"Quantity for '{code}' must be non-negative, got {qty}")
            clean[code] = qty
        object.__setattr__(self, "quantities", MappingProxyType(clean))

    def __bool__(self) -> bool:
        return bool(self.quantities)


@dataclass(frozen=True)
class SupplementLine:
    code: str
    kind: SupplementKind
    unit_price: Decimal
    quantity: Decimal
    amount: Decimal


@dataclass(frozen=True)
class PriceQuote:
    volume_cubic_meters: Decimal
    base_price: Decimal
    supplements_total: Decimal
    total_price: int
    lines: tuple[SupplementLine, ...] = ()


def round_half_away_from_zero(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def price(
    spec: ValidatedSpecification,
    tier: PriceTier,
    supplements: SupplementSelection = SupplementSelection(),
    catalog: SupplementCatalog = SupplementCatalog(),
) -> PriceQuote:
    """Compute the price quote for a validated specification.

    Raises UnknownSupplementError if ``supplements`` names a code missing
    from ``catalog``.
    """
    volume = volume_m3(spec.width, spec.depth, spec.height)
    base_price = volume * to_decimal(tier.price_per_cubic_meter)

    lines = []
    for code, quantity in supplements.quantities.items():
        item = catalog[code]
        lines.append(SupplementLine(
            code=code,
            kind=item.kind,
            unit_price=item.unit_price,
            quantity=quantity,
            amount=item.unit_price * quantity,
        ))
    supplements_total = sum((line.amount for line in lines), ZERO)

    return PriceQuote(
        volume_cubic_meters=volume,
        base_price=base_price,
        supplements_total=supplements_total,
        total_price=round_half_away_from_zero(base_price + supplements_total),
        lines=tuple(lines),
    )
