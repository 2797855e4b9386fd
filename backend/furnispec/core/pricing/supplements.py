"""Quantity rules that turn user choices into a SupplementSelection.

The engine only multiplies unit prices by quantities. The rules below derive
those quantities from the furniture dimensions:

- metal base: two feet per started ``foot_interval`` of width
  (1000 mm -> 2 feet, 2500 mm -> 4 feet);
- wood base: a box of the furniture footprint and a fixed base height, priced per m3;
- wardrobe rail: one rail across the width, priced per meter;
- drawers: a plain count.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional

from furnispec.core.pricing.engine import (
    Supplement,
    SupplementCatalog,
    SupplementKind,
    SupplementSelection,
    SupplementUnit,
    UnknownSupplementError,
)
from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.utils.units import mm_to_m, volume_m3

DEFAULT_FOOT_INTERVAL_MM = 2000
DEFAULT_BASE_HEIGHT_MM = 80


def metal_foot_count(width_mm: int, interval_mm: int = DEFAULT_FOOT_INTERVAL_MM) -> int:
    return math.ceil(width_mm / interval_mm) * 2


def wood_base_volume(width_mm: int, depth_mm: int, base_height_mm: int = DEFAULT_BASE_HEIGHT_MM) -> Decimal:
    return volume_m3(width_mm, depth_mm, base_height_mm)


def rail_length(width_mm: int) -> Decimal:
    return mm_to_m(width_mm)


def quantity_for(
    item: Supplement,
    spec: ValidatedSpecification,
    *,
    foot_interval_mm: int = DEFAULT_FOOT_INTERVAL_MM,
    base_height_mm: int = DEFAULT_BASE_HEIGHT_MM,
) -> Decimal:
    """Quantity of ``item`` implied by the furniture dimensions, by pricing unit."""
    if item.unit == SupplementUnit.FOOT:
        return Decimal(metal_foot_count(spec.width, foot_interval_mm))
    if item.unit == SupplementUnit.METER:
        return rail_length(spec.width)
    if item.unit == SupplementUnit.CUBIC_METER:
        if item.kind == SupplementKind.BASE:
            return wood_base_volume(spec.width, spec.depth, base_height_mm)
        return volume_m3(spec.width, spec.depth, spec.height)
    if item.unit == SupplementUnit.UNIT:
        return Decimal(1)
    raise ValueError(f"Supplement '{item.code}' has unsupported unit '{item.unit}'")


def build_selection(
    spec: ValidatedSpecification,
    catalog: SupplementCatalog,
    *,
    material: Optional[str] = None,
    base: Optional[str] = None,
    drawers: Optional[str] = None,
    drawer_count: int = 0,
    wardrobe_rail: Optional[str] = None,
    foot_interval_mm: int = DEFAULT_FOOT_INTERVAL_MM,
    base_height_mm: int = DEFAULT_BASE_HEIGHT_MM,
) -> SupplementSelection:
    """Build the supplement quantities for one piece of furniture.

    Each argument names a supplement code in ``catalog``; a code that is not
    in the catalog raises UnknownSupplementError.
    """
    quantities: dict[str, Decimal] = {}

    for code in (material, base, wardrobe_rail):
        if code is None:
            continue
        item = catalog[code]
        quantities[code] = quantity_for(
            item, spec,
            foot_interval_mm=foot_interval_mm,
            base_height_mm=base_height_mm,
        )

    if drawers is not None and drawer_count > 0:
        if drawers not in catalog:
            raise UnknownSupplementError(drawers)
        quantities[drawers] = Decimal(drawer_count)

    return SupplementSelection(quantities)
