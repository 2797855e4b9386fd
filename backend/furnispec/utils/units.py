"""Unit conversion utilities. Dimensions are always integer millimeters."""

from decimal import Decimal

MM_PER_M = 1000
MM3_PER_M3 = 1_000_000_000


def mm_to_m(value_mm: int) -> Decimal:
    """Convert millimeters to meters, exactly."""
    return Decimal(value_mm) / MM_PER_M


def volume_m3(width_mm: int, depth_mm: int, height_mm: int) -> Decimal:
    """Volume of a box given in millimeters, in cubic meters."""
    return Decimal(width_mm * depth_mm * height_mm) / MM3_PER_M3
