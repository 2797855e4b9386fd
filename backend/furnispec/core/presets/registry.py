"""Preset registry: the static table of furniture families and their schema."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

BASE_BOARD_FLAG = "b"

# Flag vocabulary shared by the built-in presets.
FLAG_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "b": "base board (planche de base)",
    "E": "casing (enveloppe)",
    "F": "back panel (fond)",
    "H": "top panel",
    "P": "doors",
    "S": "socle / plinth",
})


class RegistryError(RuntimeError):
    """Raised when a preset table contradicts its own schema."""


@dataclass(frozen=True)
class DimensionRange:
    minimum: int
    maximum: int

    def __contains__(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(frozen=True)
class PresetTemplate:
    id: str
    dimension_ranges: tuple[DimensionRange, ...]
    allowed_flags: frozenset[str]
    required_flags: frozenset[str] = frozenset({BASE_BOARD_FLAG})
    name: str = ""
    description: str = ""
    default_code: str = ""

    @property
    def dimension_arity(self) -> int:
        return len(self.dimension_ranges)

    @property
    def has_max_height(self) -> bool:
        """True for sloped presets whose 4th slot is a maximum height."""
        return self.dimension_arity == 4

    def check(self) -> None:
        """Raise RegistryError if the template is internally inconsistent."""
        if self.dimension_arity not in (3, 4):
            raise RegistryError(
                f"Preset '{self.id}' declares {self.dimension_arity} dimensions; expected 3 or 4"
            )
        for slot, rng in enumerate(self.dimension_ranges):
            if rng.minimum < 0 or rng.minimum > rng.maximum:
                raise RegistryError(
                    f"Preset '{self.id}' slot {slot} has invalid range {rng.minimum}-{rng.maximum}"
                )
        stray = self.required_flags - self.allowed_flags
        if stray:
            raise RegistryError(
                f"Preset '{self.id}' requires flags it does not allow: {''.join(sorted(stray))}"
            )
        for flag in self.allowed_flags:
            if len(flag) != 1 or not (flag.isascii() and flag.isalpha()):
                raise RegistryError(f"Preset '{self.id}' has invalid flag token '{flag}'")


class PresetRegistry:
    """Read-only lookup table of preset templates, keyed by preset id."""

    def __init__(self, templates: Iterable[PresetTemplate]):
        table: dict[str, PresetTemplate] = {}
        for template in templates:
            if template.id in table:
                raise RegistryError(f"Duplicate preset id '{template.id}'")
            template.check()
            table[template.id] = template
        if not table:
            raise RegistryError("Preset registry is empty")
        self._templates = MappingProxyType(table)

    def lookup(self, preset_id: str) -> Optional[PresetTemplate]:
        return self._templates.get(preset_id)

    def ids(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, preset_id: object) -> bool:
        return preset_id in self._templates

    def __iter__(self) -> Iterator[PresetTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    @classmethod
    def from_json(cls, path: str | Path) -> "PresetRegistry":
        """Load a registry from a JSON list of preset records.

        Each record looks like::

            {"id": "M1", "ranges": [[300, 3000], [200, 800], [300, 2500]],
             "allowed_flags": "bEFHPS", "required_flags": "b"}
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RegistryError(f"Cannot read preset file '{path}': {exc}") from exc
        if not isinstance(raw, list):
            raise RegistryError(f"Preset file '{path}' must contain a JSON list")

        templates = []
        for item in raw:
            try:
                record = _PresetRecord.model_validate(item)
            except PydanticValidationError as exc:
                raise RegistryError(f"Invalid preset record in '{path}': {exc}") from exc
            templates.append(record.to_template())
        logger.info("Loaded %d presets from %s", len(templates), path)
        return cls(templates)


class _PresetRecord(BaseModel):
    id: str
    ranges: list[tuple[int, int]]
    allowed_flags: str
    required_flags: str = BASE_BOARD_FLAG
    name: str = ""
    description: str = ""
    default_code: str = ""

    def to_template(self) -> PresetTemplate:
        return PresetTemplate(
            id=self.id,
            dimension_ranges=tuple(DimensionRange(lo, hi) for lo, hi in self.ranges),
            allowed_flags=frozenset(self.allowed_flags),
            required_flags=frozenset(self.required_flags),
            name=self.name,
            description=self.description,
            default_code=self.default_code,
        )


# ── Built-in presets ─────────────────────────────────────────────────────

_WIDTH = DimensionRange(300, 3000)
_DEPTH = DimensionRange(200, 800)
_ALL_FLAGS = frozenset(FLAG_DESCRIPTIONS)

BUILTIN_PRESETS: tuple[PresetTemplate, ...] = (
    PresetTemplate(
        id="M1",
        dimension_ranges=(_WIDTH, _DEPTH, DimensionRange(300, 2500)),
        allowed_flags=_ALL_FLAGS,
        name="M1 - Meuble TV",
        description="Classic TV cabinet, horizontal format",
        default_code="M1(1000,400,1000)Eb",
    ),
    PresetTemplate(
        id="M2",
        dimension_ranges=(_WIDTH, _DEPTH, DimensionRange(100, 2500), DimensionRange(100, 2500)),
        allowed_flags=_ALL_FLAGS,
        name="M2 - Sous mansarde",
        description="Under-roof cabinet with a sloped top",
        default_code="M2(2000,450,700,1200)Eb",
    ),
    PresetTemplate(
        id="M3",
        dimension_ranges=(_WIDTH, _DEPTH, DimensionRange(100, 2500), DimensionRange(100, 2500)),
        allowed_flags=_ALL_FLAGS,
        name="M3 - Sous escalier",
        description="Under-stairs cabinet with progressive height",
        default_code="M3(1500,400,800,1500)Eb",
    ),
    PresetTemplate(
        id="M4",
        dimension_ranges=(_WIDTH, _DEPTH, DimensionRange(100, 2500), DimensionRange(100, 2500)),
        allowed_flags=_ALL_FLAGS,
        name="M4 - Design complexe",
        description="Modern design with varying heights",
        default_code="M4(1200,400,900,1200)Eb",
    ),
)

default_registry = PresetRegistry(BUILTIN_PRESETS)
