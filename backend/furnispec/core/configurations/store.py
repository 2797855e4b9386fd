"""Local store for finalized furniture configurations.

Layout:
    <root>/
        <id>.json   — one configuration record per file

A record is never edited in place. Changing a design means running the
parse -> validate -> price pipeline again and creating a new record.

Usage:
    store = ConfigurationStore("/var/lib/meuble/configurations")
    record = store.create("Salon", spec, quote, artifacts)
    store.delete(record["id"])
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from furnispec.core.pricing.engine import PriceQuote
from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.gateway.generation import GenerationResult

logger = logging.getLogger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

_SCHEMA_VERSION = 1
_REQUIRED_KEYS = {"id", "name", "prompt", "price", "created_at"}

ARTIFACTS_READY = "ready"
ARTIFACTS_PENDING = "pending"


# ── Exceptions ────────────────────────────────────────────────────────────────

class ConfigurationNotFoundError(LookupError):
    """Raised when no configuration exists for the given id."""

    def __init__(self, config_id: str) -> None:
        self.config_id = config_id
        super().__init__(f"Configuration not found: {config_id}")


class InvalidConfigurationError(ValueError):
    """Raised when a stored record is corrupt or missing required keys."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid configuration at '{path}': {reason}")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _utc_now() -> str:
    """Return current UTC time as an ISO-8601 string (e.g. 2026-02-26T10:30:00Z)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_record(
    name: str,
    spec: ValidatedSpecification,
    quote: PriceQuote,
    artifacts: Optional[GenerationResult] = None,
    thumbnail_url: Optional[str] = None,
    config_data: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Assemble a configuration record from the pipeline outputs."""
    name = name.strip()
    if not name:
        raise ValueError("Configuration name must be non-empty.")
    return {
        "schema_version": _SCHEMA_VERSION,
        "id": uuid.uuid4().hex,
        "name": name,
        "prompt": spec.code,
        "config_data": config_data or {},
        "price": quote.total_price,
        "glb_url": artifacts.glb_url if artifacts else None,
        "dxf_url": artifacts.dxf_url if artifacts else None,
        "thumbnail_url": thumbnail_url,
        "artifact_status": ARTIFACTS_READY if artifacts else ARTIFACTS_PENDING,
        "created_at": _utc_now(),
    }


# ── ConfigurationStore ────────────────────────────────────────────────────────

class ConfigurationStore:
    """JSON-file store of configuration records under a single directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def create(
        self,
        name: str,
        spec: ValidatedSpecification,
        quote: PriceQuote,
        artifacts: Optional[GenerationResult] = None,
        thumbnail_url: Optional[str] = None,
        config_data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Persist a new configuration and return its record.

        Raises:
            ValueError: If ``name`` is empty.
        """
        record = build_record(name, spec, quote, artifacts, thumbnail_url, config_data)
        self.root.mkdir(parents=True, exist_ok=True)
        self._write_json(self._path(record["id"]), record)
        logger.info("Created configuration %s (%s, %s EUR)", record["id"], record["prompt"], record["price"])
        return record

    def get(self, config_id: str) -> dict[str, Any]:
        """Return the record for ``config_id``.

        Raises:
            ConfigurationNotFoundError: If no such record exists.
            InvalidConfigurationError: If the stored file is corrupt.
        """
        path = self._path(config_id)
        if not path.is_file():
            raise ConfigurationNotFoundError(config_id)
        return self._read_json(path)

    def list_all(self) -> list[dict[str, Any]]:
        """All records, newest first. Corrupt files are skipped with a warning."""
        if not self.root.is_dir():
            return []
        records = []
        for path in sorted(self.root.glob("*.json")):
            try:
                records.append(self._read_json(path))
            except InvalidConfigurationError as exc:
                logger.warning("Skipping %s", exc)
        records.sort(key=lambda r: r["created_at"], reverse=True)
        return records

    def delete(self, config_id: str) -> None:
        """Remove a configuration.

        Raises:
            ConfigurationNotFoundError: If no such record exists.
        """
        path = self._path(config_id)
        if not path.is_file():
            raise ConfigurationNotFoundError(config_id)
        path.unlink()
        logger.info("Deleted configuration %s", config_id)

    # ── Internal helpers ─────────────────────────────────────────────────────

    def _path(self, config_id: str) -> Path:
        # ids are uuid4 hex; anything else cannot name a stored file
        if not config_id.isalnum():
            raise ConfigurationNotFoundError(config_id)
        return self.root / f"{config_id}.json"

    @staticmethod
    def _write_json(path: Path, data: dict) -> None:
        path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    @staticmethod
    def _read_json(path: Path) -> dict:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise InvalidConfigurationError(str(path), f"not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidConfigurationError(str(path), "record must be a JSON object")
        missing = _REQUIRED_KEYS - data.keys()
        if missing:
            raise InvalidConfigurationError(str(path), f"missing required keys: {sorted(missing)}")
        return data
