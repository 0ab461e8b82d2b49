from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .errors import MalformedBody

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping body kind -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    "standard": "standard.json",
    "extended_login": "extended_login.json",
    "s2c_result": "s2c_result.json",
}


def _schema_path(kind: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(kind)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=16)
def load_schema(kind: str) -> Optional[dict]:
    """Load JSON schema for a body kind if present."""
    path = _schema_path(kind)
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_body(body: Any, kind: str, schema: Optional[dict] = None) -> None:
    """Check a decoded JSON body against the schema registered for `kind`."""
    if not schema:
        schema = load_schema(kind)
    if schema:
        try:
            jsonschema.validate(instance=body, schema=schema)
        except jsonschema.ValidationError as exc:
            raise MalformedBody(f"Schema validation failed for {kind}: {exc.message}") from exc


__all__ = ["SCHEMA_REGISTRY", "load_schema", "validate_body"]
