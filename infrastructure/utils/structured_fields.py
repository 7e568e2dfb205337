from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def dump_json_field(value: Any) -> str:
    """
    Serialize a structured field to a JSON string for storage.

    Raises:
        TypeError: value contains something JSON cannot represent
        ValueError: value contains NaN or infinity
    """
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def parse_json_field(raw: Any) -> Any:
    """
    Parse a stored JSON string.

    Raises:
        ValueError: raw is not a string or not valid JSON
    """
    if not isinstance(raw, (str, bytes, bytearray)):
        raise ValueError(f"Structured field must be JSON text, got {type(raw).__name__}")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON in structured field: %s", exc)
        raise ValueError(f"Invalid JSON: {exc}") from exc


def parse_json_object(raw: Any) -> dict[str, Any]:
    """Parse a stored JSON string that must hold an object."""
    parsed = parse_json_field(raw)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_json_array(raw: Any) -> list[Any]:
    """Parse a stored JSON string that must hold an array."""
    parsed = parse_json_field(raw)
    if not isinstance(parsed, list):
        raise ValueError(f"Expected a JSON array, got {type(parsed).__name__}")
    return parsed
