"""Line-oriented scanner for the Stackforge endpoint DSL.

Example::

    name: Shop
    # comments and blank lines are ignored
    endpoint Order {
      method: POST
      path: /orders
      properties: {"total": {"type": "number", "required": true}}
    }

Blocks cannot be nested.  A missing final ``}`` is tolerated: the trailing
record is still appended.
"""

from __future__ import annotations

import json
import re
from typing import Any

from stackforge.errors import SchemaParseError

_OPEN_PATTERN = re.compile(r"^endpoint\s+([A-Za-z_][\w-]*)\s*\{$")
_NAME_PATTERN = re.compile(r"^name\s*:\s*(.+?)\s*$")
_JSON_KEYS = frozenset({"properties", "request", "response"})

DEFAULT_API_NAME = "API"


def parse_dsl(text: str) -> dict[str, Any]:
    """Decode DSL text into an untyped ``{name, endpoints}`` document.

    Raises:
        SchemaParseError: If the text holds no ``endpoint NAME {`` block.
    """
    name = DEFAULT_API_NAME
    endpoints: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    opened = 0

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        match = _OPEN_PATTERN.match(line)
        if match:
            if current is not None:
                endpoints.append(current)
            current = {"name": match.group(1)}
            opened += 1
            continue

        if line == "}":
            if current is not None:
                endpoints.append(current)
                current = None
            continue

        if current is None:
            name_match = _NAME_PATTERN.match(line)
            if name_match:
                name = name_match.group(1)
            continue

        if ":" in line:
            key, value = line.split(":", 1)
            key = key.strip()
            value = value.strip()
            if key in _JSON_KEYS:
                current[key] = _decode_embedded(value)
            else:
                current[key] = value

    if current is not None:
        endpoints.append(current)

    if opened == 0:
        raise SchemaParseError("dsl", "expected at least one 'endpoint NAME {' block")

    return {"name": name, "endpoints": endpoints}


def _decode_embedded(value: str) -> dict[str, Any]:
    """Decode an inline JSON object, falling back to ``{}``."""
    try:
        decoded = json.loads(value)
    except ValueError:
        return {}
    return decoded if isinstance(decoded, dict) else {}
