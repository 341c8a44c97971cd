"""Conversion of decoded documents into the strict ``NormalizedSchema``.

Decoders only turn text into plain dicts/lists.  This module is the single
gate between that untyped document and the template catalog: every defect is
collected and reported together as a ``SchemaShapeError``.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from stackforge.config import AuthType
from stackforge.errors import SchemaShapeError

from .models import EndpointDescriptor, HTTPMethod, NormalizedSchema

_METHODS = {m.value for m in HTTPMethod}
_AUTH_TYPES = {a.value for a in AuthType}
# Generated file and identifier names are built from these characters only.
_IDENTIFIER_CHAR = re.compile(r"[A-Za-z0-9]")


def to_normalized_schema(document: Any) -> NormalizedSchema:
    """Validate and convert a decoded document.

    Args:
        document: Output of a JSON/YAML/DSL decoder.

    Returns:
        The strict normalized schema, endpoint order preserved.

    Raises:
        SchemaShapeError: Listing every structural defect found.
    """
    if not isinstance(document, dict):
        raise SchemaShapeError(["Schema must be an object with 'name' and 'endpoints'"])

    errors: list[str] = []
    name = document.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("API name is required")

    raw_endpoints = document.get("endpoints")
    if not isinstance(raw_endpoints, list) or not raw_endpoints:
        errors.append("Schema must contain at least one endpoint definition")
        raise SchemaShapeError(errors)

    endpoints: list[EndpointDescriptor] = []
    for index, raw in enumerate(raw_endpoints, start=1):
        endpoint = _convert_endpoint(index, raw, errors)
        if endpoint is not None:
            endpoints.append(endpoint)

    if errors:
        raise SchemaShapeError(errors)

    return NormalizedSchema(
        name=name.strip(),
        version=str(document.get("version") or "1.0.0"),
        description=str(document.get("description") or ""),
        endpoints=endpoints,
    )


def _convert_endpoint(
    index: int, raw: Any, errors: list[str]
) -> EndpointDescriptor | None:
    """Convert one endpoint dict, appending defects to *errors*."""
    prefix = f"Endpoint #{index}"
    if not isinstance(raw, dict):
        errors.append(f"{prefix}: Must be an object")
        return None

    before = len(errors)
    name = str(raw.get("name") or "").strip()
    if not name:
        errors.append(f"{prefix}: Name is required")
    elif not _IDENTIFIER_CHAR.search(name):
        errors.append(f"{prefix}: Name must contain a letter or digit")
    if not str(raw.get("path") or "").strip():
        errors.append(f"{prefix}: Path is required")

    method = str(raw.get("method") or "").strip().upper()
    if not method:
        errors.append(f"{prefix}: HTTP method is required")
    elif method not in _METHODS:
        errors.append(f'{prefix}: Invalid HTTP method "{raw.get("method")}"')

    if not isinstance(raw.get("properties"), dict):
        errors.append(f"{prefix}: Properties are required")

    auth = raw.get("auth")
    if auth is not None:
        auth = str(auth).strip().lower()
        if auth not in _AUTH_TYPES:
            errors.append(f'{prefix}: Unknown auth type "{raw.get("auth")}"')

    if len(errors) > before:
        return None

    try:
        return EndpointDescriptor.model_validate({
            **raw,
            "name": str(raw["name"]).strip(),
            "path": str(raw["path"]).strip(),
            "method": method,
            "auth": auth,
        })
    except ValidationError as exc:
        for detail in exc.errors():
            location = ".".join(str(part) for part in detail["loc"])
            errors.append(f"{prefix}: {location}: {detail['msg']}")
        return None
