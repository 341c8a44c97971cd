"""Shallow structural checks on raw schema text.

Used for live editor feedback.  Independent of the parser: it works on the
raw text and never raises; every problem becomes one entry in
``ValidationResult.errors``.
"""

from __future__ import annotations

import json
from typing import Any

import yaml
from pydantic import BaseModel, Field

from stackforge.config import InputFormat

_VALID_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
_DSL_KEYWORDS = ("endpoint", "api", "route")


class ValidationResult(BaseModel):
    """Outcome of :func:`validate`."""
    is_valid: bool = Field(..., description="True when no errors were found")
    errors: list[str] = Field(default_factory=list)


def validate(raw_text: str, fmt: InputFormat | str) -> ValidationResult:
    """Check raw schema text for structural problems."""
    if not raw_text or not raw_text.strip():
        return ValidationResult(is_valid=False, errors=["Schema cannot be empty"])

    try:
        fmt = InputFormat(fmt)
    except ValueError:
        return ValidationResult(is_valid=False, errors=[f"Unsupported format: {fmt}"])
    errors: list[str] = []

    if fmt == InputFormat.DSL:
        _validate_dsl(raw_text, errors)
        return ValidationResult(is_valid=not errors, errors=errors)

    try:
        if fmt == InputFormat.YAML:
            document = yaml.safe_load(raw_text)
        else:
            document = json.loads(raw_text)
    except (ValueError, yaml.YAMLError) as exc:
        return ValidationResult(
            is_valid=False,
            errors=[f"Invalid {fmt.value.upper()} format: {exc}"],
        )

    _validate_document(document, errors)
    return ValidationResult(is_valid=not errors, errors=errors)


def _validate_document(document: Any, errors: list[str]) -> None:
    if not isinstance(document, dict):
        errors.append("Schema must be an object with 'name' and 'endpoints'")
        return

    if not document.get("name"):
        errors.append("API name is required")

    endpoints = document.get("endpoints")
    if not isinstance(endpoints, list) or not endpoints:
        errors.append("Schema must contain at least one endpoint definition")
        return

    for index, endpoint in enumerate(endpoints, start=1):
        prefix = f"Endpoint #{index}"
        if not isinstance(endpoint, dict):
            errors.append(f"{prefix}: Must be an object")
            continue
        if not endpoint.get("name"):
            errors.append(f"{prefix}: Name is required")
        if not endpoint.get("path"):
            errors.append(f"{prefix}: Path is required")
        method = endpoint.get("method")
        if not method:
            errors.append(f"{prefix}: HTTP method is required")
        elif str(method).upper() not in _VALID_METHODS:
            errors.append(f'{prefix}: Invalid HTTP method "{method}"')
        if "properties" not in endpoint or endpoint.get("properties") is None:
            errors.append(f"{prefix}: Properties are required")


def _validate_dsl(text: str, errors: list[str]) -> None:
    has_endpoint = False
    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(_DSL_KEYWORDS):
            has_endpoint = True
            if "{" not in line:
                errors.append(f"Line {number}: Invalid endpoint definition syntax")

    if not has_endpoint:
        errors.append("DSL must contain at least one endpoint definition")
