"""Stackforge schema parser.

Turns raw schema text (JSON, YAML, ``openapi``-tagged JSON, or the line DSL)
into a ``NormalizedSchema``, and offers a never-raising shallow validator for
live feedback.

Usage::

    from stackforge.parser import parse, validate

    result = validate(text, "yaml")
    if result.is_valid:
        schema = parse(text, "yaml")
"""

from stackforge.parser.loader import parse
from stackforge.parser.models import (
    EndpointDescriptor,
    FieldSpec,
    HTTPMethod,
    NormalizedSchema,
    PayloadShape,
)
from stackforge.parser.normalize import to_normalized_schema
from stackforge.parser.validator import ValidationResult, validate

__all__ = [
    "parse",
    "validate",
    "to_normalized_schema",
    "ValidationResult",
    "NormalizedSchema",
    "EndpointDescriptor",
    "FieldSpec",
    "PayloadShape",
    "HTTPMethod",
]
