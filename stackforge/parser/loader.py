"""Schema parser entry point.

Decodes raw schema text in one of the supported input formats and converts
the result into a ``NormalizedSchema``.

Note that the ``openapi`` tag is decoded exactly like ``json``: the document
is expected in Stackforge's own ``{name, endpoints}`` dialect, not as a real
OpenAPI description.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from stackforge.config import InputFormat
from stackforge.errors import SchemaParseError

from .dsl import parse_dsl
from .models import NormalizedSchema
from .normalize import to_normalized_schema


def decode(raw_text: str, fmt: InputFormat | str) -> Any:
    """Decode *raw_text* into an untyped document.

    Raises:
        SchemaParseError: If the text is not valid in the claimed format.
    """
    fmt = InputFormat(fmt)

    if fmt in (InputFormat.JSON, InputFormat.OPENAPI):
        try:
            return json.loads(raw_text)
        except ValueError as exc:
            raise SchemaParseError(fmt.value, str(exc)) from exc

    if fmt == InputFormat.YAML:
        try:
            return yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise SchemaParseError(fmt.value, str(exc)) from exc

    return parse_dsl(raw_text)


def parse(raw_text: str, fmt: InputFormat | str) -> NormalizedSchema:
    """Parse raw schema text into the normalized schema.

    Raises:
        SchemaParseError: The text cannot be decoded.
        SchemaShapeError: The decoded document lacks required structure.
    """
    return to_normalized_schema(decode(raw_text, fmt))
