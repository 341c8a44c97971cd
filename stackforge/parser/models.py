"""Pydantic v2 models for the normalized schema.

Every input syntax (JSON, YAML, the "openapi" tag, and the DSL) is decoded
into an untyped document first and then converted into these models, which
are the only shape the template catalog ever sees.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from stackforge.config import AuthType


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class HTTPMethod(str, Enum):
    """Supported HTTP methods for API endpoints."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


# ---------------------------------------------------------------------------
# Field & payload models
# ---------------------------------------------------------------------------

class FieldSpec(BaseModel):
    """A single resource field.

    Extra keys such as ``minLength`` or ``enum`` are kept as-is so renderers
    and docs can dump them.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="string", description="Abstract field type, e.g. 'string'")
    format: Optional[str] = Field(default=None, description="Format hint, e.g. 'email'")
    required: bool = Field(default=False, description="Whether the field is mandatory")

    def constraints(self) -> dict[str, Any]:
        """Return the extra constraint keys (everything but type/format/required)."""
        return dict(self.model_extra or {})


class PayloadShape(BaseModel):
    """Wire payload description for a request or response body."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="object")
    properties: dict[str, FieldSpec] = Field(default_factory=dict)
    items: Optional[PayloadShape] = Field(default=None, description="Element shape for arrays")

    @property
    def is_array(self) -> bool:
        return self.type == "array"

    def fields(self) -> dict[str, FieldSpec]:
        """Fields of the payload, looking through ``items`` for arrays."""
        if self.is_array and self.items is not None:
            return self.items.properties
        return self.properties


PayloadShape.model_rebuild()


# ---------------------------------------------------------------------------
# Endpoint & schema
# ---------------------------------------------------------------------------

class EndpointDescriptor(BaseModel):
    """One logical API operation."""

    name: str = Field(..., min_length=1, description="Resource name, e.g. 'User'")
    method: HTTPMethod = Field(..., description="HTTP method")
    path: str = Field(..., description="URL path, e.g. '/users'")
    auth: Optional[AuthType] = Field(
        default=None, description="Per-endpoint auth override"
    )
    description: str = Field(default="")
    properties: dict[str, FieldSpec] = Field(default_factory=dict)
    request: Optional[PayloadShape] = Field(default=None)
    response: Optional[PayloadShape] = Field(default=None)

    def request_fields(self) -> dict[str, FieldSpec]:
        """Request body fields, falling back to ``properties``."""
        if self.request is not None and self.request.fields():
            return self.request.fields()
        return self.properties

    def response_fields(self) -> dict[str, FieldSpec]:
        """Response body fields, falling back to ``properties``."""
        if self.response is not None and self.response.fields():
            return self.response.fields()
        return self.properties

    @property
    def returns_list(self) -> bool:
        """Whether the response is a collection."""
        if self.response is not None:
            return self.response.is_array
        return False

    @property
    def has_body(self) -> bool:
        return self.method in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)

    @property
    def success_status(self) -> int:
        return 201 if self.method == HTTPMethod.POST else 200


class NormalizedSchema(BaseModel):
    """A named API with an ordered list of endpoints.

    Endpoint order defines file emission order.
    """

    name: str = Field(..., min_length=1)
    version: str = Field(default="1.0.0")
    description: str = Field(default="")
    endpoints: list[EndpointDescriptor] = Field(..., min_length=1)
