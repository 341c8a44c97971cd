"""Stackforge generator configuration.

A flat, immutable record of independent stack axes plus three feature flags.
All settings use Pydantic v2 models so they are validated at construction time
and can be serialised to/from JSON or environment variables without
boiler-plate.  Instances are frozen: use :meth:`GeneratorConfig.with_changes`
to derive a new configuration instead of mutating one in place.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Axis enumerations
# ---------------------------------------------------------------------------


class InputFormat(str, Enum):
    """Syntax of the raw schema text."""
    JSON = "json"
    YAML = "yaml"
    OPENAPI = "openapi"
    DSL = "dsl"


class FrontendFramework(str, Enum):
    REACT = "react"
    NEXT = "next"
    VUE = "vue"
    NUXT = "nuxt"
    SVELTE = "svelte"
    VANILLA = "vanilla"


class BackendFramework(str, Enum):
    EXPRESS = "express"
    FASTIFY = "fastify"
    NESTJS = "nestjs"
    FASTAPI = "fastapi"
    GO_FIBER = "go-fiber"
    GO_GIN = "go-gin"


class Architecture(str, Enum):
    """Backend topology: one server, one service per resource, or one function per endpoint."""
    MONOLITH = "monolith"
    MICROSERVICES = "microservices"
    SERVERLESS = "serverless"


class AuthType(str, Enum):
    NONE = "none"
    JWT = "jwt"
    OAUTH2 = "oauth2"
    APIKEY = "apikey"


class ApiStyle(str, Enum):
    REST = "rest"
    GRAPHQL = "graphql"
    GRPC = "grpc"
    WEBSOCKET = "websocket"


class HttpClient(str, Enum):
    AXIOS = "axios"
    FETCH = "fetch"
    KY = "ky"


class StateManagement(str, Enum):
    NONE = "none"
    REDUX = "redux"
    ZUSTAND = "zustand"
    MOBX = "mobx"
    JOTAI = "jotai"


class WrapperType(str, Enum):
    """Shape of the generated client-side code for each endpoint."""
    CLASS = "class"
    FUNCTIONAL = "functional"
    HOOKS = "hooks"
    HOC = "hoc"
    REACT_QUERY = "react-query"
    SWR = "swr"
    CUSTOM = "custom"


class DatabaseType(str, Enum):
    NONE = "none"
    MONGODB = "mongodb"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class CachingStrategy(str, Enum):
    NONE = "none"
    MEMORY = "memory"
    REDIS = "redis"


class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


_BOOL_TRUE = {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """Every stack choice that drives template selection.

    Each axis is independently selectable; the engine must render every
    combination of the Cartesian product without contradiction.
    """

    model_config = ConfigDict(frozen=True)

    frontend_framework: FrontendFramework = Field(default=FrontendFramework.REACT)
    backend_framework: BackendFramework = Field(default=BackendFramework.EXPRESS)
    architecture: Architecture = Field(default=Architecture.MONOLITH)
    auth_type: AuthType = Field(default=AuthType.JWT)
    api_style: ApiStyle = Field(default=ApiStyle.REST)
    http_client: HttpClient = Field(default=HttpClient.AXIOS)
    state_management: StateManagement = Field(default=StateManagement.NONE)
    wrapper_type: WrapperType = Field(default=WrapperType.FUNCTIONAL)
    database_type: DatabaseType = Field(default=DatabaseType.NONE)
    caching_strategy: CachingStrategy = Field(default=CachingStrategy.NONE)
    language: Language = Field(default=Language.TYPESCRIPT)

    generate_tests: bool = Field(default=True, description="Emit one test stub per endpoint")
    generate_docs: bool = Field(default=True, description="Emit API and architecture docs")
    generate_docker: bool = Field(default=True, description="Emit Dockerfile and compose file")

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def typed(self) -> bool:
        """Whether generated JavaScript-family sources carry type annotations."""
        return self.language == Language.TYPESCRIPT

    # ------------------------------------------------------------------
    # Copy-on-write updates
    # ------------------------------------------------------------------

    def with_changes(self, **changes: Any) -> "GeneratorConfig":
        """Return a new validated configuration with *changes* applied.

        Raises:
            pydantic.ValidationError: If a value is not legal for its axis.
        """
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Each field maps to ``STACKFORGE_<FIELD>`` in upper case, e.g.
        ``STACKFORGE_ARCHITECTURE=serverless`` or
        ``STACKFORGE_GENERATE_DOCKER=false``.  Unset variables keep defaults.
        """
        kwargs: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            raw = os.environ.get(f"STACKFORGE_{name.upper()}")
            if not raw:
                continue
            if field.annotation is bool:
                kwargs[name] = raw.strip().lower() in _BOOL_TRUE
            else:
                kwargs[name] = raw.strip()
        return cls(**kwargs)
