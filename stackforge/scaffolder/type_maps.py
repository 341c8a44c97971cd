"""Fixed lookup tables: abstract field types and third-party packages.

Each table maps an abstract value to a target-language keyword or package
name.  Unmapped field types fall back to a generic type for that target.
"""

from __future__ import annotations

from enum import Enum

from stackforge.config import (
    AuthType,
    BackendFramework,
    CachingStrategy,
    DatabaseType,
    HttpClient,
    StateManagement,
)
from stackforge.parser.models import FieldSpec


class Persistence(str, Enum):
    """How model files are written for a database type."""
    DOCUMENT = "document"
    RELATIONAL = "relational"
    SQL = "sql"


PERSISTENCE: dict[DatabaseType, Persistence | None] = {
    DatabaseType.NONE: None,
    DatabaseType.MONGODB: Persistence.DOCUMENT,
    DatabaseType.POSTGRESQL: Persistence.RELATIONAL,
    DatabaseType.MYSQL: Persistence.RELATIONAL,
    DatabaseType.SQLITE: Persistence.SQL,
}


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

_TS_TYPES: dict[str, str] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "array": "unknown[]",
    "object": "Record<string, unknown>",
    "date": "string",
}

_PYTHON_TYPES: dict[str, str] = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "array": "list",
    "object": "dict",
    "date": "datetime",
}

_GO_TYPES: dict[str, str] = {
    "string": "string",
    "integer": "int64",
    "number": "float64",
    "boolean": "bool",
    "array": "[]interface{}",
    "object": "map[string]interface{}",
    "date": "time.Time",
}

_GRAPHQL_TYPES: dict[str, str] = {
    "string": "String",
    "integer": "Int",
    "number": "Float",
    "boolean": "Boolean",
    "array": "[String]",
    "object": "JSON",
    "date": "String",
}

_PROTO_TYPES: dict[str, str] = {
    "string": "string",
    "integer": "int64",
    "number": "double",
    "boolean": "bool",
    "array": "repeated string",
    "object": "google.protobuf.Struct",
    "date": "string",
}

# Persistence keywords, keyed by (backend family, persistence kind).
_PERSISTENCE_TYPES: dict[tuple[str, Persistence], tuple[dict[str, str], str]] = {
    ("node", Persistence.DOCUMENT): (
        {"string": "String", "integer": "Number", "number": "Number",
         "boolean": "Boolean", "array": "Array", "date": "Date"},
        "Schema.Types.Mixed",
    ),
    ("node", Persistence.RELATIONAL): (
        {"string": "varchar", "integer": "int", "number": "float",
         "boolean": "boolean", "date": "timestamp"},
        "simple-json",
    ),
    ("python", Persistence.DOCUMENT): (
        {"string": "str", "integer": "int", "number": "float",
         "boolean": "bool", "array": "list", "date": "datetime"},
        "dict",
    ),
    ("python", Persistence.RELATIONAL): (
        {"string": "String", "integer": "Integer", "number": "Float",
         "boolean": "Boolean", "date": "DateTime"},
        "JSON",
    ),
    ("go", Persistence.DOCUMENT): (
        {"string": "string", "integer": "int64", "number": "float64",
         "boolean": "bool", "array": "[]interface{}", "date": "time.Time"},
        "interface{}",
    ),
    ("go", Persistence.RELATIONAL): (
        {"string": "string", "integer": "int64", "number": "float64",
         "boolean": "bool", "date": "time.Time"},
        "datatypes.JSON",
    ),
}

_SQL_TYPES: dict[str, str] = {
    "string": "TEXT",
    "integer": "INTEGER",
    "number": "REAL",
    "boolean": "INTEGER",
    "date": "TEXT",
}
_SQL_FALLBACK = "TEXT"


def _abstract(field: FieldSpec) -> str:
    """Abstract type of *field*; date formats count as ``date``."""
    if field.type == "string" and field.format in ("date", "date-time"):
        return "date"
    return field.type.lower()


def ts_type(field: FieldSpec) -> str:
    return _TS_TYPES.get(_abstract(field), "unknown")


def python_type(field: FieldSpec) -> str:
    return _PYTHON_TYPES.get(_abstract(field), "Any")


def go_type(field: FieldSpec) -> str:
    return _GO_TYPES.get(_abstract(field), "interface{}")


def graphql_type(field: FieldSpec) -> str:
    return _GRAPHQL_TYPES.get(_abstract(field), "String")


def proto_type(field: FieldSpec) -> str:
    return _PROTO_TYPES.get(_abstract(field), "string")


def persistence_type(field: FieldSpec, family: str, kind: Persistence) -> str:
    """Column/field keyword for *field* in the given persistence flavour."""
    if kind == Persistence.SQL:
        return _SQL_TYPES.get(_abstract(field), _SQL_FALLBACK)
    mapping, fallback = _PERSISTENCE_TYPES[(family, kind)]
    return mapping.get(_abstract(field), fallback)


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

FRONTEND_PACKAGES: dict[str, dict[str, str]] = {
    "react": {"react": "^18.3.1", "react-dom": "^18.3.1"},
    "next": {"next": "^14.2.5", "react": "^18.3.1", "react-dom": "^18.3.1"},
    "vue": {"vue": "^3.4.38"},
    "nuxt": {"nuxt": "^3.13.0", "vue": "^3.4.38"},
    "svelte": {"svelte": "^4.2.19", "@sveltejs/kit": "^2.5.24"},
    "vanilla": {},
}

HTTP_CLIENT_PACKAGES: dict[HttpClient, dict[str, str]] = {
    HttpClient.AXIOS: {"axios": "^1.7.4"},
    HttpClient.FETCH: {},
    HttpClient.KY: {"ky": "^1.7.1"},
}

API_STYLE_CLIENT_PACKAGES: dict[str, dict[str, str]] = {
    "graphql": {"graphql": "^16.9.0", "graphql-request": "^7.1.0"},
    "grpc": {"grpc-web": "^1.5.0", "google-protobuf": "^3.21.4"},
    "websocket": {},
}

STATE_PACKAGES: dict[StateManagement, dict[str, str]] = {
    StateManagement.NONE: {},
    StateManagement.REDUX: {"@reduxjs/toolkit": "^2.2.7"},
    StateManagement.ZUSTAND: {"zustand": "^4.5.5"},
    StateManagement.MOBX: {"mobx": "^6.13.1"},
    StateManagement.JOTAI: {"jotai": "^2.9.3"},
}

# Query/cache libraries, keyed by frontend reactivity family.
QUERY_LIBRARY: dict[str, str] = {
    "react": "@tanstack/react-query",
    "vue": "@tanstack/vue-query",
    "svelte": "@tanstack/svelte-query",
    "vanilla": "@tanstack/query-core",
}

SWR_LIBRARY: dict[str, str | None] = {
    "react": "swr",
    "vue": "swrv",
    "svelte": "sswr",
    "vanilla": None,
}

LIBRARY_VERSIONS: dict[str, str] = {
    "@tanstack/react-query": "^5.52.1",
    "@tanstack/vue-query": "^5.52.0",
    "@tanstack/svelte-query": "^5.52.0",
    "@tanstack/query-core": "^5.52.0",
    "swr": "^2.2.5",
    "swrv": "^1.0.4",
    "sswr": "^2.1.0",
}

NODE_BACKEND_PACKAGES: dict[BackendFramework, dict[str, str]] = {
    BackendFramework.EXPRESS: {"express": "^4.19.2", "cors": "^2.8.5"},
    BackendFramework.FASTIFY: {"fastify": "^4.28.1", "@fastify/cors": "^9.0.1"},
    BackendFramework.NESTJS: {
        "@nestjs/common": "^10.4.1",
        "@nestjs/core": "^10.4.1",
        "@nestjs/platform-express": "^10.4.1",
        "reflect-metadata": "^0.2.2",
        "rxjs": "^7.8.1",
    },
}

NODE_DATABASE_PACKAGES: dict[DatabaseType, dict[str, str]] = {
    DatabaseType.NONE: {},
    DatabaseType.MONGODB: {"mongoose": "^8.6.0"},
    DatabaseType.POSTGRESQL: {"typeorm": "^0.3.20", "pg": "^8.12.0", "reflect-metadata": "^0.2.2"},
    DatabaseType.MYSQL: {"typeorm": "^0.3.20", "mysql2": "^3.11.0", "reflect-metadata": "^0.2.2"},
    DatabaseType.SQLITE: {"better-sqlite3": "^11.2.1"},
}

NODE_CACHE_PACKAGES: dict[CachingStrategy, dict[str, str]] = {
    CachingStrategy.NONE: {},
    CachingStrategy.MEMORY: {},
    CachingStrategy.REDIS: {"ioredis": "^5.4.1"},
}

NODE_AUTH_PACKAGES: dict[AuthType, dict[str, str]] = {
    AuthType.NONE: {},
    AuthType.JWT: {"jsonwebtoken": "^9.0.2"},
    AuthType.OAUTH2: {"jose": "^5.8.0"},
    AuthType.APIKEY: {},
}

# Lambda handlers validate bodies with zod and are bundled by serverless-esbuild.
NODE_SERVERLESS_PACKAGES: dict[str, str] = {"zod": "^3.23.8"}
NODE_SERVERLESS_DEV_PACKAGES: dict[str, str] = {
    "serverless": "^3.39.0",
    "serverless-esbuild": "^1.52.1",
    "esbuild": "^0.23.1",
}

NODE_TEST_PACKAGES: dict[str, str] = {"vitest": "^2.0.5", "supertest": "^7.0.0"}
NODE_TYPED_DEV_PACKAGES: dict[str, str] = {"typescript": "^5.5.4", "@types/node": "^22.5.0"}

# Type declarations for runtime packages that do not ship their own.
NODE_TYPE_PACKAGES: dict[str, dict[str, str]] = {
    "express": {"@types/express": "^4.17.21"},
    "cors": {"@types/cors": "^2.8.17"},
    "better-sqlite3": {"@types/better-sqlite3": "^7.6.11"},
    "jsonwebtoken": {"@types/jsonwebtoken": "^9.0.6"},
    "supertest": {"@types/supertest": "^6.0.2"},
    "serverless": {"@types/aws-lambda": "^8.10.145"},
}

PYTHON_PACKAGES: dict[str, list[str]] = {
    "base": ["fastapi>=0.112", "uvicorn[standard]>=0.30", "pydantic>=2.8"],
    DatabaseType.MONGODB.value: ["beanie>=1.26", "motor>=3.5"],
    DatabaseType.POSTGRESQL.value: ["sqlalchemy[asyncio]>=2.0", "asyncpg>=0.29"],
    DatabaseType.MYSQL.value: ["sqlalchemy[asyncio]>=2.0", "aiomysql>=0.2"],
    DatabaseType.SQLITE.value: ["aiosqlite>=0.20"],
    CachingStrategy.REDIS.value: ["redis>=5.0"],
    AuthType.JWT.value: ["pyjwt>=2.9"],
    AuthType.OAUTH2.value: ["pyjwt[crypto]>=2.9"],
    "tests": ["pytest>=8.3", "httpx>=0.27"],
}

GO_MODULES: dict[str, list[str]] = {
    BackendFramework.GO_FIBER.value: ["github.com/gofiber/fiber/v2 v2.52.5"],
    BackendFramework.GO_GIN.value: ["github.com/gin-gonic/gin v1.10.0"],
    DatabaseType.MONGODB.value: ["go.mongodb.org/mongo-driver v1.16.1"],
    DatabaseType.POSTGRESQL.value: ["gorm.io/gorm v1.25.11", "gorm.io/driver/postgres v1.5.9",
                                    "gorm.io/datatypes v1.2.1"],
    DatabaseType.MYSQL.value: ["gorm.io/gorm v1.25.11", "gorm.io/driver/mysql v1.5.7",
                               "gorm.io/datatypes v1.2.1"],
    DatabaseType.SQLITE.value: ["github.com/mattn/go-sqlite3 v1.14.22"],
    CachingStrategy.REDIS.value: ["github.com/redis/go-redis/v9 v9.6.1"],
    AuthType.JWT.value: ["github.com/golang-jwt/jwt/v5 v5.2.1"],
    AuthType.OAUTH2.value: ["github.com/golang-jwt/jwt/v5 v5.2.1"],
    "serverless": ["github.com/aws/aws-lambda-go v1.47.0"],
}
