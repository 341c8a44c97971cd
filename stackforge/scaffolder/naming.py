"""Derived names for every generated artefact.

All paths, module names, identifiers and import specifiers come from this
module.  Templates never format a path or identifier themselves; they receive
the strings computed here, so the file that is emitted and every file that
imports it always agree on the name.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

from stackforge.config import (
    Architecture,
    AuthType,
    BackendFramework,
    FrontendFramework,
    GeneratorConfig,
    WrapperType,
)
from stackforge.parser.models import EndpointDescriptor, NormalizedSchema


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------

def _words(value: str) -> list[str]:
    """Split ``UserProfile``, ``user-profile`` or ``user profile`` into words."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", value)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return [w for w in re.split(r"[^A-Za-z0-9]+", spaced) if w]


def to_pascal(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    return "".join(w[:1].upper() + w[1:].lower() for w in _words(value))


def to_camel(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = to_pascal(value)
    return pascal[:1].lower() + pascal[1:]


def to_snake(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    return "_".join(w.lower() for w in _words(value))


def to_kebab(value: str) -> str:
    """Convert ``SomeThing`` or ``some_thing`` to ``some-thing``."""
    return "-".join(w.lower() for w in _words(value))


# ---------------------------------------------------------------------------
# Endpoint-level names
# ---------------------------------------------------------------------------

_PARAM_PATTERN = re.compile(r"^(?::(\w+)|\{(\w+)\})$")


def endpoint_slug(endpoint: EndpointDescriptor) -> str:
    """``User`` + ``GET`` -> ``user-get``.  The base of every per-endpoint file name."""
    return f"{to_kebab(endpoint.name)}-{endpoint.method.value.lower()}"


def operation_name(endpoint: EndpointDescriptor) -> str:
    """``User`` + ``GET`` -> ``getUser``.  Client function and RPC operation name."""
    return f"{endpoint.method.value.lower()}{to_pascal(endpoint.name)}"


def type_name(endpoint: EndpointDescriptor) -> str:
    """Entity type name, e.g. ``User``."""
    return to_pascal(endpoint.name)


def request_type_name(endpoint: EndpointDescriptor) -> str:
    return f"{to_pascal(operation_name(endpoint))}Request"


def response_type_name(endpoint: EndpointDescriptor) -> str:
    return f"{to_pascal(operation_name(endpoint))}Response"


def hook_name(endpoint: EndpointDescriptor) -> str:
    """``useGetUser``."""
    return f"use{to_pascal(operation_name(endpoint))}"


def path_segments(path: str) -> list[str]:
    return [seg for seg in path.strip("/").split("/") if seg]


def path_param(endpoint: EndpointDescriptor) -> str | None:
    """Name of the trailing path parameter (``/users/:id`` -> ``id``), if any."""
    segments = path_segments(endpoint.path)
    if not segments:
        return None
    match = _PARAM_PATTERN.match(segments[-1])
    if match is None:
        return None
    return match.group(1) or match.group(2)


def resource_key(endpoint: EndpointDescriptor) -> str:
    """Grouping key for microservices: first literal path segment, else the name."""
    for segment in path_segments(endpoint.path):
        if _PARAM_PATTERN.match(segment):
            continue
        key = to_kebab(segment)
        if key:
            return key
        break
    return to_kebab(endpoint.name) or "service"


def route_path(endpoint: EndpointDescriptor, brace_params: bool) -> str:
    """Server route pattern: ``/users/:id`` or ``/users/{id}`` (FastAPI)."""
    converted = []
    for segment in path_segments(endpoint.path):
        match = _PARAM_PATTERN.match(segment)
        if match:
            param = match.group(1) or match.group(2)
            converted.append(f"{{{param}}}" if brace_params else f":{param}")
        else:
            converted.append(segment)
    return "/" + "/".join(converted)


def client_path(endpoint: EndpointDescriptor) -> str:
    """Client-side URL template with ``${id}``-style interpolation for JavaScript."""
    converted = []
    for segment in path_segments(endpoint.path):
        match = _PARAM_PATTERN.match(segment)
        if match:
            param = match.group(1) or match.group(2)
            converted.append(f"${{{param}}}")
        else:
            converted.append(segment)
    return "/" + "/".join(converted)


def effective_auth(endpoint: EndpointDescriptor, config: GeneratorConfig) -> AuthType:
    """Per-endpoint ``auth`` wins over the global ``auth_type`` when present."""
    if endpoint.auth is not None:
        return endpoint.auth
    return config.auth_type


def project_slug(schema: NormalizedSchema) -> str:
    return to_kebab(schema.name) or "api"


# ---------------------------------------------------------------------------
# Stack families
# ---------------------------------------------------------------------------

NODE = "node"
PYTHON = "python"
GO = "go"

BACKEND_FAMILY: dict[BackendFramework, str] = {
    BackendFramework.EXPRESS: NODE,
    BackendFramework.FASTIFY: NODE,
    BackendFramework.NESTJS: NODE,
    BackendFramework.FASTAPI: PYTHON,
    BackendFramework.GO_FIBER: GO,
    BackendFramework.GO_GIN: GO,
}

# Reactivity model of the frontend framework.
FRONTEND_FAMILY: dict[FrontendFramework, str] = {
    FrontendFramework.REACT: "react",
    FrontendFramework.NEXT: "react",
    FrontendFramework.VUE: "vue",
    FrontendFramework.NUXT: "vue",
    FrontendFramework.SVELTE: "svelte",
    FrontendFramework.VANILLA: "vanilla",
}

# Wrapper shapes that are plain callables and benefit from a separate hook.
_HOOKABLE_WRAPPERS = {WrapperType.CLASS, WrapperType.FUNCTIONAL, WrapperType.CUSTOM}
_HOOK_FAMILIES = {"react", "vue"}


@dataclass(frozen=True)
class AuthGuard:
    """How one auth type is exposed by the generated auth module."""
    auth_type: AuthType
    name: str


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------


class ProjectLayout:
    """Paths, module names and import specifiers for one configuration.

    Module paths are extension-less, posix, and relative to the project root.
    ``file()`` appends the right extension; the ``*_import`` helpers turn two
    module paths into the import specifier the source language expects.
    """

    CLIENT_ROOT = "src/client"
    SERVER_ROOT = "src/server"

    def __init__(self, config: GeneratorConfig, schema: NormalizedSchema) -> None:
        self.config = config
        self.schema = schema
        self.family = BACKEND_FAMILY[config.backend_framework]
        self.frontend_family = FRONTEND_FAMILY[config.frontend_framework]

    # -- Extensions --------------------------------------------------------

    @property
    def script_ext(self) -> str:
        return ".ts" if self.config.typed else ".js"

    @property
    def jsx_ext(self) -> str:
        return ".tsx" if self.config.typed else ".jsx"

    @property
    def backend_ext(self) -> str:
        return {NODE: self.script_ext, PYTHON: ".py", GO: ".go"}[self.family]

    def file(self, module: str, ext: str | None = None) -> str:
        return module + (ext if ext is not None else self.backend_ext)

    # -- Module base names -------------------------------------------------

    def module_name(self, endpoint: EndpointDescriptor) -> str:
        """Backend file stem: kebab for Node, snake for Python and Go."""
        if self.family == NODE:
            return endpoint_slug(endpoint)
        return endpoint_slug(endpoint).replace("-", "_")

    def resource_module_name(self, name: str) -> str:
        if self.family == NODE:
            return to_kebab(name)
        return to_snake(name)

    # -- Frontend modules --------------------------------------------------

    @property
    def client_module(self) -> str:
        return f"{self.CLIENT_ROOT}/api/client"

    def wrapper_module(self, endpoint: EndpointDescriptor) -> str:
        return f"{self.CLIENT_ROOT}/api/{endpoint_slug(endpoint)}"

    def type_module(self, endpoint: EndpointDescriptor) -> str:
        return f"{self.CLIENT_ROOT}/types/{endpoint_slug(endpoint)}"

    def hook_module(self, endpoint: EndpointDescriptor) -> str:
        return f"{self.CLIENT_ROOT}/hooks/use-{endpoint_slug(endpoint)}"

    @property
    def store_module(self) -> str:
        return f"{self.CLIENT_ROOT}/store/index"

    def wrapper_ext(self) -> str:
        """Higher-order components in React need JSX."""
        if self.config.wrapper_type == WrapperType.HOC and self.frontend_family == "react":
            return self.jsx_ext
        return self.script_ext

    def needs_hook(self) -> bool:
        return (
            self.config.wrapper_type in _HOOKABLE_WRAPPERS
            and self.frontend_family in _HOOK_FAMILIES
        )

    def wrapper_export(self, endpoint: EndpointDescriptor) -> str:
        """Name the wrapper module exports for *endpoint*."""
        op = operation_name(endpoint)
        wrapper = self.config.wrapper_type
        if wrapper == WrapperType.CLASS:
            return f"{to_camel(endpoint_slug(endpoint))}Api"
        if wrapper == WrapperType.CUSTOM:
            return f"{op}Request"
        if wrapper == WrapperType.HOC:
            return f"with{to_pascal(op)}"
        if wrapper in (WrapperType.HOOKS, WrapperType.REACT_QUERY, WrapperType.SWR):
            return hook_name(endpoint)
        return op

    def wrapper_call(self, endpoint: EndpointDescriptor) -> str:
        """Expression that invokes the wrapper's request for *endpoint*."""
        export = self.wrapper_export(endpoint)
        wrapper = self.config.wrapper_type
        if wrapper == WrapperType.CLASS:
            return f"{export}.{operation_name(endpoint)}"
        if wrapper == WrapperType.CUSTOM:
            return f"{export}.send"
        return export

    # -- Backend modules (monolith) ----------------------------------------

    @property
    def entry_module(self) -> str:
        stem = "index" if self.family == NODE else "main"
        return f"{self.SERVER_ROOT}/{stem}"

    def route_module(self, endpoint: EndpointDescriptor, root: str = SERVER_ROOT) -> str:
        folder = {NODE: "routes", PYTHON: "routers", GO: "handlers"}[self.family]
        return f"{root}/{folder}/{self.module_name(endpoint)}"

    def auth_module(self, root: str = SERVER_ROOT) -> str:
        return f"{root}/middleware/auth"

    def db_module(self, root: str = SERVER_ROOT) -> str:
        return f"{root}/db/connection"

    def cache_module(self, root: str = SERVER_ROOT) -> str:
        return f"{root}/cache/store"

    def model_module(self, name: str, root: str = SERVER_ROOT) -> str:
        stem = self.resource_module_name(name)
        if self.family == NODE:
            return f"{root}/models/{stem}.model"
        return f"{root}/models/{stem}"

    def model_file(self, name: str, root: str = SERVER_ROOT, sql: bool = False) -> str:
        """File holding the model for resource *name*; SQL models are plain ``.sql``."""
        if sql:
            return f"{root}/models/{self.resource_module_name(name)}.sql"
        return self.file(self.model_module(name, root))

    def model_class(self, name: str) -> str:
        return to_pascal(name)

    @staticmethod
    def table_name(name: str) -> str:
        """``User`` -> ``users``; collection and table name."""
        snake = to_snake(name) or "item"
        return snake if snake.endswith("s") else f"{snake}s"

    # -- Backend modules (microservices) -----------------------------------

    @staticmethod
    def gateway_root() -> str:
        return "gateway"

    @staticmethod
    def service_root(resource: str) -> str:
        return f"services/{resource}"

    def service_source_root(self, resource: str) -> str:
        return f"{self.service_root(resource)}/src"

    def service_entry_module(self, resource: str) -> str:
        stem = "server" if self.family == NODE else "main"
        return f"{self.service_source_root(resource)}/{stem}"

    def controller_module(self, endpoint: EndpointDescriptor, resource: str) -> str:
        root = self.service_source_root(resource)
        if self.family == NODE:
            return f"{root}/controllers/{self.module_name(endpoint)}.controller"
        return f"{root}/controllers/{self.module_name(endpoint)}_controller"

    def service_module(self, endpoint: EndpointDescriptor, resource: str) -> str:
        root = self.service_source_root(resource)
        if self.family == NODE:
            return f"{root}/services/{self.module_name(endpoint)}.service"
        return f"{root}/services/{self.module_name(endpoint)}_service"

    # -- Backend modules (serverless) --------------------------------------

    def function_dir(self, endpoint: EndpointDescriptor) -> str:
        return f"functions/{self.module_name(endpoint)}"

    def function_module(self, endpoint: EndpointDescriptor) -> str:
        stem = "main" if self.family == GO else "handler"
        return f"{self.function_dir(endpoint)}/{stem}"

    def function_schema_module(self, endpoint: EndpointDescriptor) -> str:
        return f"{self.function_dir(endpoint)}/schema"

    def function_name(self, endpoint: EndpointDescriptor) -> str:
        return to_camel(endpoint_slug(endpoint))

    # -- Shared code (serverless) ------------------------------------------

    SHARED_ROOT = "lib"

    # -- Cross-file identifiers --------------------------------------------

    def handler_name(self, endpoint: EndpointDescriptor) -> str:
        """Data-access function: ``handleGetUser``, ``handle_get_user`` or ``HandleGetUser``."""
        op = operation_name(endpoint)
        if self.family == PYTHON:
            return f"handle_{to_snake(op)}"
        if self.family == GO:
            return f"Handle{to_pascal(op)}"
        return f"handle{to_pascal(op)}"

    def route_export(self, endpoint: EndpointDescriptor) -> str:
        """What a route or controller module exports for the server entry point."""
        op = operation_name(endpoint)
        framework = self.config.backend_framework
        if framework == BackendFramework.NESTJS:
            return f"{to_pascal(op)}Controller"
        if framework == BackendFramework.FASTIFY:
            return f"{op}Routes"
        if self.family == PYTHON:
            return "router"
        if self.family == GO:
            return f"Register{to_pascal(op)}"
        return f"{op}Router"

    # -- Tests -------------------------------------------------------------

    def test_file(self, endpoint: EndpointDescriptor, root: str = "") -> str:
        """Test stub path for *endpoint*, beside the architecture's sources."""
        base = f"{root}/tests" if root else "tests"
        if self.config.architecture == Architecture.SERVERLESS:
            base = self.function_dir(endpoint)
        stem = self.module_name(endpoint)
        if self.family == PYTHON:
            return f"{base}/test_{stem}.py"
        if self.family == GO:
            return f"{base}/{stem}_test.go"
        return f"{base}/{stem}.test{self.script_ext}"

    # -- Auth --------------------------------------------------------------

    def auth_guard(self, auth_type: AuthType) -> AuthGuard:
        """Exported name of the guard enforcing *auth_type*.

        Serverless functions get plain verifier functions instead of
        framework middleware.
        """
        label = to_pascal(auth_type.value)
        if self.config.architecture == Architecture.SERVERLESS:
            if self.family == PYTHON:
                return AuthGuard(auth_type, f"verify_{auth_type.value}")
            return AuthGuard(auth_type, f"Verify{label}" if self.family == GO else f"verify{label}")
        if self.config.backend_framework == BackendFramework.NESTJS:
            return AuthGuard(auth_type, f"{label}Guard")
        if self.family == PYTHON:
            return AuthGuard(auth_type, f"require_{auth_type.value}")
        if self.family == GO:
            return AuthGuard(auth_type, f"Require{label}")
        return AuthGuard(auth_type, f"require{label}")

    # -- Import specifiers -------------------------------------------------

    @staticmethod
    def relative_import(from_module: str, to_module: str) -> str:
        """ES module specifier from one module path to another (``./x``, ``../y/z``)."""
        rel = posixpath.relpath(to_module, posixpath.dirname(from_module) or ".")
        if not rel.startswith("."):
            rel = f"./{rel}"
        return rel

    @staticmethod
    def python_absolute(to_module: str) -> str:
        """Absolute dotted import used by top-level handler scripts."""
        return to_module.replace("/", ".")

    @staticmethod
    def python_import(from_module: str, to_module: str) -> str:
        """Relative dotted import (``.routers.user_get``, ``..db.connection``)."""
        from_parts = posixpath.dirname(from_module).split("/")
        to_parts = to_module.split("/")
        common = 0
        for a, b in zip(from_parts, to_parts):
            if a != b:
                break
            common += 1
        dots = "." * (len(from_parts) - common + 1)
        return dots + ".".join(to_parts[common:])

    def go_module_path(self, root: str = "") -> str:
        base = f"github.com/example/{project_slug(self.schema)}"
        return f"{base}/{root}" if root else base

    def go_import(self, to_module: str, root: str = "") -> str:
        """Go package import path for the directory holding *to_module*."""
        package_dir = posixpath.dirname(to_module)
        if root:
            package_dir = posixpath.relpath(package_dir, root)
        return f"{self.go_module_path(root)}/{package_dir}"

    @staticmethod
    def go_package(module: str) -> str:
        return posixpath.basename(posixpath.dirname(module))
