"""Template catalog: one pure renderer per generated file kind.

Every renderer takes the configuration and the schema (plus an endpoint or a
module path where relevant) and returns the text of one file.  Which template
a renderer uses is decided by the lookup tables below, keyed by axis value.
Names, paths and import specifiers are computed by ``ProjectLayout`` and
handed to the templates ready-made.
"""

from __future__ import annotations

import json
import keyword
import posixpath
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from stackforge.config import (
    ApiStyle,
    Architecture,
    AuthType,
    BackendFramework,
    CachingStrategy,
    DatabaseType,
    GeneratorConfig,
    StateManagement,
    WrapperType,
)
from stackforge.parser.models import EndpointDescriptor, FieldSpec, NormalizedSchema

from .naming import (
    GO,
    NODE,
    PYTHON,
    ProjectLayout,
    client_path,
    effective_auth,
    endpoint_slug,
    hook_name,
    operation_name,
    path_param,
    project_slug,
    request_type_name,
    resource_key,
    response_type_name,
    route_path,
    to_pascal,
    to_snake,
    type_name,
)
from .templates import TemplateRenderer
from .type_maps import (
    API_STYLE_CLIENT_PACKAGES,
    FRONTEND_PACKAGES,
    GO_MODULES,
    HTTP_CLIENT_PACKAGES,
    LIBRARY_VERSIONS,
    NODE_AUTH_PACKAGES,
    NODE_BACKEND_PACKAGES,
    NODE_CACHE_PACKAGES,
    NODE_DATABASE_PACKAGES,
    NODE_SERVERLESS_DEV_PACKAGES,
    NODE_SERVERLESS_PACKAGES,
    NODE_TEST_PACKAGES,
    NODE_TYPE_PACKAGES,
    NODE_TYPED_DEV_PACKAGES,
    PERSISTENCE,
    PYTHON_PACKAGES,
    QUERY_LIBRARY,
    STATE_PACKAGES,
    SWR_LIBRARY,
    Persistence,
    go_type,
    graphql_type,
    persistence_type,
    proto_type,
    python_type,
    ts_type,
)


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

CLIENT_TEMPLATES: dict[ApiStyle, str] = {
    ApiStyle.REST: "frontend/client/rest.j2",
    ApiStyle.GRAPHQL: "frontend/client/graphql.j2",
    ApiStyle.GRPC: "frontend/client/grpc.j2",
    ApiStyle.WEBSOCKET: "frontend/client/websocket.j2",
}

WRAPPER_TEMPLATES: dict[WrapperType, str] = {
    WrapperType.CLASS: "frontend/wrappers/class.j2",
    WrapperType.FUNCTIONAL: "frontend/wrappers/functional.j2",
    WrapperType.HOOKS: "frontend/wrappers/hooks.j2",
    WrapperType.HOC: "frontend/wrappers/hoc.j2",
    WrapperType.REACT_QUERY: "frontend/wrappers/query.j2",
    WrapperType.SWR: "frontend/wrappers/swr.j2",
    WrapperType.CUSTOM: "frontend/wrappers/custom.j2",
}

STORE_TEMPLATES: dict[StateManagement, Optional[str]] = {
    StateManagement.NONE: None,
    StateManagement.REDUX: "frontend/store/redux.j2",
    StateManagement.ZUSTAND: "frontend/store/zustand.j2",
    StateManagement.MOBX: "frontend/store/mobx.j2",
    StateManagement.JOTAI: "frontend/store/jotai.j2",
}

# Backend templates whose syntax depends on the framework itself.
ENTRY_TEMPLATES: dict[BackendFramework, str] = {
    BackendFramework.EXPRESS: "backend/express/entry.j2",
    BackendFramework.FASTIFY: "backend/fastify/entry.j2",
    BackendFramework.NESTJS: "backend/nestjs/entry.j2",
    BackendFramework.FASTAPI: "backend/fastapi/entry.j2",
    BackendFramework.GO_FIBER: "backend/fiber/entry.j2",
    BackendFramework.GO_GIN: "backend/gin/entry.j2",
}

ROUTE_TEMPLATES: dict[BackendFramework, str] = {
    BackendFramework.EXPRESS: "backend/express/route.j2",
    BackendFramework.FASTIFY: "backend/fastify/route.j2",
    BackendFramework.NESTJS: "backend/nestjs/route.j2",
    BackendFramework.FASTAPI: "backend/fastapi/route.j2",
    BackendFramework.GO_FIBER: "backend/fiber/route.j2",
    BackendFramework.GO_GIN: "backend/gin/route.j2",
}

AUTH_TEMPLATES: dict[BackendFramework, str] = {
    BackendFramework.EXPRESS: "backend/express/auth.j2",
    BackendFramework.FASTIFY: "backend/fastify/auth.j2",
    BackendFramework.NESTJS: "backend/nestjs/auth.j2",
    BackendFramework.FASTAPI: "backend/fastapi/auth.j2",
    BackendFramework.GO_FIBER: "backend/fiber/auth.j2",
    BackendFramework.GO_GIN: "backend/gin/auth.j2",
}

TEST_TEMPLATES: dict[BackendFramework, str] = {
    BackendFramework.EXPRESS: "tests/node.j2",
    BackendFramework.FASTIFY: "tests/fastify.j2",
    BackendFramework.NESTJS: "tests/nestjs.j2",
    BackendFramework.FASTAPI: "tests/python.j2",
    BackendFramework.GO_FIBER: "tests/fiber.j2",
    BackendFramework.GO_GIN: "tests/gin.j2",
}

# Templates shared by every framework of one language family.
SERVICE_TEMPLATES: dict[str, str] = {
    NODE: "backend/node/service.j2",
    PYTHON: "backend/python/service.j2",
    GO: "backend/go/service.j2",
}

FUNCTION_TEMPLATES: dict[str, str] = {
    NODE: "backend/node/function.j2",
    PYTHON: "backend/python/function.j2",
    GO: "backend/go/function.j2",
}

FUNCTION_AUTH_TEMPLATES: dict[str, str] = {
    NODE: "backend/node/verify.j2",
    PYTHON: "backend/python/verify.j2",
    GO: "backend/go/verify.j2",
}

FUNCTION_TEST_TEMPLATES: dict[str, str] = {
    NODE: "tests/function_node.j2",
    PYTHON: "tests/function_python.j2",
    GO: "tests/function_go.j2",
}

DB_TEMPLATES: dict[str, str] = {
    NODE: "backend/node/db.j2",
    PYTHON: "backend/python/db.j2",
    GO: "backend/go/db.j2",
}

CACHE_TEMPLATES: dict[tuple[str, CachingStrategy], str] = {
    (NODE, CachingStrategy.MEMORY): "backend/node/cache_memory.j2",
    (NODE, CachingStrategy.REDIS): "backend/node/cache_redis.j2",
    (PYTHON, CachingStrategy.MEMORY): "backend/python/cache_memory.j2",
    (PYTHON, CachingStrategy.REDIS): "backend/python/cache_redis.j2",
    (GO, CachingStrategy.MEMORY): "backend/go/cache_memory.j2",
    (GO, CachingStrategy.REDIS): "backend/go/cache_redis.j2",
}

MODEL_TEMPLATES: dict[tuple[str, Persistence], str] = {
    (NODE, Persistence.DOCUMENT): "backend/node/model_document.j2",
    (NODE, Persistence.RELATIONAL): "backend/node/model_relational.j2",
    (PYTHON, Persistence.DOCUMENT): "backend/python/model_document.j2",
    (PYTHON, Persistence.RELATIONAL): "backend/python/model_relational.j2",
    (GO, Persistence.DOCUMENT): "backend/go/model_document.j2",
    (GO, Persistence.RELATIONAL): "backend/go/model_relational.j2",
}
SQL_MODEL_TEMPLATE = "backend/sql/model.sql.j2"

# api style -> (output path, template)
CONTRACT_TEMPLATES: dict[ApiStyle, Optional[tuple[str, str]]] = {
    ApiStyle.REST: None,
    ApiStyle.GRAPHQL: ("api/schema.graphql", "api/schema.graphql.j2"),
    ApiStyle.GRPC: ("api/{name}.proto", "api/service.proto.j2"),
    ApiStyle.WEBSOCKET: None,
}

# Node server listen port per architecture role.
DEFAULT_PORTS: dict[str, int] = {
    "frontend": 3000,
    "backend": 4000,
    "gateway": 8080,
    "service_base": 4001,
}

# Database connection URLs written to .env.example and docker-compose.
DATABASE_URLS: dict[DatabaseType, Optional[str]] = {
    DatabaseType.NONE: None,
    DatabaseType.MONGODB: "mongodb://{host}:27017/{slug}",
    DatabaseType.POSTGRESQL: "postgresql://postgres:postgres@{host}:5432/{slug}",
    DatabaseType.MYSQL: "mysql://root:root@{host}:3306/{slug}",
    DatabaseType.SQLITE: "{slug}.db",
}

# gorm's MySQL driver takes a DSN, not a URL.
GO_MYSQL_DSN = "root:root@tcp({host}:3306)/{slug}?parseTime=true"

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".py": "python",
    ".go": "go",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".md": "markdown",
    ".sql": "sql",
    ".graphql": "graphql",
    ".proto": "protobuf",
    ".txt": "plaintext",
    ".mod": "go",
    ".ini": "ini",
}

LANGUAGE_BY_NAME: dict[str, str] = {
    "Dockerfile": "dockerfile",
    ".gitignore": "plaintext",
    ".env.example": "shell",
}


_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


def language_for(path: str) -> str:
    """Syntax-highlighting tag for *path*, from its file name or extension."""
    name = posixpath.basename(path)
    if name in LANGUAGE_BY_NAME:
        return LANGUAGE_BY_NAME[name]
    _, ext = posixpath.splitext(name)
    return LANGUAGE_BY_EXTENSION.get(ext, "plaintext")


# ---------------------------------------------------------------------------
# Template views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldView:
    """A field with every target-language type already resolved."""
    name: str
    type: str
    format: Optional[str]
    required: bool
    ts: str
    py: str
    go: str
    gql: str
    proto: str
    db: Optional[str]
    key: str
    py_name: str
    go_name: str
    snake: str
    constraints: dict[str, Any]


@dataclass(frozen=True)
class EndpointView:
    """Everything a template needs to know about one endpoint."""
    name: str
    method: str
    method_lower: str
    path: str
    description: str
    slug: str
    module: str
    operation: str
    operation_snake: str
    operation_pascal: str
    type_name: str
    request_type: str
    response_type: str
    hook: str
    wrapper_export: str
    wrapper_call: str
    handler: str
    route_export: str
    function_name: str
    resource: str
    param: Optional[str]
    route_path: str
    brace_route_path: str
    client_path: str
    auth: str
    guard: Optional[str]
    returns_list: bool
    has_body: bool
    status: int
    model_class: str
    table: str
    fields: tuple[FieldView, ...]
    columns: tuple[FieldView, ...]
    request_fields: tuple[FieldView, ...]
    response_fields: tuple[FieldView, ...]
    request_shape: dict[str, Any]
    response_shape: dict[str, Any]
    endpoint: Optional[EndpointDescriptor] = field(compare=False, repr=False, default=None)


@dataclass(frozen=True)
class ResourceView:
    """A model: one per distinct endpoint name, first definition wins."""
    name: str
    model_class: str
    table: str
    module: str
    columns: tuple[FieldView, ...]


def _annotate(typed: bool):
    """Return ``t()`` for templates: emits a type annotation only when typed."""
    def t(text: str) -> str:
        return text if typed else ""
    return t


# ---------------------------------------------------------------------------
# TemplateCatalog
# ---------------------------------------------------------------------------


class TemplateCatalog:
    """Pure renderers for every file kind, bound to one config and schema."""

    def __init__(
        self,
        config: GeneratorConfig,
        schema: NormalizedSchema,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.schema = schema
        self.layout = ProjectLayout(config, schema)
        self.renderer = renderer or TemplateRenderer()
        self.persistence = PERSISTENCE[config.database_type]
        self.endpoints = [self.view(ep) for ep in schema.endpoints]

    # -- Views -------------------------------------------------------------

    @property
    def family(self) -> str:
        return self.layout.family

    def field_view(self, name: str, spec: FieldSpec) -> FieldView:
        db = None
        if self.persistence is not None:
            db = persistence_type(spec, self.family, self.persistence)
        return FieldView(
            name=name,
            type=spec.type,
            format=spec.format,
            required=spec.required,
            ts=ts_type(spec),
            py=python_type(spec),
            go=go_type(spec),
            gql=graphql_type(spec),
            proto=proto_type(spec),
            db=db,
            key=name if _IDENTIFIER.match(name) else json.dumps(name),
            py_name=name if name.isidentifier() and not keyword.iskeyword(name) else (to_snake(name) or "field"),
            go_name=to_pascal(name) or "Field",
            snake=to_snake(name) or name,
            constraints=spec.constraints(),
        )

    def _fields(self, mapping: dict[str, FieldSpec]) -> tuple[FieldView, ...]:
        return tuple(self.field_view(name, spec) for name, spec in mapping.items())

    def view(self, endpoint: EndpointDescriptor) -> EndpointView:
        layout = self.layout
        auth = effective_auth(endpoint, self.config)
        fields = self._fields(endpoint.properties)
        op = operation_name(endpoint)
        return EndpointView(
            name=endpoint.name,
            method=endpoint.method.value,
            method_lower=endpoint.method.value.lower(),
            path=endpoint.path,
            description=endpoint.description or "",
            slug=endpoint_slug(endpoint),
            module=layout.module_name(endpoint),
            operation=op,
            operation_snake=to_snake(op),
            operation_pascal=to_pascal(op),
            type_name=type_name(endpoint),
            request_type=request_type_name(endpoint),
            response_type=response_type_name(endpoint),
            hook=hook_name(endpoint),
            wrapper_export=layout.wrapper_export(endpoint),
            wrapper_call=layout.wrapper_call(endpoint),
            handler=layout.handler_name(endpoint),
            route_export=layout.route_export(endpoint),
            function_name=layout.function_name(endpoint),
            resource=resource_key(endpoint),
            param=path_param(endpoint),
            route_path=route_path(endpoint, brace_params=False),
            brace_route_path=route_path(endpoint, brace_params=True),
            client_path=client_path(endpoint),
            auth=auth.value,
            guard=None if auth == AuthType.NONE else layout.auth_guard(auth).name,
            returns_list=_returns_list(endpoint),
            has_body=endpoint.has_body,
            status=endpoint.success_status,
            model_class=layout.model_class(endpoint.name),
            table=layout.table_name(endpoint.name),
            fields=fields,
            columns=tuple(f for f in fields if f.name not in ("id", "_id")),
            request_fields=self._fields(endpoint.request_fields()),
            response_fields=self._fields(endpoint.response_fields()),
            request_shape=endpoint.request.model_dump(exclude_none=True) if endpoint.request else {},
            response_shape=endpoint.response.model_dump(exclude_none=True) if endpoint.response else {},
            endpoint=endpoint,
        )

    def resources(self, endpoints: list[EndpointView] | None = None) -> list[ResourceView]:
        """Distinct models for *endpoints*, keyed by model file name."""
        seen: dict[str, ResourceView] = {}
        for ep in endpoints if endpoints is not None else self.endpoints:
            module = self.layout.resource_module_name(ep.name)
            if module in seen:
                continue
            seen[module] = ResourceView(
                name=ep.name,
                model_class=ep.model_class,
                table=ep.table,
                module=module,
                columns=ep.columns,
            )
        return list(seen.values())

    def groups(self) -> dict[str, list[EndpointView]]:
        """Endpoints grouped by resource key, first-seen order."""
        grouped: dict[str, list[EndpointView]] = {}
        for ep in self.endpoints:
            grouped.setdefault(ep.resource, []).append(ep)
        return grouped

    def auth_types(self, endpoints: list[EndpointView] | None = None) -> list[str]:
        """Effective auth types in use, excluding ``none``, first-seen order."""
        used: list[str] = []
        for ep in endpoints if endpoints is not None else self.endpoints:
            if ep.auth != AuthType.NONE.value and ep.auth not in used:
                used.append(ep.auth)
        return used

    def guards(self, endpoints: list[EndpointView] | None = None) -> list[dict[str, str]]:
        return [
            {"auth": auth, "name": self.layout.auth_guard(AuthType(auth)).name}
            for auth in self.auth_types(endpoints)
        ]

    # -- Context -----------------------------------------------------------

    def context(self, **extra: Any) -> dict[str, Any]:
        config = self.config
        ctx: dict[str, Any] = {
            "project": self.schema.name,
            "slug": project_slug(self.schema),
            "version": self.schema.version,
            "description": self.schema.description or "",
            "config": config,
            "typed": config.typed,
            "t": _annotate(config.typed),
            "pkg": posixpath.basename,
            "family": self.family,
            "frontend": config.frontend_framework.value,
            "frontend_family": self.layout.frontend_family,
            "framework": config.backend_framework.value,
            "architecture": config.architecture.value,
            "api_style": config.api_style.value,
            "http_client": config.http_client.value,
            "wrapper": config.wrapper_type.value,
            "state": config.state_management.value,
            "database": config.database_type.value,
            "persistence": self.persistence.value if self.persistence else None,
            "caching": config.caching_strategy.value,
            "auth_type": config.auth_type.value,
            "endpoints": self.endpoints,
            "ports": DEFAULT_PORTS,
            "rpc_package": to_snake(self.schema.name) or "api",
            "rpc_service": f"{to_pascal(self.schema.name) or 'Api'}Service",
            "database_url": self.database_url(),
        }
        ctx.update(extra)
        return ctx

    def _render(self, template: str, **extra: Any) -> str:
        return self.renderer.render(template, self.context(**extra))

    def database_url(self, host: str = "localhost") -> Optional[str]:
        database = self.config.database_type
        if self.family == GO and database == DatabaseType.MYSQL:
            template = GO_MYSQL_DSN
        else:
            template = DATABASE_URLS[database]
        if template is None:
            return None
        return template.format(slug=to_snake(self.schema.name) or "app", host=host)

    # -- Import helpers ----------------------------------------------------

    def _import(self, from_module: str, to_module: str, go_root: str = "") -> str:
        """Import specifier from *from_module* to *to_module* in the backend language."""
        layout = self.layout
        if self.family == PYTHON:
            if self.config.architecture == Architecture.SERVERLESS:
                return layout.python_absolute(to_module)
            return layout.python_import(from_module, to_module)
        if self.family == GO:
            return layout.go_import(to_module, go_root)
        return layout.relative_import(from_module, to_module)

    def data_imports(
        self,
        module: str,
        ep: EndpointView,
        root: str,
        go_root: str = "",
    ) -> dict[str, Optional[str]]:
        """Imports the data-access function for *ep* needs when placed in *module*."""
        layout = self.layout
        imports: dict[str, Optional[str]] = {"model": None, "db": None, "cache": None}
        if self.persistence in (Persistence.DOCUMENT, Persistence.RELATIONAL):
            imports["model"] = self._import(module, layout.model_module(ep.name, root), go_root)
        # Document models in Node and Python own their connection.
        needs_db = self.persistence in (Persistence.RELATIONAL, Persistence.SQL) or (
            self.persistence == Persistence.DOCUMENT and self.family == GO
        )
        if needs_db:
            imports["db"] = self._import(module, layout.db_module(root), go_root)
        if self.config.caching_strategy != CachingStrategy.NONE:
            imports["cache"] = self._import(module, layout.cache_module(root), go_root)
        return imports

    # =====================================================================
    # Root files
    # =====================================================================

    def render_manifest(self) -> str:
        """Root ``package.json``: frontend packages plus any Node backend at the root."""
        config = self.config
        dependencies: dict[str, str] = {}
        dependencies.update(FRONTEND_PACKAGES[config.frontend_framework.value])
        dependencies.update(self._client_packages())
        dependencies.update(STATE_PACKAGES[config.state_management])
        library = self._wrapper_library()
        if library:
            dependencies[library] = LIBRARY_VERSIONS[library]

        dev_dependencies: dict[str, str] = {"vite": "^5.4.2"}
        if config.typed:
            dev_dependencies["typescript"] = NODE_TYPED_DEV_PACKAGES["typescript"]
        scripts = {"dev": "vite", "build": "vite build"}
        if self.family == NODE and config.architecture == Architecture.MONOLITH:
            dependencies.update(self.node_backend_packages(self.endpoints))
            dev_dependencies.update(self._node_dev_packages(dependencies))
            entry = self.layout.file(self.layout.entry_module)
            scripts["dev:server"] = f"tsx watch {entry}"
            scripts["start"] = f"tsx {entry}"
        if config.architecture == Architecture.SERVERLESS:
            if self.family == NODE:
                dependencies.update(self.node_backend_packages(self.endpoints))
                dev_dependencies.update(self._node_dev_packages(dependencies, serverless=True))
            else:
                dev_dependencies.update(NODE_SERVERLESS_DEV_PACKAGES)
            scripts["deploy"] = "serverless deploy"
        if config.generate_tests and self.family == NODE and config.architecture != Architecture.MICROSERVICES:
            scripts["test"] = "vitest run"

        manifest = {
            "name": project_slug(self.schema),
            "version": self.schema.version,
            "private": True,
            "description": self.schema.description or "",
            "type": "module",
            "scripts": scripts,
            "dependencies": dict(sorted(dependencies.items())),
            "devDependencies": dict(sorted(dev_dependencies.items())),
        }
        return json.dumps(manifest, indent=2) + "\n"

    def render_compiler_config(self) -> str:
        """``tsconfig.json`` or ``jsconfig.json``."""
        family = self.layout.frontend_family
        options: dict[str, Any] = {
            "target": "ES2022",
            "module": "ESNext",
            "moduleResolution": "Bundler",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "baseUrl": ".",
        }
        if family == "react":
            options["jsx"] = "react-jsx"
        elif family == "vue":
            options["jsx"] = "preserve"
        if self.config.backend_framework == BackendFramework.NESTJS:
            options["experimentalDecorators"] = True
            options["emitDecoratorMetadata"] = True
        if self.config.typed:
            options["noEmit"] = True
        else:
            options["checkJs"] = False
        document = {"compilerOptions": options, "include": ["src/**/*"]}
        return json.dumps(document, indent=2) + "\n"

    def compiler_config_path(self) -> str:
        return "tsconfig.json" if self.config.typed else "jsconfig.json"

    def render_env(self) -> str:
        services = []
        if self.config.architecture == Architecture.MICROSERVICES:
            services = self.gateway_services()
        return self._render("root/env.j2", guards=self.guards(), services=services)

    def render_readme(self) -> str:
        return self._render("root/README.md.j2", groups=self.groups())

    def render_gitignore(self) -> str:
        return self._render("root/gitignore.j2")

    # =====================================================================
    # Frontend
    # =====================================================================

    def _client_packages(self) -> dict[str, str]:
        style = self.config.api_style
        if style == ApiStyle.REST:
            return dict(HTTP_CLIENT_PACKAGES[self.config.http_client])
        return dict(API_STYLE_CLIENT_PACKAGES[style.value])

    def _wrapper_library(self) -> Optional[str]:
        wrapper = self.config.wrapper_type
        family = self.layout.frontend_family
        if wrapper == WrapperType.REACT_QUERY:
            return QUERY_LIBRARY[family]
        if wrapper == WrapperType.SWR:
            return SWR_LIBRARY[family]
        return None

    def render_client(self) -> str:
        """Transport module every wrapper imports ``request`` from."""
        return self._render(CLIENT_TEMPLATES[self.config.api_style])

    def render_wrapper(self, ep: EndpointView) -> str:
        layout = self.layout
        endpoint = self._descriptor(ep)
        module = layout.wrapper_module(endpoint)
        return self._render(
            WRAPPER_TEMPLATES[self.config.wrapper_type],
            ep=ep,
            library=self._wrapper_library(),
            client_import=layout.relative_import(module, layout.client_module),
            types_import=layout.relative_import(module, layout.type_module(endpoint)),
        )

    def render_types(self, ep: EndpointView) -> str:
        return self._render("frontend/types.j2", ep=ep)

    def render_hook(self, ep: EndpointView) -> str:
        layout = self.layout
        endpoint = self._descriptor(ep)
        module = layout.hook_module(endpoint)
        return self._render(
            "frontend/hook.j2",
            ep=ep,
            wrapper_import=layout.relative_import(module, layout.wrapper_module(endpoint)),
            types_import=layout.relative_import(module, layout.type_module(endpoint)),
        )

    def render_store(self) -> Optional[str]:
        template = STORE_TEMPLATES[self.config.state_management]
        if template is None:
            return None
        layout = self.layout
        store_type_imports = [
            (ep, layout.relative_import(layout.store_module, layout.type_module(self._descriptor(ep))))
            for ep in self.endpoints
        ]
        return self._render(template, store_type_imports=store_type_imports)

    # =====================================================================
    # Backend
    # =====================================================================

    def node_backend_packages(self, endpoints: list[EndpointView]) -> dict[str, str]:
        config = self.config
        packages: dict[str, str] = {}
        if config.architecture == Architecture.SERVERLESS:
            packages.update(NODE_SERVERLESS_PACKAGES)
        else:
            packages.update(NODE_BACKEND_PACKAGES.get(config.backend_framework, {}))
        packages.update(NODE_DATABASE_PACKAGES[config.database_type])
        packages.update(NODE_CACHE_PACKAGES[config.caching_strategy])
        for auth in self.auth_types(endpoints):
            packages.update(NODE_AUTH_PACKAGES[AuthType(auth)])
        return packages

    def _node_dev_packages(self, runtime: dict[str, str], serverless: bool = False) -> dict[str, str]:
        """Tooling for a Node backend whose runtime packages are *runtime*."""
        config = self.config
        dev: dict[str, str] = {}
        used = set(runtime)
        if serverless:
            dev.update(NODE_SERVERLESS_DEV_PACKAGES)
            used.add("serverless")
        else:
            dev["tsx"] = "^4.19.0"
        if config.generate_tests:
            dev["vitest"] = NODE_TEST_PACKAGES["vitest"]
            if not serverless and config.backend_framework != BackendFramework.FASTIFY:
                dev["supertest"] = NODE_TEST_PACKAGES["supertest"]
                used.add("supertest")
            if config.backend_framework == BackendFramework.NESTJS and not serverless:
                dev["@nestjs/testing"] = NODE_BACKEND_PACKAGES[BackendFramework.NESTJS]["@nestjs/core"]
        if config.typed:
            dev.update(NODE_TYPED_DEV_PACKAGES)
            for package in sorted(used):
                dev.update(NODE_TYPE_PACKAGES.get(package, {}))
        return dev

    def render_entry(
        self,
        module: str,
        endpoints: list[EndpointView],
        route_modules: list[str],
        root: str,
        port: int,
        go_root: str = "",
        service: str = "",
    ) -> str:
        """Server bootstrap registering the route of every endpoint in *endpoints*."""
        routes = [
            {"ep": ep, "import": self._import(module, route_module, go_root),
             "package": posixpath.basename(posixpath.dirname(route_module))}
            for ep, route_module in zip(endpoints, route_modules)
        ]
        db_import = None
        if self.persistence is not None:
            db_import = self._import(module, self.layout.db_module(root), go_root)
        return self._render(
            ENTRY_TEMPLATES[self.config.backend_framework],
            routes=routes,
            port=port,
            db_import=db_import,
            service=service,
            route_package=routes[0]["package"] if routes else "",
        )

    def render_route(
        self,
        ep: EndpointView,
        module: str,
        root: str,
        go_root: str = "",
        service_module: str | None = None,
    ) -> str:
        """Route/controller file.

        With *service_module* the data-access function is imported from that
        module; otherwise it is defined inline.
        """
        layout = self.layout
        auth_import = None
        if ep.guard is not None:
            auth_import = self._import(module, layout.auth_module(root), go_root)
        service_import = None
        handler_ref = ep.handler
        if service_module is not None:
            service_import = self._import(module, service_module, go_root)
            if self.family == GO:
                handler_ref = f"{layout.go_package(service_module)}.{ep.handler}"
        return self._render(
            ROUTE_TEMPLATES[self.config.backend_framework],
            ep=ep,
            package=layout.go_package(module),
            auth_import=auth_import,
            service_import=service_import,
            handler_ref=handler_ref,
            imports=self.data_imports(module, ep, root, go_root) if service_module is None else {},
        )

    def render_service(self, ep: EndpointView, module: str, root: str, go_root: str = "") -> str:
        """Microservice business-logic module holding the data-access function."""
        return self._render(
            SERVICE_TEMPLATES[self.family],
            ep=ep,
            package=self.layout.go_package(module),
            imports=self.data_imports(module, ep, root, go_root),
        )

    def render_auth(self, module: str, endpoints: list[EndpointView]) -> str:
        if self.config.architecture == Architecture.SERVERLESS:
            template = FUNCTION_AUTH_TEMPLATES[self.family]
        else:
            template = AUTH_TEMPLATES[self.config.backend_framework]
        return self._render(
            template,
            guards=self.guards(endpoints),
            package=self.layout.go_package(module),
        )

    def render_db(self, module: str, resources: list[ResourceView], root: str, go_root: str = "") -> str:
        layout = self.layout
        models_dir = f"{root}/models"
        if go_root:
            models_dir = posixpath.relpath(models_dir, go_root)
        return self._render(
            DB_TEMPLATES[self.family],
            resources=resources,
            models=[
                {"resource": r, "import": self._import(module, layout.model_module(r.name, root), go_root)}
                for r in resources
            ],
            package=layout.go_package(module),
            models_dir=models_dir,
        )

    def render_cache(self, module: str) -> str:
        key = (self.family, self.config.caching_strategy)
        return self._render(CACHE_TEMPLATES[key], package=self.layout.go_package(module))

    def render_model(self, resource: ResourceView, module: str, root: str, go_root: str = "") -> str:
        if self.persistence == Persistence.SQL:
            return self._render(SQL_MODEL_TEMPLATE, resource=resource)
        template = MODEL_TEMPLATES[(self.family, self.persistence)]
        return self._render(
            template,
            resource=resource,
            package=self.layout.go_package(module),
            db_import=self._import(module, self.layout.db_module(root), go_root),
        )

    def render_backend_manifest(
        self,
        endpoints: list[EndpointView],
        name: str,
        go_root: str = "",
        entry: str = "",
    ) -> str:
        """``requirements.txt``, ``go.mod`` or a service ``package.json``."""
        if self.family == PYTHON:
            return self._requirements(endpoints)
        if self.family == GO:
            return self._go_mod(endpoints, go_root)
        packages = self.node_backend_packages(endpoints)
        scripts = {"dev": f"tsx watch {entry}", "start": f"tsx {entry}"}
        if self.config.generate_tests:
            scripts["test"] = "vitest run"
        manifest = {
            "name": name,
            "version": self.schema.version,
            "private": True,
            "type": "module",
            "scripts": scripts,
            "dependencies": dict(sorted(packages.items())),
            "devDependencies": dict(sorted(self._node_dev_packages(packages).items())),
        }
        return json.dumps(manifest, indent=2) + "\n"

    def _requirements(self, endpoints: list[EndpointView]) -> str:
        config = self.config
        lines: list[str] = []
        if config.architecture == Architecture.SERVERLESS:
            lines.append("pydantic>=2.8")
        else:
            lines.extend(PYTHON_PACKAGES["base"])
        lines.extend(PYTHON_PACKAGES.get(config.database_type.value, []))
        lines.extend(PYTHON_PACKAGES.get(config.caching_strategy.value, []))
        for auth in self.auth_types(endpoints):
            lines.extend(PYTHON_PACKAGES.get(auth, []))
        if config.generate_tests:
            lines.extend(PYTHON_PACKAGES["tests"])
        unique = list(dict.fromkeys(lines))
        return "\n".join(unique) + "\n"

    def _go_mod(self, endpoints: list[EndpointView], go_root: str) -> str:
        config = self.config
        requires: list[str] = []
        if config.architecture == Architecture.SERVERLESS:
            requires.extend(GO_MODULES["serverless"])
        else:
            requires.extend(GO_MODULES[config.backend_framework.value])
        requires.extend(GO_MODULES.get(config.database_type.value, []))
        requires.extend(GO_MODULES.get(config.caching_strategy.value, []))
        for auth in self.auth_types(endpoints):
            requires.extend(GO_MODULES.get(auth, []))
        unique = list(dict.fromkeys(requires))
        lines = [f"module {self.layout.go_module_path(go_root)}", "", "go 1.22", ""]
        if unique:
            lines.append("require (")
            lines.extend(f"\t{item}" for item in unique)
            lines.append(")")
        return "\n".join(lines) + "\n"

    # -- Microservices gateway ---------------------------------------------

    def gateway_services(self) -> list[dict[str, Any]]:
        """One proxy target per microservice, with the route patterns it owns."""
        services = []
        for index, (resource, endpoints) in enumerate(self.groups().items()):
            patterns = sorted({_route_pattern(ep.route_path) for ep in endpoints})
            services.append({
                "resource": resource,
                "port": DEFAULT_PORTS["service_base"] + index,
                "env": f"{to_snake(resource).upper()}_SERVICE_URL",
                "patterns": patterns,
            })
        return services

    def render_gateway(self) -> str:
        return self._render("backend/gateway/server.j2", services=self.gateway_services())

    def render_gateway_manifest(self) -> str:
        dependencies = {"express": "^4.19.2", "http-proxy-middleware": "^3.0.0"}
        dev: dict[str, str] = {"tsx": "^4.19.0"}
        if self.config.typed:
            dev.update({"typescript": "^5.5.4", "@types/express": "^4.17.21"})
        entry = self.layout.file(self.gateway_module(), self.layout.script_ext)
        manifest = {
            "name": f"{project_slug(self.schema)}-gateway",
            "version": self.schema.version,
            "private": True,
            "type": "module",
            "scripts": {"start": f"tsx {posixpath.relpath(entry, self.layout.gateway_root())}"},
            "dependencies": dependencies,
            "devDependencies": dev,
        }
        return json.dumps(manifest, indent=2) + "\n"

    def gateway_module(self) -> str:
        return f"{self.layout.gateway_root()}/src/server"

    def service_port(self, resource: str) -> int:
        return DEFAULT_PORTS["service_base"] + list(self.groups()).index(resource)

    # -- Serverless --------------------------------------------------------

    def render_function(self, ep: EndpointView, module: str) -> str:
        layout = self.layout
        root = layout.SHARED_ROOT
        endpoint = self._descriptor(ep)
        auth_import = None
        if ep.guard is not None:
            auth_import = self._import(module, layout.auth_module(root))
        schema_import = None
        if self.family == NODE and ep.has_body:
            schema_import = layout.relative_import(module, layout.function_schema_module(endpoint))
        db_import = None
        if self.persistence is not None:
            db_import = self._import(module, layout.db_module(root))
        return self._render(
            FUNCTION_TEMPLATES[self.family],
            ep=ep,
            auth_import=auth_import,
            schema_import=schema_import,
            db_import=db_import,
            imports=self.data_imports(module, ep, root),
        )

    def render_function_schema(self, ep: EndpointView) -> str:
        return self._render("backend/node/function_schema.j2", ep=ep)

    def render_serverless_config(self) -> str:
        layout = self.layout
        functions = []
        for ep in self.endpoints:
            endpoint = self._descriptor(ep)
            module = layout.function_module(endpoint)
            if self.family == GO:
                handler = f"bin/{ep.module}/bootstrap"
            else:
                handler = f"{module}.handler"
            functions.append({"ep": ep, "handler": handler, "dir": layout.function_dir(endpoint)})
        return self._render("infra/serverless.yml.j2", functions=functions, guards=self.guards())

    # =====================================================================
    # API contract
    # =====================================================================

    def contract(self) -> Optional[tuple[str, str]]:
        """(path, content) of the api-style contract file, if the style has one."""
        entry = CONTRACT_TEMPLATES[self.config.api_style]
        if entry is None:
            return None
        path, template = entry
        package = to_snake(self.schema.name) or "api"
        return path.format(name=package), self._render(template)

    # =====================================================================
    # Tests and docs
    # =====================================================================

    def render_test(
        self,
        ep: EndpointView,
        module: str,
        target: str,
        root: str = "",
        go_root: str = "",
    ) -> str:
        """Test stub for *ep*; *target* is the app, router or handler module it exercises.

        Python tests import *target* absolutely, relative to *root*, the
        directory pytest runs from.
        """
        layout = self.layout
        if self.config.architecture == Architecture.SERVERLESS:
            template = FUNCTION_TEST_TEMPLATES[self.family]
        else:
            template = TEST_TEMPLATES[self.config.backend_framework]
        if self.family == PYTHON:
            target_import = layout.python_absolute(posixpath.relpath(target, root) if root else target)
        elif self.family == GO:
            target_import = layout.go_import(target, go_root)
        else:
            target_import = layout.relative_import(module, target)
        sample = {f.name: _sample_value(f) for f in ep.request_fields if f.name not in ("id", "_id")}
        return self._render(
            template,
            ep=ep,
            target_import=target_import,
            target_package=layout.go_package(target),
            sample=sample,
            sample_path=ep.route_path.replace(f":{ep.param}", "1") if ep.param else ep.route_path,
        )

    def render_pytest_config(self) -> str:
        return self._render("tests/pytest.ini.j2")

    def render_api_docs(self) -> str:
        return self._render("docs/API.md.j2")

    def render_architecture_docs(self, files: list[str]) -> str:
        return self._render("docs/ARCHITECTURE.md.j2", groups=self.groups(), files=files)

    # -- Internal ----------------------------------------------------------

    @staticmethod
    def _descriptor(ep: EndpointView) -> EndpointDescriptor:
        return ep.endpoint


_SAMPLES: dict[str, Any] = {
    "string": "example",
    "integer": 1,
    "number": 1.5,
    "boolean": True,
    "array": [],
    "object": {},
}


def _sample_value(spec: FieldView) -> Any:
    if spec.type == "string" and spec.format in ("date", "date-time"):
        return "2024-01-01T00:00:00Z"
    return _SAMPLES.get(spec.type.lower(), "example")


def _returns_list(endpoint: EndpointDescriptor) -> bool:
    """Array responses, and collection GETs without an explicit response shape."""
    if endpoint.response is not None:
        return endpoint.returns_list
    return endpoint.method.value == "GET" and path_param(endpoint) is None


def _route_pattern(path: str) -> str:
    """Anchored regex source matching *path*, with ``:param`` segments as wildcards."""
    segments = [
        "[^/]+" if segment.startswith(":") else re.escape(segment)
        for segment in path.strip("/").split("/")
        if segment
    ]
    return "^/" + "/".join(segments) + "/?$"
