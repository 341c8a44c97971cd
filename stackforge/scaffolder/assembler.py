"""Project assembly orchestrator.

Takes a ``NormalizedSchema`` (or the raw decoded document) and a
``GeneratorConfig`` and produces the complete, ordered list of generated
files.  Emission order is fixed:

1. common root files
2. frontend transport, per-endpoint wrappers/types/hooks, store
3. backend files for the selected architecture, then the API contract
4. tests, 5. docs, 6. Docker

Nothing is written to disk; see ``stackforge.exporter`` for that.
"""

from __future__ import annotations

import posixpath
from typing import Any, Callable

from stackforge.config import Architecture, CachingStrategy, GeneratorConfig
from stackforge.errors import PathCollisionError
from stackforge.exporter import check_archive_path
from stackforge.parser.models import NormalizedSchema
from stackforge.parser.normalize import to_normalized_schema

from .catalog import DEFAULT_PORTS, EndpointView, TemplateCatalog, language_for
from .docker_gen import DockerGenerator
from .models import GeneratedFile
from .naming import GO, NODE, PYTHON, endpoint_slug, project_slug
from .templates import TemplateRenderer
from .type_maps import Persistence


# ---------------------------------------------------------------------------
# File collection
# ---------------------------------------------------------------------------


class _FileSet:
    """Ordered file collector.

    Refuses a second file at the same path and any path that could not be
    written as a relative archive entry.
    """

    def __init__(self) -> None:
        self._files: list[GeneratedFile] = []
        self._paths: set[str] = set()

    def add(self, path: str, content: str) -> None:
        check_archive_path(path)
        if path in self._paths:
            raise PathCollisionError([path], "Two generated files share a path")
        self._paths.add(path)
        self._files.append(GeneratedFile(path=path, content=content, language=language_for(path)))

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self._files]

    @property
    def files(self) -> list[GeneratedFile]:
        return list(self._files)


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class ProjectAssembler:
    """Builds every file of one project from a schema and a configuration."""

    def __init__(
        self,
        schema: NormalizedSchema,
        config: GeneratorConfig,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.schema = schema
        self.config = config
        self.catalog = TemplateCatalog(config, schema, renderer)
        self.layout = self.catalog.layout
        self.docker = DockerGenerator(self.catalog)

    # -- Public API --------------------------------------------------------

    def assemble(self) -> list[GeneratedFile]:
        """Return the full ordered file list.

        Raises:
            PathCollisionError: If two endpoints share a slug, or two files
                would land on the same path.
        """
        self._check_slugs()
        out = _FileSet()

        # 1. Root
        self._emit_root(out)

        # 2. Frontend
        self._emit_frontend(out)

        # 3. Backend for the chosen architecture, then the API contract
        self._BACKENDS[self.config.architecture](self, out)
        contract = self.catalog.contract()
        if contract is not None:
            out.add(*contract)

        # 4. Tests
        if self.config.generate_tests:
            self._emit_tests(out)

        # 5. Docs
        if self.config.generate_docs:
            self._emit_docs(out)

        # 6. Docker
        if self.config.generate_docker:
            self._emit_docker(out)

        return out.files

    # -- Checks ------------------------------------------------------------

    def _check_slugs(self) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for endpoint in self.schema.endpoints:
            slug = endpoint_slug(endpoint)
            if slug in seen and slug not in duplicates:
                duplicates.append(slug)
            seen.add(slug)
        if duplicates:
            raise PathCollisionError(duplicates, "Endpoints share a slug")

    # -- Root and frontend -------------------------------------------------

    def _emit_root(self, out: _FileSet) -> None:
        catalog = self.catalog
        out.add("package.json", catalog.render_manifest())
        out.add(catalog.compiler_config_path(), catalog.render_compiler_config())
        out.add(".env.example", catalog.render_env())
        out.add("README.md", catalog.render_readme())
        out.add(".gitignore", catalog.render_gitignore())

    def _emit_frontend(self, out: _FileSet) -> None:
        catalog, layout = self.catalog, self.layout
        ext = layout.script_ext
        out.add(layout.file(layout.client_module, ext), catalog.render_client())
        for ep in catalog.endpoints:
            endpoint = ep.endpoint
            out.add(layout.file(layout.wrapper_module(endpoint), layout.wrapper_ext()), catalog.render_wrapper(ep))
            out.add(layout.file(layout.type_module(endpoint), ext), catalog.render_types(ep))
            if layout.needs_hook():
                out.add(layout.file(layout.hook_module(endpoint), ext), catalog.render_hook(ep))
        store = catalog.render_store()
        if store is not None:
            out.add(layout.file(layout.store_module, ext), store)

    # -- Backends ----------------------------------------------------------

    def _emit_monolith(self, out: _FileSet) -> None:
        catalog, layout = self.catalog, self.layout
        root = layout.SERVER_ROOT
        endpoints = catalog.endpoints
        route_modules = [layout.route_module(ep.endpoint, root) for ep in endpoints]

        entry = layout.entry_module
        out.add(
            layout.file(entry),
            catalog.render_entry(entry, endpoints, route_modules, root, DEFAULT_PORTS["backend"]),
        )
        for ep, module in zip(endpoints, route_modules):
            out.add(layout.file(module), catalog.render_route(ep, module, root))
        self._emit_shared(out, root, endpoints)
        if self.catalog.family != NODE:
            out.add(self._manifest_name(), catalog.render_backend_manifest(endpoints, project_slug(self.schema)))

    def _emit_microservices(self, out: _FileSet) -> None:
        catalog, layout = self.catalog, self.layout
        gateway_root = layout.gateway_root()
        out.add(f"{gateway_root}/package.json", catalog.render_gateway_manifest())
        out.add(layout.file(catalog.gateway_module(), layout.script_ext), catalog.render_gateway())

        for resource, endpoints in catalog.groups().items():
            service_root = layout.service_root(resource)
            source_root = layout.service_source_root(resource)
            go_root = service_root if catalog.family == GO else ""
            port = catalog.service_port(resource)
            entry = layout.service_entry_module(resource)

            out.add(
                f"{service_root}/{self._manifest_name()}",
                catalog.render_backend_manifest(
                    endpoints,
                    f"{project_slug(self.schema)}-{resource}",
                    go_root=go_root,
                    entry=posixpath.relpath(layout.file(entry), service_root),
                ),
            )
            out.add(f"{service_root}/Dockerfile", self.docker.render_dockerfile(entry, port, root=service_root))

            controllers = [layout.controller_module(ep.endpoint, resource) for ep in endpoints]
            out.add(
                layout.file(entry),
                catalog.render_entry(entry, endpoints, controllers, source_root, port, go_root, service=resource),
            )
            for ep, controller in zip(endpoints, controllers):
                service_module = layout.service_module(ep.endpoint, resource)
                out.add(
                    layout.file(controller),
                    catalog.render_route(ep, controller, source_root, go_root, service_module=service_module),
                )
                out.add(
                    layout.file(service_module),
                    catalog.render_service(ep, service_module, source_root, go_root),
                )
            self._emit_shared(out, source_root, endpoints, go_root)

    def _emit_serverless(self, out: _FileSet) -> None:
        catalog, layout = self.catalog, self.layout
        root = layout.SHARED_ROOT
        for ep in catalog.endpoints:
            module = layout.function_module(ep.endpoint)
            out.add(layout.file(module), catalog.render_function(ep, module))
            if catalog.family == NODE and ep.has_body:
                schema_module = layout.function_schema_module(ep.endpoint)
                out.add(layout.file(schema_module), catalog.render_function_schema(ep))
        self._emit_shared(out, root, catalog.endpoints)
        out.add("serverless.yml", catalog.render_serverless_config())
        if catalog.family != NODE:
            out.add(self._manifest_name(), catalog.render_backend_manifest(catalog.endpoints, project_slug(self.schema)))

    _BACKENDS: dict[Architecture, Callable[[ProjectAssembler, _FileSet], None]] = {
        Architecture.MONOLITH: _emit_monolith,
        Architecture.MICROSERVICES: _emit_microservices,
        Architecture.SERVERLESS: _emit_serverless,
    }

    def _emit_shared(
        self,
        out: _FileSet,
        root: str,
        endpoints: list[EndpointView],
        go_root: str = "",
    ) -> None:
        """Auth middleware, db connection, cache and models below *root*."""
        catalog, layout = self.catalog, self.layout
        if catalog.guards(endpoints):
            module = layout.auth_module(root)
            out.add(layout.file(module), catalog.render_auth(module, endpoints))
        resources = catalog.resources(endpoints)
        if catalog.persistence is not None:
            module = layout.db_module(root)
            out.add(layout.file(module), catalog.render_db(module, resources, root, go_root))
        if self.config.caching_strategy != CachingStrategy.NONE:
            module = layout.cache_module(root)
            out.add(layout.file(module), catalog.render_cache(module))
        if catalog.persistence is None:
            return
        sql = catalog.persistence == Persistence.SQL
        for resource in resources:
            module = layout.model_module(resource.name, root)
            out.add(
                layout.model_file(resource.name, root, sql=sql),
                catalog.render_model(resource, module, root, go_root),
            )

    def _manifest_name(self) -> str:
        return {NODE: "package.json", PYTHON: "requirements.txt", GO: "go.mod"}[self.catalog.family]

    # -- Tests, docs, Docker -----------------------------------------------

    def _test_target(self, ep: EndpointView) -> dict[str, Any]:
        """What the test for *ep* exercises, and where it runs from."""
        layout, family = self.layout, self.catalog.family
        architecture = self.config.architecture
        endpoint = ep.endpoint
        if architecture == Architecture.SERVERLESS:
            return {"target": layout.function_module(endpoint), "root": "", "go_root": ""}
        if architecture == Architecture.MICROSERVICES:
            service_root = layout.service_root(ep.resource)
            if family == GO:
                target = layout.controller_module(endpoint, ep.resource)
            else:
                target = layout.service_entry_module(ep.resource)
            return {
                "target": target,
                "root": service_root,
                "go_root": service_root if family == GO else "",
            }
        target = layout.route_module(endpoint) if family == GO else layout.entry_module
        return {"target": target, "root": "", "go_root": ""}

    def _emit_tests(self, out: _FileSet) -> None:
        catalog, layout = self.catalog, self.layout
        pytest_roots: list[str] = []
        for ep in catalog.endpoints:
            target = self._test_target(ep)
            root = target["root"]
            path = layout.test_file(ep.endpoint, root)
            out.add(
                path,
                catalog.render_test(ep, path, target["target"], root=root, go_root=target["go_root"]),
            )
            if catalog.family == PYTHON and root not in pytest_roots:
                pytest_roots.append(root)
        for root in pytest_roots:
            out.add(posixpath.join(root, "pytest.ini") if root else "pytest.ini", catalog.render_pytest_config())

    def _emit_docs(self, out: _FileSet) -> None:
        catalog = self.catalog
        files = out.paths
        out.add("docs/API.md", catalog.render_api_docs())
        out.add("docs/ARCHITECTURE.md", catalog.render_architecture_docs(files))

    def _emit_docker(self, out: _FileSet) -> None:
        layout = self.layout
        architecture = self.config.architecture
        if architecture == Architecture.MONOLITH:
            out.add("Dockerfile", self.docker.render_dockerfile(layout.entry_module, DEFAULT_PORTS["backend"]))
        elif architecture == Architecture.MICROSERVICES:
            gateway_root = layout.gateway_root()
            out.add(
                f"{gateway_root}/Dockerfile",
                self.docker.render_dockerfile(
                    self.catalog.gateway_module(),
                    DEFAULT_PORTS["gateway"],
                    family=NODE,
                    root=gateway_root,
                ),
            )
        else:
            out.add("Dockerfile", self.docker.render_deployer_dockerfile())
        out.add("docker-compose.yml", self.docker.render_compose())


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------


def assemble(
    schema: NormalizedSchema | dict[str, Any],
    config: GeneratorConfig,
    renderer: TemplateRenderer | None = None,
) -> list[GeneratedFile]:
    """Assemble the file list for *schema*.

    A plain decoded document is normalized first, so a document missing its
    endpoints raises ``SchemaShapeError`` before anything is rendered.
    """
    if not isinstance(schema, NormalizedSchema):
        schema = to_normalized_schema(schema)
    return ProjectAssembler(schema, config, renderer).assemble()
