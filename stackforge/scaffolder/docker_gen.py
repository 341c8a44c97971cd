"""Dockerfile and Docker Compose generation for the emitted project.

Uses the Jinja2 templates under ``docker/`` to produce a Dockerfile per
deployable unit and a single ``docker-compose.yml`` wiring those units to
their datastore and cache.  Like the rest of the catalog, rendering returns
text; nothing is written here.
"""

from __future__ import annotations

import posixpath
from typing import Any, Optional

from stackforge.config import Architecture, CachingStrategy, DatabaseType

from .catalog import DEFAULT_PORTS, TemplateCatalog
from .naming import GO, NODE, PYTHON, project_slug, to_snake


# Datastore container per database; SQLite runs in-process and gets none.
DATASTORES: dict[DatabaseType, Optional[dict[str, Any]]] = {
    DatabaseType.NONE: None,
    DatabaseType.SQLITE: None,
    DatabaseType.MONGODB: {
        "image": "mongo:7",
        "port": 27017,
        "volume": "/data/db",
        "environment": {},
    },
    DatabaseType.POSTGRESQL: {
        "image": "postgres:16-alpine",
        "port": 5432,
        "volume": "/var/lib/postgresql/data",
        "environment": {
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "postgres",
            "POSTGRES_DB": "{name}",
        },
    },
    DatabaseType.MYSQL: {
        "image": "mysql:8.4",
        "port": 3306,
        "volume": "/var/lib/mysql",
        "environment": {
            "MYSQL_ROOT_PASSWORD": "root",
            "MYSQL_DATABASE": "{name}",
        },
    },
}

# Dependency manifest copied before the sources, per backend family.
MANIFESTS: dict[str, str] = {
    NODE: "package.json",
    PYTHON: "requirements.txt",
    GO: "go.mod",
}

_DOCKERFILE_TEMPLATE = "docker/Dockerfile.j2"
_COMPOSE_TEMPLATE = "docker/compose.yml.j2"


class DockerGenerator:
    """Renders Dockerfiles and the Compose file for one catalog."""

    def __init__(self, catalog: TemplateCatalog) -> None:
        self.catalog = catalog
        self.renderer = catalog.renderer

    # -- Dockerfiles -------------------------------------------------------

    def render_dockerfile(
        self,
        entry: str,
        port: int,
        family: str | None = None,
        root: str = "",
    ) -> str:
        """Dockerfile for a server whose entry module is *entry*.

        *root* is the build context; *entry* is made relative to it.
        """
        family = family or self.catalog.family
        relative = posixpath.relpath(entry, root) if root else entry
        if family == PYTHON:
            command = relative.replace("/", ".") + ":app"
        elif family == GO:
            command = "./" + posixpath.dirname(relative)
        else:
            command = relative + self.catalog.layout.script_ext
        sqlite = self.catalog.config.database_type == DatabaseType.SQLITE
        models_dir = ""
        if sqlite:
            models_dir = posixpath.join(posixpath.dirname(relative), "models")
        return self.renderer.render(
            _DOCKERFILE_TEMPLATE,
            self.catalog.context(
                kind="server",
                docker_family=family,
                manifest=MANIFESTS[family],
                command=command,
                port=port,
                sqlite=sqlite,
                models_dir=models_dir,
            ),
        )

    def render_deployer_dockerfile(self) -> str:
        """Dockerfile for the serverless deploy toolchain."""
        return self.renderer.render(
            _DOCKERFILE_TEMPLATE,
            self.catalog.context(
                kind="deployer",
                docker_family=self.catalog.family,
                manifest=MANIFESTS[self.catalog.family],
            ),
        )

    # -- Compose -----------------------------------------------------------

    def apps(self) -> list[dict[str, Any]]:
        """Compose services built from this project, per architecture."""
        catalog = self.catalog
        architecture = catalog.config.architecture
        if architecture == Architecture.MONOLITH:
            return [{"name": "app", "build": ".", "port": DEFAULT_PORTS["backend"]}]
        if architecture == Architecture.SERVERLESS:
            return [{"name": "deploy", "build": ".", "port": None, "profile": "deploy"}]
        apps: list[dict[str, Any]] = [{
            "name": "gateway",
            "build": catalog.layout.gateway_root(),
            "port": DEFAULT_PORTS["gateway"],
            "links": {s["env"]: f"http://{s['resource']}:{s['port']}" for s in catalog.gateway_services()},
        }]
        for service in catalog.gateway_services():
            apps.append({
                "name": service["resource"],
                "build": catalog.layout.service_root(service["resource"]),
                "port": service["port"],
            })
        return apps

    def render_compose(self) -> str:
        config = self.catalog.config
        name = to_snake(self.catalog.schema.name) or "app"
        datastore = DATASTORES[config.database_type]
        if datastore is not None:
            datastore = dict(datastore)
            datastore["environment"] = {
                key: value.format(name=name) for key, value in datastore["environment"].items()
            }
        return self.renderer.render(
            _COMPOSE_TEMPLATE,
            self.catalog.context(
                apps=self.apps(),
                datastore=datastore,
                redis=config.caching_strategy == CachingStrategy.REDIS,
                docker_database_url=self.catalog.database_url(host="db"),
                compose_name=project_slug(self.catalog.schema),
            ),
        )
