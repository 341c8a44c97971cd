"""Tests for derived names and the project layout (stackforge.scaffolder.naming).

Covers:
- Case conversion helpers
- Endpoint-level names (slug, operation, types, hooks)
- Path parameters, resource keys and route paths
- Auth precedence
- ProjectLayout module paths and import specifiers per backend family
"""

from __future__ import annotations

from typing import Any

import pytest

from stackforge.config import (
    Architecture,
    AuthType,
    BackendFramework,
    GeneratorConfig,
    WrapperType,
)
from stackforge.parser.models import EndpointDescriptor, NormalizedSchema
from stackforge.scaffolder.naming import (
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
    to_camel,
    to_kebab,
    to_pascal,
    to_snake,
)

pytestmark = pytest.mark.unit


def _endpoint(**overrides: Any) -> EndpointDescriptor:
    data = {"name": "User", "path": "/users", "method": "GET", "properties": {}}
    data.update(overrides)
    return EndpointDescriptor.model_validate(data)


def _schema(*endpoints: EndpointDescriptor, name: str = "Shop API") -> NormalizedSchema:
    return NormalizedSchema(name=name, endpoints=list(endpoints) or [_endpoint()])


def _layout(**axes: Any) -> ProjectLayout:
    return ProjectLayout(GeneratorConfig(**axes), _schema())


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


class TestCaseConversion:
    @pytest.mark.parametrize(
        "value, pascal, camel, snake, kebab",
        [
            ("user", "User", "user", "user", "user"),
            ("UserProfile", "UserProfile", "userProfile", "user_profile", "user-profile"),
            ("user-profile", "UserProfile", "userProfile", "user_profile", "user-profile"),
            ("user_profile", "UserProfile", "userProfile", "user_profile", "user-profile"),
            ("Shop API", "ShopApi", "shopApi", "shop_api", "shop-api"),
            ("HTTPServer", "HttpServer", "httpServer", "http_server", "http-server"),
        ],
    )
    def test_conversions(self, value, pascal, camel, snake, kebab):
        assert to_pascal(value) == pascal
        assert to_camel(value) == camel
        assert to_snake(value) == snake
        assert to_kebab(value) == kebab

    def test_empty_string(self):
        assert to_pascal("") == ""
        assert to_kebab("--") == ""


# ---------------------------------------------------------------------------
# Endpoint names
# ---------------------------------------------------------------------------


class TestEndpointNames:
    def test_slug(self):
        assert endpoint_slug(_endpoint(name="OrderItem", method="POST")) == "order-item-post"

    def test_operation_and_types(self):
        endpoint = _endpoint(name="order_item", method="PATCH")
        assert operation_name(endpoint) == "patchOrderItem"
        assert request_type_name(endpoint) == "PatchOrderItemRequest"
        assert response_type_name(endpoint) == "PatchOrderItemResponse"
        assert hook_name(endpoint) == "usePatchOrderItem"

    @pytest.mark.parametrize(
        "path, expected",
        [("/users/:id", "id"), ("/users/{userId}", "userId"), ("/users", None), ("/", None)],
    )
    def test_path_param(self, path, expected):
        assert path_param(_endpoint(path=path)) == expected

    @pytest.mark.parametrize(
        "path, name, expected",
        [
            ("/users/:id", "User", "users"),
            ("/:tenant/order_items", "Order", "order-items"),
            ("/", "Health", "health"),
            ("/{id}", "LineItem", "line-item"),
            ("/:id", "..", "service"),
        ],
    )
    def test_resource_key(self, path, name, expected):
        assert resource_key(_endpoint(path=path, name=name)) == expected

    def test_route_paths(self):
        endpoint = _endpoint(path="/users/{id}/posts/:postId")
        assert route_path(endpoint, brace_params=False) == "/users/:id/posts/:postId"
        assert route_path(endpoint, brace_params=True) == "/users/{id}/posts/{postId}"
        assert client_path(endpoint) == "/users/${id}/posts/${postId}"

    def test_project_slug(self):
        assert project_slug(_schema(name="Shop API")) == "shop-api"
        assert project_slug(_schema(name="!!!")) == "api"


# ---------------------------------------------------------------------------
# Auth precedence
# ---------------------------------------------------------------------------


class TestEffectiveAuth:
    def test_global_applies_without_override(self):
        config = GeneratorConfig(auth_type="oauth2")
        assert effective_auth(_endpoint(), config) == AuthType.OAUTH2

    def test_endpoint_override_wins(self):
        config = GeneratorConfig(auth_type="jwt")
        assert effective_auth(_endpoint(auth="apikey"), config) == AuthType.APIKEY

    def test_endpoint_none_opts_out(self):
        config = GeneratorConfig(auth_type="jwt")
        assert effective_auth(_endpoint(auth="none"), config) == AuthType.NONE

    def test_endpoint_auth_with_global_none(self):
        config = GeneratorConfig(auth_type="none")
        assert effective_auth(_endpoint(auth="jwt"), config) == AuthType.JWT


# ---------------------------------------------------------------------------
# ProjectLayout
# ---------------------------------------------------------------------------


class TestProjectLayoutModules:
    def test_node_monolith_paths(self):
        layout = _layout()
        endpoint = _endpoint()
        assert layout.file(layout.entry_module) == "src/server/index.ts"
        assert layout.file(layout.route_module(endpoint)) == "src/server/routes/user-get.ts"
        assert layout.model_file("User") == "src/server/models/user.model.ts"
        assert layout.wrapper_module(endpoint) == "src/client/api/user-get"
        assert layout.type_module(endpoint) == "src/client/types/user-get"
        assert layout.hook_module(endpoint) == "src/client/hooks/use-user-get"

    def test_javascript_extensions(self):
        layout = _layout(language="javascript", wrapper_type="hoc")
        assert layout.script_ext == ".js"
        assert layout.wrapper_ext() == ".jsx"

    def test_python_paths(self):
        layout = _layout(backend_framework="fastapi")
        endpoint = _endpoint(name="OrderItem")
        assert layout.file(layout.entry_module) == "src/server/main.py"
        assert layout.file(layout.route_module(endpoint)) == "src/server/routers/order_item_get.py"
        assert layout.model_file("OrderItem") == "src/server/models/order_item.py"
        assert layout.model_file("OrderItem", sql=True) == "src/server/models/order_item.sql"

    def test_go_paths(self):
        layout = _layout(backend_framework="go-gin")
        endpoint = _endpoint()
        assert layout.file(layout.entry_module) == "src/server/main.go"
        assert layout.file(layout.route_module(endpoint)) == "src/server/handlers/user_get.go"

    def test_microservice_paths(self):
        layout = _layout(architecture="microservices")
        endpoint = _endpoint()
        assert layout.service_entry_module("users") == "services/users/src/server"
        assert layout.controller_module(endpoint, "users") == "services/users/src/controllers/user-get.controller"
        assert layout.service_module(endpoint, "users") == "services/users/src/services/user-get.service"

    def test_serverless_paths(self):
        layout = _layout(architecture="serverless", backend_framework="go-fiber")
        endpoint = _endpoint()
        assert layout.function_module(endpoint) == "functions/user_get/main"
        assert layout.function_name(endpoint) == "userGet"

    def test_table_name(self):
        assert ProjectLayout.table_name("User") == "users"
        assert ProjectLayout.table_name("Address") == "address"
        assert ProjectLayout.table_name("OrderItem") == "order_items"


class TestProjectLayoutNames:
    @pytest.mark.parametrize(
        "wrapper, export, call",
        [
            (WrapperType.CLASS, "userGetApi", "userGetApi.getUser"),
            (WrapperType.FUNCTIONAL, "getUser", "getUser"),
            (WrapperType.CUSTOM, "getUserRequest", "getUserRequest.send"),
            (WrapperType.HOC, "withGetUser", "withGetUser"),
            (WrapperType.HOOKS, "useGetUser", "useGetUser"),
            (WrapperType.REACT_QUERY, "useGetUser", "useGetUser"),
            (WrapperType.SWR, "useGetUser", "useGetUser"),
        ],
    )
    def test_wrapper_exports(self, wrapper, export, call):
        layout = _layout(wrapper_type=wrapper)
        assert layout.wrapper_export(_endpoint()) == export
        assert layout.wrapper_call(_endpoint()) == call

    @pytest.mark.parametrize(
        "framework, handler, export",
        [
            (BackendFramework.EXPRESS, "handleGetUser", "getUserRouter"),
            (BackendFramework.FASTIFY, "handleGetUser", "getUserRoutes"),
            (BackendFramework.NESTJS, "handleGetUser", "GetUserController"),
            (BackendFramework.FASTAPI, "handle_get_user", "router"),
            (BackendFramework.GO_FIBER, "HandleGetUser", "RegisterGetUser"),
        ],
    )
    def test_backend_exports(self, framework, handler, export):
        layout = _layout(backend_framework=framework)
        assert layout.handler_name(_endpoint()) == handler
        assert layout.route_export(_endpoint()) == export

    def test_needs_hook(self):
        assert _layout(wrapper_type="functional").needs_hook() is True
        assert _layout(wrapper_type="hooks").needs_hook() is False
        assert _layout(wrapper_type="class", frontend_framework="svelte").needs_hook() is False

    @pytest.mark.parametrize(
        "axes, name",
        [
            ({}, "requireJwt"),
            ({"backend_framework": "nestjs"}, "JwtGuard"),
            ({"backend_framework": "fastapi"}, "require_jwt"),
            ({"backend_framework": "go-gin"}, "RequireJwt"),
            ({"architecture": "serverless"}, "verifyJwt"),
            ({"architecture": "serverless", "backend_framework": "fastapi"}, "verify_jwt"),
            ({"architecture": "serverless", "backend_framework": "go-fiber"}, "VerifyJwt"),
        ],
    )
    def test_auth_guard_names(self, axes, name):
        assert _layout(**axes).auth_guard(AuthType.JWT).name == name

    def test_test_file_paths(self):
        endpoint = _endpoint()
        assert _layout().test_file(endpoint) == "tests/user-get.test.ts"
        assert _layout(backend_framework="fastapi").test_file(endpoint, "services/users") == (
            "services/users/tests/test_user_get.py"
        )
        assert _layout(backend_framework="go-fiber", architecture=Architecture.SERVERLESS).test_file(endpoint) == (
            "functions/user_get/user_get_test.go"
        )


class TestImportSpecifiers:
    def test_relative_import(self):
        assert ProjectLayout.relative_import("src/client/api/user-get", "src/client/api/client") == "./client"
        assert ProjectLayout.relative_import("src/client/hooks/use-user-get", "src/client/types/user-get") == (
            "../types/user-get"
        )
        assert ProjectLayout.relative_import("tests/user-get.test", "src/server/index") == "../src/server/index"

    def test_python_import(self):
        assert ProjectLayout.python_import("src/server/main", "src/server/routers/user_get") == ".routers.user_get"
        assert ProjectLayout.python_import("src/server/routers/user_get", "src/server/db/connection") == (
            "..db.connection"
        )

    def test_python_absolute(self):
        assert ProjectLayout.python_absolute("lib/db/connection") == "lib.db.connection"

    def test_go_import(self):
        layout = ProjectLayout(GeneratorConfig(backend_framework="go-fiber"), _schema(name="Shop API"))
        assert layout.go_import("src/server/handlers/user_get") == "github.com/example/shop-api/src/server/handlers"
        assert layout.go_import("services/users/src/db/connection", "services/users") == (
            "github.com/example/shop-api/services/users/src/db"
        )
        assert layout.go_package("src/server/handlers/user_get") == "handlers"
