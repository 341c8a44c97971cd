"""Unit tests for the generation entry points (stackforge.pipeline).

Tests cover:
- generate: files plus tree, and the exceptions it lets through
- run_generation: every failure becomes a message
- GeneratorSession: validation gating, copy-on-write config, failed runs, reset
- infer_format / parse_overrides
- main: validate-only, output directory, ZIP, and the exit-1 paths
"""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from jinja2 import TemplateError
from pydantic import ValidationError

from stackforge.config import Architecture, GeneratorConfig, InputFormat
from stackforge.errors import ExportError, PathCollisionError, SchemaParseError, SchemaShapeError
from stackforge.pipeline import (
    DEFAULT_SCHEMA,
    GenerationOutcome,
    GeneratorSession,
    generate,
    infer_format,
    main,
    parse_overrides,
    run_generation,
)


def _duplicate_schema() -> str:
    endpoint = {"name": "User", "path": "/users", "method": "GET", "properties": {}}
    return json.dumps({"name": "Dup", "endpoints": [endpoint, dict(endpoint, path="/people")]})


# ---------------------------------------------------------------------------
# generate / run_generation
# ---------------------------------------------------------------------------


class TestGenerate:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_files_and_tree_agree(self, user_json_text: str):
        project = await generate(user_json_text, "json", GeneratorConfig())
        assert project.paths()[0] == "package.json"
        leaves = [node.path for node in project.structure.iter_files()]
        assert sorted(leaves) == sorted(project.paths())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_dsl_input(self, shop_dsl_text: str):
        project = await generate(shop_dsl_text, InputFormat.DSL, GeneratorConfig(generate_docker=False))
        assert project.get("src/client/api/order-post.ts") is not None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_parse_error_propagates(self):
        with pytest.raises(SchemaParseError):
            await generate("{", "json", GeneratorConfig())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_shape_error_propagates(self):
        with pytest.raises(SchemaShapeError):
            await generate('{"name": "X"}', "json", GeneratorConfig())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_collision_propagates(self):
        with pytest.raises(PathCollisionError):
            await generate(_duplicate_schema(), "json", GeneratorConfig())


class TestRunGeneration:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, user_json_text: str):
        outcome = await run_generation(user_json_text, "json", GeneratorConfig())
        assert outcome.ok is True
        assert outcome.errors == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_parse_error_message(self):
        outcome = await run_generation("{", "json", GeneratorConfig())
        assert outcome.ok is False
        assert outcome.project is None
        assert outcome.errors[0].startswith("Invalid JSON format:")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_shape_errors_listed(self):
        outcome = await run_generation('{"endpoints": []}', "json", GeneratorConfig())
        assert "API name is required" in outcome.errors

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_collision_message(self):
        outcome = await run_generation(_duplicate_schema(), "json", GeneratorConfig())
        assert outcome.errors == ["Endpoints share a slug: user-get"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_template_error_message(self, user_json_text: str):
        with patch("stackforge.pipeline.assemble", side_effect=TemplateError("missing block")):
            outcome = await run_generation(user_json_text, "json", GeneratorConfig())
        assert outcome.errors == ["Template rendering failed: missing block"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_format(self, user_json_text: str):
        outcome = await run_generation(user_json_text, "toml", GeneratorConfig())
        assert outcome.ok is False
        assert outcome.errors

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_message(self, user_json_text: str):
        with patch("stackforge.pipeline.assemble", side_effect=TypeError("'Macro' object is not iterable")):
            outcome = await run_generation(user_json_text, "json", GeneratorConfig())
        assert outcome.ok is False
        assert outcome.errors == ["Generation failed: TypeError: 'Macro' object is not iterable"]

    @pytest.mark.unit
    def test_outcome_ok_requires_project(self):
        assert GenerationOutcome().ok is False


# ---------------------------------------------------------------------------
# GeneratorSession
# ---------------------------------------------------------------------------


class TestGeneratorSession:
    @pytest.mark.unit
    def test_initial_state(self):
        session = GeneratorSession()
        assert session.schema_text == DEFAULT_SCHEMA
        assert session.format == InputFormat.JSON
        assert session.config == GeneratorConfig()
        assert session.validation is None
        assert session.project is None
        assert session.is_generating is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_requires_validation(self):
        session = GeneratorSession()
        outcome = await session.generate()
        assert outcome.project is None
        assert session.project is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_default_schema_generates(self):
        session = GeneratorSession()
        assert session.validate().is_valid is True
        outcome = await session.generate()
        assert outcome.ok is True
        assert session.project.get("src/client/api/user-get.ts") is not None
        assert session.is_generating is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_schema_blocks_generation(self):
        session = GeneratorSession()
        result = session.set_schema("   ")
        assert result.errors == ["Schema cannot be empty"]
        outcome = await session.generate()
        assert outcome.project is None

    @pytest.mark.unit
    def test_set_schema_changes_format(self, shop_dsl_text: str):
        session = GeneratorSession()
        assert session.set_schema(shop_dsl_text, "dsl").is_valid is True
        assert session.format == InputFormat.DSL

    @pytest.mark.unit
    def test_update_config_replaces_value(self):
        session = GeneratorSession()
        before = session.config
        after = session.update_config(architecture="serverless")
        assert session.config is after
        assert after.architecture == Architecture.SERVERLESS
        assert before.architecture == Architecture.MONOLITH

    @pytest.mark.unit
    def test_update_config_rejects_bad_value(self):
        session = GeneratorSession()
        with pytest.raises(ValidationError):
            session.update_config(api_style="soap")
        assert session.config == GeneratorConfig()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_run_keeps_previous_project(self):
        session = GeneratorSession()
        session.validate()
        await session.generate()
        previous = session.project

        # Passes the shallow validator but collides during assembly.
        session.set_schema(_duplicate_schema())
        outcome = await session.generate()
        assert session.project is previous
        assert outcome.project is previous
        assert session.errors == ["Endpoints share a slug: user-get"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_previous_project(self):
        session = GeneratorSession()
        session.validate()
        await session.generate()
        previous = session.project

        with patch("stackforge.pipeline.assemble", side_effect=KeyError("ep")):
            outcome = await session.generate()
        assert session.project is previous
        assert outcome.project is previous
        assert session.errors == ["Generation failed: KeyError: 'ep'"]
        assert session.is_generating is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_clears_errors(self, user_json_text: str):
        session = GeneratorSession(_duplicate_schema())
        session.validate()
        await session.generate()
        assert session.errors

        session.set_schema(user_json_text)
        outcome = await session.generate()
        assert outcome.ok is True
        assert session.errors == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reset(self, shop_dsl_text: str):
        session = GeneratorSession()
        session.validate()
        await session.generate()
        session.set_schema(shop_dsl_text, "dsl")
        session.update_config(language="javascript")

        session.reset()
        assert session.schema_text == DEFAULT_SCHEMA
        assert session.format == InputFormat.JSON
        assert session.config == GeneratorConfig()
        assert session.validation is None
        assert session.project is None
        assert session.errors == []


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------


class TestCliHelpers:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("api.json", InputFormat.JSON),
            ("api.YAML", InputFormat.YAML),
            ("api.yml", InputFormat.YAML),
            ("api.dsl", InputFormat.DSL),
            ("api.api", InputFormat.DSL),
            ("api.txt", InputFormat.JSON),
        ],
    )
    def test_infer_format(self, name: str, expected: InputFormat):
        assert infer_format(Path(name)) == expected

    @pytest.mark.unit
    def test_parse_overrides(self):
        assert parse_overrides(["architecture=serverless", " language = javascript "]) == {
            "architecture": "serverless",
            "language": "javascript",
        }

    @pytest.mark.unit
    @pytest.mark.parametrize("pair", ["architecture", "=serverless"])
    def test_parse_overrides_rejects(self, pair: str):
        with pytest.raises(ValueError):
            parse_overrides([pair])


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


def _run_main(*argv: Any) -> None:
    with patch("sys.argv", ["stackforge", *[str(a) for a in argv]]):
        main()


class TestMain:
    @pytest.mark.unit
    def test_missing_schema_file(self, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            _run_main(tmp_path / "nope.json")
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_invalid_schema_exits(self, tmp_path: Path):
        schema = tmp_path / "empty.json"
        schema.write_text("", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            _run_main(schema)
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_validate_only(self, tmp_path: Path, shop_dsl_text: str):
        schema = tmp_path / "shop.dsl"
        schema.write_text(shop_dsl_text, encoding="utf-8")
        _run_main(schema, "--validate-only")

    @pytest.mark.unit
    def test_writes_output_dir(self, tmp_path: Path, user_json_text: str, tmp_output_dir: Path):
        schema = tmp_path / "users.json"
        schema.write_text(user_json_text, encoding="utf-8")
        _run_main(schema, "--set", "backend_framework=fastapi", "--output", tmp_output_dir, "--tree")
        assert (tmp_output_dir / "src" / "server" / "main.py").exists()
        assert (tmp_output_dir / "requirements.txt").exists()

    @pytest.mark.unit
    def test_writes_zip(self, tmp_path: Path, shop_yaml_text: str):
        schema = tmp_path / "shop.yaml"
        schema.write_text(shop_yaml_text, encoding="utf-8")
        target = tmp_path / "shop.zip"
        _run_main(schema, "--zip", target)
        with zipfile.ZipFile(target) as archive:
            assert "package.json" in archive.namelist()

    @pytest.mark.unit
    def test_saved_config(self, tmp_path: Path, user_json_text: str):
        schema = tmp_path / "users.json"
        schema.write_text(user_json_text, encoding="utf-8")
        config_path = GeneratorConfig(architecture="serverless").save(tmp_path / "config.json")
        out = tmp_path / "out"
        _run_main(schema, "--config", config_path, "--output", out)
        assert (out / "serverless.yml").exists()

    @pytest.mark.unit
    def test_bad_override_exits(self, tmp_path: Path, user_json_text: str):
        schema = tmp_path / "users.json"
        schema.write_text(user_json_text, encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            _run_main(schema, "--set", "architecture=mainframe")
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_generation_failure_exits(self, tmp_path: Path):
        schema = tmp_path / "dup.json"
        schema.write_text(_duplicate_schema(), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            _run_main(schema)
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_export_error_exits(self, tmp_path: Path, user_json_text: str):
        schema = tmp_path / "users.json"
        schema.write_text(user_json_text, encoding="utf-8")
        with patch("stackforge.exporter.build_zip", side_effect=ExportError("Empty archive path")):
            with pytest.raises(SystemExit) as exc_info:
                _run_main(schema, "--zip", tmp_path / "out.zip")
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_unwritable_output_exits(self, tmp_path: Path, user_json_text: str):
        schema = tmp_path / "users.json"
        schema.write_text(user_json_text, encoding="utf-8")
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            _run_main(schema, "--output", blocker / "project")
        assert exc_info.value.code == 1
