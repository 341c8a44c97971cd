"""Stackforge generation entry points.

Wires the parser, the project assembler, and the structure builder together:

    raw schema text -> NormalizedSchema -> GeneratedFile list -> ProjectNode tree

``generate`` raises on failure; ``run_generation`` and ``GeneratorSession``
turn failures into user-facing messages.  ``main`` is the ``stackforge`` CLI.

Usage::

    stackforge api.yaml --output ./my-project
    stackforge api.json --set backend_framework=fastapi --set database_type=postgresql --zip out.zip
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from jinja2 import TemplateError
from pydantic import BaseModel, Field, ValidationError

from stackforge.config import GeneratorConfig, InputFormat
from stackforge.errors import StackforgeError
from stackforge.parser.loader import parse
from stackforge.parser.validator import ValidationResult, validate
from stackforge.scaffolder.assembler import assemble
from stackforge.scaffolder.models import GeneratedProject
from stackforge.scaffolder.structure import build_tree

# Default schema shown to a fresh session, as in a new editor tab.
DEFAULT_SCHEMA = """{
  "name": "UserAPI",
  "version": "1.0.0",
  "endpoints": [
    {
      "name": "User",
      "path": "/users/:id",
      "method": "GET",
      "properties": {
        "id": {"type": "string", "required": true},
        "name": {"type": "string"},
        "email": {"type": "string", "format": "email"}
      }
    }
  ]
}
"""

_SUFFIX_FORMATS: dict[str, InputFormat] = {
    ".json": InputFormat.JSON,
    ".yaml": InputFormat.YAML,
    ".yml": InputFormat.YAML,
    ".dsl": InputFormat.DSL,
    ".api": InputFormat.DSL,
}


# ---------------------------------------------------------------------------
# One-shot generation
# ---------------------------------------------------------------------------


async def generate(
    raw_text: str,
    fmt: InputFormat | str,
    config: GeneratorConfig,
) -> GeneratedProject:
    """Parse *raw_text*, assemble every file, and build the directory tree.

    The full file list is built before returning; a failure anywhere means no
    project at all.

    Raises:
        SchemaParseError: The text cannot be decoded.
        SchemaShapeError: The document lacks required structure.
        PathCollisionError: Two generated files would share a path.
    """
    schema = parse(raw_text, fmt)
    files = await asyncio.to_thread(assemble, schema, config)
    return GeneratedProject(files=files, structure=build_tree(files))


class GenerationOutcome(BaseModel):
    """Result of a generation attempt that never raises."""
    project: Optional[GeneratedProject] = None
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.project is not None and not self.errors


async def run_generation(
    raw_text: str,
    fmt: InputFormat | str,
    config: GeneratorConfig,
) -> GenerationOutcome:
    """Like ``generate`` but every failure becomes a message."""
    try:
        project = await generate(raw_text, fmt, config)
    except StackforgeError as exc:
        return GenerationOutcome(errors=list(exc.messages))
    except TemplateError as exc:
        return GenerationOutcome(errors=[f"Template rendering failed: {exc}"])
    except ValueError as exc:
        # Unknown format tag.
        return GenerationOutcome(errors=[str(exc)])
    except Exception as exc:
        return GenerationOutcome(errors=[f"Generation failed: {type(exc).__name__}: {exc}"])
    return GenerationOutcome(project=project)


# ---------------------------------------------------------------------------
# Interactive session
# ---------------------------------------------------------------------------


class GeneratorSession:
    """Editor-style state: schema text, format, config, and the last results.

    The configuration is immutable and replaced wholesale on every change.
    Generation only runs after a passing validation; a failed run keeps the
    previous project and records the errors.
    """

    def __init__(
        self,
        schema_text: str = DEFAULT_SCHEMA,
        fmt: InputFormat | str = InputFormat.JSON,
        config: GeneratorConfig | None = None,
    ) -> None:
        self.schema_text = schema_text
        self.format = InputFormat(fmt)
        self.config = config or GeneratorConfig()
        self.validation: Optional[ValidationResult] = None
        self.project: Optional[GeneratedProject] = None
        self.errors: list[str] = []
        self.is_generating = False

    # -- Edits -------------------------------------------------------------

    def set_schema(self, text: str, fmt: InputFormat | str | None = None) -> ValidationResult:
        """Replace the schema text (and optionally its format) and revalidate."""
        self.schema_text = text
        if fmt is not None:
            self.format = InputFormat(fmt)
        return self.validate()

    def update_config(self, **changes: Any) -> GeneratorConfig:
        """Swap in a new config with *changes* applied.

        Raises:
            pydantic.ValidationError: If a value is not legal for its axis.
        """
        self.config = self.config.with_changes(**changes)
        return self.config

    def validate(self) -> ValidationResult:
        self.validation = validate(self.schema_text, self.format)
        return self.validation

    # -- Generation --------------------------------------------------------

    @property
    def outcome(self) -> GenerationOutcome:
        return GenerationOutcome(project=self.project, errors=list(self.errors))

    async def generate(self) -> GenerationOutcome:
        """Generate from the current state.

        A no-op returning the current outcome unless the last validation
        passed.
        """
        if self.validation is None or not self.validation.is_valid:
            return self.outcome
        self.is_generating = True
        try:
            result = await run_generation(self.schema_text, self.format, self.config)
        finally:
            self.is_generating = False
        if result.project is not None:
            self.project = result.project
            self.errors = []
        else:
            self.errors = result.errors
        return self.outcome

    def reset(self) -> None:
        """Restore the default schema, format and config, and clear results."""
        self.schema_text = DEFAULT_SCHEMA
        self.format = InputFormat.JSON
        self.config = GeneratorConfig()
        self.validation = None
        self.project = None
        self.errors = []
        self.is_generating = False


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------


def infer_format(path: Path) -> InputFormat:
    """Input format from the file suffix; JSON when unknown."""
    return _SUFFIX_FORMATS.get(path.suffix.lower(), InputFormat.JSON)


def parse_overrides(pairs: list[str]) -> dict[str, str]:
    """Turn ``["axis=value", ...]`` into a dict.

    Raises:
        ValueError: If an entry has no ``=``.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid override (expected axis=value): {pair}")
        overrides[key.strip()] = value.strip()
    return overrides


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point for ``stackforge``."""
    import argparse

    from stackforge.exporter import write_tree, write_zip
    from stackforge.utils import (
        console,
        print_error,
        print_messages,
        print_success,
        print_summary_table,
        print_tree,
        summarize_files,
    )

    parser = argparse.ArgumentParser(
        description="Stackforge -- generate a full-stack project from an API schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stackforge api.json --output ./my-project\n"
            "  stackforge api.yaml --set backend_framework=fastapi --zip project.zip\n"
            "  stackforge api.dsl --validate-only\n"
        ),
    )

    parser.add_argument(
        "schema",
        help="Path to the schema file",
    )
    parser.add_argument(
        "--format", "-f",
        choices=[f.value for f in InputFormat],
        default=None,
        help="Schema format (default: inferred from the file suffix)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON file holding a saved generator configuration",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="AXIS=VALUE",
        help="Override one configuration axis (repeatable)",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--output", "-o",
        default=None,
        help="Directory to write the generated project into",
    )
    output.add_argument(
        "--zip",
        default=None,
        help="Write the generated project as a ZIP archive",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the schema",
    )
    parser.add_argument(
        "--tree",
        action="store_true",
        help="Print the generated directory tree",
    )

    args = parser.parse_args()

    schema_path = Path(args.schema)
    if not schema_path.exists():
        console.print(f"[bold red]Error:[/bold red] Schema file not found: {schema_path}")
        sys.exit(1)

    fmt = InputFormat(args.format) if args.format else infer_format(schema_path)
    raw_text = schema_path.read_text(encoding="utf-8")

    result = validate(raw_text, fmt)
    if not result.is_valid:
        print_messages(result.errors, title="Schema is invalid")
        sys.exit(1)
    if args.validate_only:
        print_success("Schema is valid.")
        return

    try:
        config = GeneratorConfig.load(Path(args.config)) if args.config else GeneratorConfig.from_env()
        overrides = parse_overrides(args.set)
        if overrides:
            config = config.with_changes(**overrides)
    except (OSError, ValueError, ValidationError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    outcome = asyncio.run(run_generation(raw_text, fmt, config))
    if not outcome.ok:
        print_messages(outcome.errors, title="Generation failed")
        sys.exit(1)

    project = outcome.project
    if args.tree:
        print_tree(project.structure, label=schema_path.stem)
    print_summary_table(summarize_files(project.files), title="Generated files")

    try:
        if args.zip:
            target = write_zip(project.files, args.zip)
            print_success(f"Wrote {len(project.files)} files to {target}")
        elif args.output:
            written = asyncio.run(write_tree(project.files, args.output))
            print_success(f"Wrote {len(written)} files under {args.output}")
    except StackforgeError as exc:
        print_messages(exc.messages, title="Export failed")
        sys.exit(1)
    except OSError as exc:
        print_error(f"Export failed: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
