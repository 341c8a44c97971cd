"""Stackforge -- schema-driven full-stack project scaffolding.

Quick usage::

    from stackforge import GeneratorConfig, generate

    project = await generate(raw_text, "json", GeneratorConfig(backend_framework="fastapi"))
    for file in project.files:
        print(file.path)
"""

from stackforge.config import GeneratorConfig, InputFormat
from stackforge.errors import (
    ExportError,
    PathCollisionError,
    SchemaParseError,
    SchemaShapeError,
    StackforgeError,
)
from stackforge.pipeline import GenerationOutcome, GeneratorSession, generate, run_generation

__version__ = "0.1.0"

__all__ = [
    "GeneratorConfig",
    "InputFormat",
    "generate",
    "run_generation",
    "GenerationOutcome",
    "GeneratorSession",
    "StackforgeError",
    "SchemaParseError",
    "SchemaShapeError",
    "PathCollisionError",
    "ExportError",
]
