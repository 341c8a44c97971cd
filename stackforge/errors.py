"""Exception hierarchy for the Stackforge engine.

Every error raised by parsing, assembly, or export derives from
``StackforgeError`` and exposes ``messages`` -- a list of user-facing strings
that the session layer and CLI surface verbatim.
"""

from __future__ import annotations


class StackforgeError(Exception):
    """Base class for all recoverable, per-invocation engine failures."""

    def __init__(self, message: str, messages: list[str] | None = None) -> None:
        self.messages = messages if messages is not None else [message]
        super().__init__(message)


class SchemaParseError(StackforgeError):
    """Raised when raw schema text cannot be decoded in the claimed format."""

    def __init__(self, fmt: str, cause: str) -> None:
        self.format = fmt
        self.cause = cause
        super().__init__(f"Invalid {fmt.upper()} format: {cause}")


class SchemaShapeError(StackforgeError):
    """Raised when a decoded document lacks the structure needed for templating."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        summary = "; ".join(self.errors) if self.errors else "Schema has an invalid shape"
        super().__init__(summary, messages=self.errors or [summary])


class PathCollisionError(StackforgeError):
    """Raised when two generated artefacts would be written to the same path."""

    def __init__(self, paths: list[str], reason: str = "") -> None:
        self.paths = list(paths)
        detail = reason or "Duplicate output paths"
        super().__init__(f"{detail}: {', '.join(self.paths)}")


class ExportError(StackforgeError):
    """Raised when a generated path cannot be written as an archive entry."""
