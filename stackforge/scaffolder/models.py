"""Pydantic models for generated output: files, the directory tree, and the project."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class GeneratedFile(BaseModel):
    """One emitted source file."""
    path: str = Field(..., description="Posix path relative to the project root")
    content: str = Field(..., description="Full file text")
    language: str = Field(..., description="Syntax-highlighting tag, e.g. 'typescript'")


class ProjectNode(BaseModel):
    """A node of the project directory tree."""
    name: str
    type: Literal["file", "directory"]
    path: str
    children: Optional[list[ProjectNode]] = None
    language: Optional[str] = None

    def iter_files(self):
        """Yield every file leaf below this node, depth first."""
        if self.type == "file":
            yield self
            return
        for child in self.children or []:
            yield from child.iter_files()


ProjectNode.model_rebuild()


class GeneratedProject(BaseModel):
    """Result of one generation run."""
    files: list[GeneratedFile] = Field(default_factory=list)
    structure: ProjectNode

    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def get(self, path: str) -> GeneratedFile | None:
        for file in self.files:
            if file.path == path:
                return file
        return None
