"""Stackforge scaffolder -- renders a project file list from a schema.

Quick usage::

    from stackforge.scaffolder import assemble, build_tree

    files = assemble(schema, config)
    tree = build_tree(files)
"""

from stackforge.scaffolder.assembler import ProjectAssembler, assemble
from stackforge.scaffolder.catalog import TemplateCatalog
from stackforge.scaffolder.models import GeneratedFile, GeneratedProject, ProjectNode
from stackforge.scaffolder.structure import build_tree
from stackforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "assemble",
    "build_tree",
    "ProjectAssembler",
    "TemplateCatalog",
    "TemplateRenderer",
    "GeneratedFile",
    "GeneratedProject",
    "ProjectNode",
]
