"""Flat file list -> hierarchical directory tree."""

from __future__ import annotations

from .models import GeneratedFile, ProjectNode


def build_tree(files: list[GeneratedFile], root_name: str = "") -> ProjectNode:
    """Build the directory tree for *files*.

    Directories are looked up by their full path so each distinct directory
    gets exactly one node.  Children keep the first-seen order of the files.
    """
    root = ProjectNode(name=root_name, type="directory", path="", children=[])
    directories: dict[str, ProjectNode] = {"": root}

    for file in files:
        segments = file.path.split("/")
        parent = root
        prefix = ""
        for segment in segments[:-1]:
            prefix = f"{prefix}/{segment}" if prefix else segment
            node = directories.get(prefix)
            if node is None:
                node = ProjectNode(name=segment, type="directory", path=prefix, children=[])
                directories[prefix] = node
                parent.children.append(node)
            parent = node
        parent.children.append(
            ProjectNode(
                name=segments[-1],
                type="file",
                path=file.path,
                language=file.language,
            )
        )

    return root
