"""Shared console helpers for the Stackforge CLI.

Rich-based status messages, summary tables, and a tree view of a generated
project.  The engine itself never prints; only the CLI calls into here.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from stackforge.scaffolder.models import GeneratedFile, ProjectNode

console = Console()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


# Tree label colour per language tag; anything else is plain.
LANGUAGE_COLORS: dict[str, str] = {
    "typescript": "bright_blue",
    "javascript": "yellow",
    "python": "green",
    "go": "cyan",
    "json": "magenta",
    "yaml": "magenta",
    "markdown": "white",
    "dockerfile": "bright_cyan",
    "sql": "bright_yellow",
}


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_messages(messages: list[str], title: str = "Errors") -> None:
    """Print a bulleted list of user-facing messages in red."""
    print_error(f"{title}:")
    for message in messages:
        console.print(f"  [red]- {message}[/red]")


# ---------------------------------------------------------------------------
# Project tree
# ---------------------------------------------------------------------------


def build_rich_tree(node: ProjectNode, label: str | None = None) -> Tree:
    """Convert a ``ProjectNode`` hierarchy into a ``rich.tree.Tree``."""
    tree = Tree(f"[bold]{label or node.name or '.'}[/bold]")
    _add_children(tree, node)
    return tree


def _add_children(tree: Tree, node: ProjectNode) -> None:
    for child in node.children or []:
        if child.type == "directory":
            branch = tree.add(f"[bold blue]{child.name}/[/bold blue]")
            _add_children(branch, child)
        else:
            color = LANGUAGE_COLORS.get(child.language or "", "white")
            tree.add(f"[{color}]{child.name}[/{color}]")


def print_tree(node: ProjectNode, label: str | None = None) -> None:
    console.print(build_rich_tree(node, label))
    console.print()


def summarize_files(files: list[GeneratedFile]) -> dict[str, str]:
    """File count per language, plus the total, for ``print_summary_table``."""
    counts: dict[str, int] = {}
    for file in files:
        counts[file.language] = counts.get(file.language, 0) + 1
    summary = {language: str(count) for language, count in sorted(counts.items())}
    summary["total"] = str(len(files))
    return summary
