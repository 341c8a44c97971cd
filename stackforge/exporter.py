"""Writing generated files out: a ZIP archive or a directory tree.

Paths are checked before anything is written so a malformed path can never
escape the archive root or the output directory.
"""

from __future__ import annotations

import asyncio
import io
import zipfile
from pathlib import Path

from stackforge.errors import ExportError
from stackforge.scaffolder.models import GeneratedFile


def check_archive_path(path: str) -> str:
    """Return *path* unchanged if it is a safe relative posix path.

    Raises:
        ExportError: For empty or absolute paths, backslashes, or ``..``
            segments.
    """
    if not path:
        raise ExportError("Empty archive path")
    if path.startswith("/"):
        raise ExportError(f"Absolute archive path: {path}")
    if "\\" in path:
        raise ExportError(f"Backslash in archive path: {path}")
    if ".." in path.split("/"):
        raise ExportError(f"Parent reference in archive path: {path}")
    return path


def build_zip(files: list[GeneratedFile]) -> bytes:
    """Pack *files* into an in-memory ZIP, one entry per file at its exact path."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file in files:
            archive.writestr(check_archive_path(file.path), file.content.encode("utf-8"))
    return buffer.getvalue()


def write_zip(files: list[GeneratedFile], dest: str | Path) -> Path:
    """Write the ZIP for *files* to *dest* and return its path."""
    target = Path(dest)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(build_zip(files))
    return target


async def write_tree(files: list[GeneratedFile], output_dir: str | Path) -> list[Path]:
    """Write every file below *output_dir*, creating directories as needed.

    Returns:
        The written paths, in file order.
    """
    root = Path(output_dir)
    for file in files:
        check_archive_path(file.path)

    written: list[Path] = []
    for file in files:
        out = root / file.path
        await asyncio.to_thread(_write_file, out, file.content)
        written.append(out)
    return written


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper executed in a thread by ``write_tree``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
