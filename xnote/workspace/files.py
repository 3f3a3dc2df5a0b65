"""
Note and folder operations used by the editor.

Thin wrappers over the filesystem. Callers decide which paths are allowed;
`xnote_app.api` confines them to the workspace.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from .tree import NOTE_SUFFIXES

logger = logging.getLogger(__name__)

DEFAULT_NOTE_SUFFIX = ".md"


def read_file(path: str | os.PathLike[str]) -> str:
    return Path(path).read_text(encoding="utf-8")


def save_file(path: str | os.PathLike[str], content: str) -> None:
    Path(path).write_text(content, encoding="utf-8")


def note_path(dir_path: str | os.PathLike[str], filename: str) -> Path:
    """`dir_path/filename`, with the suffix replaced by `.md` unless it is
    already a note suffix (`.md`, `.uml`, `.puml`)."""

    full = Path(dir_path) / filename
    if filename.endswith(NOTE_SUFFIXES):
        return full
    return full.with_suffix(DEFAULT_NOTE_SUFFIX)


def create_note(dir_path: str | os.PathLike[str], filename: str) -> Path:
    """Create an empty note and return its path.

    Raises `FileExistsError("File already exists")` rather than overwrite.
    """

    full = note_path(dir_path, filename)
    if full.exists():
        raise FileExistsError("File already exists")
    full.write_text("", encoding="utf-8")
    logger.info("created note %s", full)
    return full


def create_folder(parent_path: str | os.PathLike[str], name: str) -> Path:
    full = Path(parent_path) / name
    if full.exists():
        raise FileExistsError("Directory already exists")
    full.mkdir(parents=True)
    logger.info("created folder %s", full)
    return full


def move_path(source: str | os.PathLike[str], target: str | os.PathLike[str]) -> None:
    os.rename(source, target)
    logger.info("moved %s -> %s", source, target)


def copy_file(source: str | os.PathLike[str], target: str | os.PathLike[str]) -> None:
    shutil.copyfile(source, target)


def delete_path(path: str | os.PathLike[str]) -> None:
    """Delete a file, or a directory with everything in it."""

    p = Path(path)
    if p.is_dir() and not p.is_symlink():
        shutil.rmtree(p)
    else:
        p.unlink()
    logger.info("deleted %s", p)
