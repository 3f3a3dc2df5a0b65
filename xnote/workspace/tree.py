from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from xnote.clean.paths import WorkspaceNotFoundError

NOTE_SUFFIXES = (".md", ".uml", ".puml")
MAX_DEPTH = 3


@dataclass
class FileNode:
    name: str
    path: str
    is_dir: bool
    children: list[FileNode] | None = None
    last_modified: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "is_dir": self.is_dir,
            "children": [c.to_dict() for c in self.children] if self.children is not None else None,
            "last_modified": self.last_modified,
        }


def _sort_nodes(nodes: list[FileNode]) -> None:
    # Directories first, then by name.
    nodes.sort(key=lambda n: (not n.is_dir, n.name))


def _mtime_label(path: str) -> str | None:
    try:
        ts = os.stat(path).st_mtime
    except OSError:
        return None
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def _read_children(directory: str, depth: int, max_depth: int) -> list[FileNode]:
    children: list[FileNode] = []
    try:
        entries = list(os.scandir(directory))
    except OSError:
        return children

    for entry in entries:
        name = entry.name
        if name.startswith("."):
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if not is_dir and not name.endswith(NOTE_SUFFIXES):
            continue

        node = FileNode(name=name, path=entry.path, is_dir=is_dir)
        if is_dir:
            if depth < max_depth:
                node.children = _read_children(entry.path, depth + 1, max_depth)
                _sort_nodes(node.children)
            else:
                node.children = []
        else:
            node.last_modified = _mtime_label(entry.path)
        children.append(node)

    return children


def get_files(path: str | os.PathLike[str], max_depth: int = MAX_DEPTH) -> list[FileNode]:
    """List notes and folders under `path` as a nested tree.

    Hidden entries are skipped and only note files (`.md`, `.uml`, `.puml`)
    are listed. Folders deeper than `max_depth` are returned with an empty
    child list so the UI can load them lazily.
    """

    root = Path(path)
    if not root.exists():
        raise WorkspaceNotFoundError(path)

    nodes = _read_children(os.fspath(root), 1, max_depth)
    _sort_nodes(nodes)
    return nodes
