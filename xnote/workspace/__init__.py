"""Workspace collaborators: default workspace, config file, notes, file tree, search."""

from .config import WorkspacePermissionError, get_config, get_default_workspace, save_config
from .files import (
    copy_file,
    create_folder,
    create_note,
    delete_path,
    move_path,
    note_path,
    read_file,
    save_file,
)
from .search import SearchHit, search_text
from .tree import FileNode, get_files

__all__ = [
    "FileNode",
    "SearchHit",
    "WorkspacePermissionError",
    "copy_file",
    "create_folder",
    "create_note",
    "delete_path",
    "get_config",
    "get_default_workspace",
    "get_files",
    "move_path",
    "note_path",
    "read_file",
    "save_config",
    "save_file",
    "search_text",
]
