from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
WORKSPACE_DIR_NAME = "doc"


class WorkspacePermissionError(PermissionError):
    pass


def get_default_workspace(home: Path) -> Path:
    """Return `<home>/doc`, creating it if needed.

    Writability is checked with a throwaway `.write_test` file so the UI can
    report a permission problem before the user starts writing notes.
    """

    workspace = Path(home) / WORKSPACE_DIR_NAME
    try:
        workspace.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("failed to create workspace %s: %s", workspace, e)
        raise WorkspacePermissionError(f"PERMISSION_DENIED: {e}") from e

    check_file = workspace / ".write_test"
    try:
        check_file.write_text("test", encoding="utf-8")
    except OSError as e:
        logger.error("workspace is not writable %s: %s", workspace, e)
        raise WorkspacePermissionError(f"PERMISSION_DENIED: {e}") from e
    try:
        check_file.unlink()
    except OSError:
        pass

    return workspace


def get_config(home: Path) -> str:
    path = Path(home) / CONFIG_FILE_NAME
    if not path.exists():
        return "{}"
    return path.read_text(encoding="utf-8")


def save_config(home: Path, text: str) -> Path:
    path = Path(home) / CONFIG_FILE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
