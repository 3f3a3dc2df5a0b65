from __future__ import annotations

import os
from pathlib import Path

from .references import trim_wrapping

ASSETS_DIR_NAME = ".xnote_assets"

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "bmp", "svg"})
TEXT_EXTENSIONS = frozenset({"md", "txt", "uml", "puml"})

# URLs and URI schemes that never point at a file inside the workspace.
# `tauri:` and `asset:` are the desktop shell's own protocol handlers.
IGNORED_PREFIXES = (
    "http://",
    "https://",
    "data:",
    "blob:",
    "tauri:",
    "asset:",
    "file://",
)


class WorkspaceNotFoundError(FileNotFoundError):
    def __init__(self, root: object = None) -> None:
        super().__init__("Workspace path does not exist")
        self.root = root


def _ext(path: str | os.PathLike[str]) -> str:
    return os.path.splitext(os.fspath(path))[1].lstrip(".").lower()


def is_image_path(path: str | os.PathLike[str]) -> bool:
    return _ext(path) in IMAGE_EXTENSIONS


def is_text_path(path: str | os.PathLike[str]) -> bool:
    return _ext(path) in TEXT_EXTENSIONS


def canonicalize(path: str | os.PathLike[str]) -> Path:
    """Resolve symlinks and `..`; return the path unchanged if that fails."""

    p = Path(path)
    try:
        return p.resolve(strict=True)
    except (OSError, RuntimeError):
        return p


def is_within(path: Path, canonical_root: Path) -> bool:
    """True if `path` is `canonical_root` or nested under it.

    Purely lexical: `..` and symlinks are not looked at. Both arguments must
    already be canonical (`canonicalize`, `Path.resolve`) or at least
    absolute with `..` collapsed (`os.path.abspath`).
    """

    try:
        path.relative_to(canonical_root)
    except ValueError:
        return False
    return True


def looks_like_asset_ref(raw: str, assets_dir_name: str = ASSETS_DIR_NAME) -> bool:
    """Cheap filter applied before any filesystem call.

    Keeps references that point into the asset directory or end with an image
    extension; anything carrying a URL scheme is dropped.
    """

    low = raw.lower()
    if "://" in low:
        return False
    segments = low.replace("\\", "/").split("/")
    if assets_dir_name.lower() in segments[:-1]:
        return True
    return any(low.endswith("." + ext) for ext in IMAGE_EXTENSIONS)


def normalize_ref_path(
    workspace_root: str | os.PathLike[str],
    referencing_file: str | os.PathLike[str],
    raw: str,
) -> Path | None:
    """Turn a raw reference into an absolute path candidate.

    Root-relative references (`/img.png`) are joined onto the workspace root;
    everything else is relative to the referencing document's directory.
    The result is not canonicalized.
    """

    r = raw.strip()
    if not r:
        return None
    if r.lower().startswith(IGNORED_PREFIXES):
        return None

    cleaned = r.split("#", 1)[0].split("?", 1)[0]
    cleaned = trim_wrapping(cleaned)

    root = Path(workspace_root)
    if cleaned.startswith("/"):
        return root / cleaned.lstrip("/")

    parent = Path(referencing_file).parent
    base = parent if str(parent) not in ("", ".") else root
    return base / cleaned
