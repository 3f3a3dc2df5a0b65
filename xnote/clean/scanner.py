from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from .events import Phase, ProgressSink, progress
from .jobs import JobController
from .paths import (
    ASSETS_DIR_NAME,
    WorkspaceNotFoundError,
    canonicalize,
    is_image_path,
    is_text_path,
    looks_like_asset_ref,
    normalize_ref_path,
)
from .references import extract_candidate_paths

logger = logging.getLogger(__name__)

IMAGE_PROGRESS_EVERY = 100
REFS_PROGRESS_EVERY = 10


class _Cancelled(Exception):
    def __init__(self, current: int = 0, total: int = 0) -> None:
        super().__init__(current, total)
        self.current = current
        self.total = total


def walk_entries(root: Path, keep_dir: Callable[[str], bool]) -> Iterator[tuple[Path, bool]]:
    """Depth-first walk yielding `(path, is_dir)` for every entry under `root`.

    `keep_dir(name)` is consulted before descending; rejected directories are
    neither yielded nor entered. Unreadable directories are skipped and
    symlinked directories are not followed.
    """

    for dirpath, dirnames, filenames in os.walk(root, topdown=True, onerror=lambda e: None):
        dirnames[:] = [d for d in dirnames if keep_dir(d)]
        base = Path(dirpath)
        for d in dirnames:
            yield base / d, True
        for f in filenames:
            yield base / f, False


def _image_dir_filter(assets_dir_name: str) -> Callable[[str], bool]:
    def keep(name: str) -> bool:
        if name == assets_dir_name:
            return True
        return not name.startswith(".")

    return keep


def _text_dir_filter(assets_dir_name: str) -> Callable[[str], bool]:
    def keep(name: str) -> bool:
        if name == assets_dir_name:
            return False
        return not name.startswith(".")

    return keep


def _collect_images(
    root: Path,
    job_id: int,
    jobs: JobController,
    sink: ProgressSink,
    assets_dir_name: str,
) -> list[str]:
    images: list[str] = []
    seen: set[str] = set()
    scanned = 0

    for path, is_dir in walk_entries(root, _image_dir_filter(assets_dir_name)):
        if jobs.is_cancelled(job_id):
            raise _Cancelled(scanned, 0)
        scanned += 1
        if scanned % IMAGE_PROGRESS_EVERY == 0:
            progress(
                sink,
                Phase.COLLECT_IMAGES,
                scanned,
                0,
                f"Collecting images… scanned {scanned}, found {len(images)}",
            )

        if is_dir or not is_image_path(path):
            continue

        key = str(canonicalize(path))
        if key not in seen:
            seen.add(key)
            images.append(key)

    return images


def _collect_text_files(
    root: Path,
    job_id: int,
    jobs: JobController,
    assets_dir_name: str,
) -> list[Path]:
    files: list[Path] = []
    for path, is_dir in walk_entries(root, _text_dir_filter(assets_dir_name)):
        if jobs.is_cancelled(job_id):
            raise _Cancelled()
        if not is_dir and is_text_path(path):
            files.append(path)
    return files


def _collect_references(
    root: Path,
    text_files: list[Path],
    job_id: int,
    jobs: JobController,
    sink: ProgressSink,
    assets_dir_name: str,
) -> set[str]:
    referenced: set[str] = set()
    total = max(len(text_files), 1)

    for idx, file_path in enumerate(text_files):
        if jobs.is_cancelled(job_id):
            raise _Cancelled(idx, total)
        if idx % REFS_PROGRESS_EVERY == 0:
            progress(sink, Phase.SCAN_REFS, idx, total, f"Scanning references… ({idx}/{total})")

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue

        for raw in extract_candidate_paths(content):
            if not looks_like_asset_ref(raw, assets_dir_name):
                continue
            candidate = normalize_ref_path(root, file_path, raw)
            if candidate is None:
                continue
            referenced.add(str(canonicalize(candidate)))

    return referenced


def compute_unused_images(
    workspace_root: str | os.PathLike[str],
    job_id: int,
    *,
    jobs: JobController,
    sink: ProgressSink,
    assets_dir_name: str = ASSETS_DIR_NAME,
) -> list[str]:
    """Return canonical paths of images under `workspace_root` that no text
    document references.

    Images are collected everywhere except hidden directories (the asset
    directory is always included). References are read from `.md`, `.txt`,
    `.uml` and `.puml` files outside hidden directories and outside the asset
    directory.

    Cancellation of `job_id` at any point returns an empty list and emits a
    `cancelled` event. Raises `WorkspaceNotFoundError` if the root is missing.
    """

    root = Path(workspace_root)
    if not root.exists():
        raise WorkspaceNotFoundError(workspace_root)

    sink.emit_log(f"Clean: scanning images under {workspace_root}")
    progress(sink, Phase.COLLECT_IMAGES, 0, 0, "Collecting images…")

    try:
        images = _collect_images(root, job_id, jobs, sink, assets_dir_name)
        sink.emit_log(f"Clean: collected {len(images)} images")
        progress(sink, Phase.SCAN_REFS, 0, 0, "Scanning references…")

        text_files = _collect_text_files(root, job_id, jobs, assets_dir_name)
        sink.emit_log(f"Clean: scanning {len(text_files)} text files for references")

        referenced = _collect_references(root, text_files, job_id, jobs, sink, assets_dir_name)
    except _Cancelled as c:
        sink.emit_log("Clean: cancelled")
        progress(sink, Phase.CANCELLED, c.current, c.total, "Cancelled")
        logger.info("unused image scan cancelled job_id=%s root=%s", job_id, workspace_root)
        return []

    progress(sink, Phase.COMPUTE, 1, 1, "Computing unused images…")
    unused = [p for p in images if p not in referenced]

    sink.emit_log(f"Clean: found {len(unused)} unused images")
    progress(sink, Phase.DONE, 1, 1, "Done")
    logger.info(
        "unused image scan job_id=%s root=%s images=%s references=%s unused=%s",
        job_id,
        workspace_root,
        len(images),
        len(referenced),
        len(unused),
    )
    return unused
