from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from .events import DeleteOutcome, Phase, ProgressSink, progress
from .jobs import JobController
from .paths import is_within

logger = logging.getLogger(__name__)

DELETE_PROGRESS_EVERY = 5


def _canonical_or_absolute(path: str | os.PathLike[str]) -> Path:
    p = Path(path)
    try:
        return p.resolve(strict=True)
    except (OSError, RuntimeError):
        # Missing targets still get `..` collapsed before the containment check.
        return Path(os.path.abspath(p))


def _remove_if_empty(directory: Path, root: Path) -> None:
    if directory == root:
        return
    try:
        with os.scandir(directory) as it:
            if next(it, None) is not None:
                return
        directory.rmdir()
    except OSError:
        pass


def delete_files(
    workspace_root: str | os.PathLike[str],
    paths: Sequence[str | os.PathLike[str]],
    job_id: int,
    *,
    jobs: JobController,
    sink: ProgressSink,
) -> DeleteOutcome:
    """Delete `paths` that resolve to regular files inside `workspace_root`.

    Paths outside the (canonical) root are skipped silently. Failed deletions
    only lower the `deleted` count. A parent directory emptied by a deletion
    is removed as well, except the workspace root itself.

    On cancellation the outcome counts what was deleted so far.
    """

    root = _canonical_or_absolute(workspace_root)
    requested = len(paths)
    total = max(requested, 1)
    deleted = 0

    for idx, raw in enumerate(paths):
        if jobs.is_cancelled(job_id):
            sink.emit_log("Clean: cancelled")
            progress(sink, Phase.CANCELLED, idx, total, "Cancelled")
            return DeleteOutcome(deleted=deleted, total=requested)
        if idx % DELETE_PROGRESS_EVERY == 0:
            progress(sink, Phase.DELETE, idx, total, f"Deleting… ({idx}/{total})")

        candidate = _canonical_or_absolute(raw)
        if not is_within(candidate, root):
            logger.warning("refusing to delete outside workspace: %s (root=%s)", raw, root)
            continue
        if not candidate.is_file():
            continue

        try:
            candidate.unlink()
        except OSError as e:
            logger.warning("delete failed for %s: %s", candidate, e)
            continue
        deleted += 1
        _remove_if_empty(candidate.parent, root)

    progress(sink, Phase.DONE, 1, 1, "Done")
    return DeleteOutcome(deleted=deleted, total=requested)
