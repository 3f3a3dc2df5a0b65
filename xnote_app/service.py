"""
Clean job service

Runs unused image scans and deletions for the API and CLI, either inline
or on a background worker thread, and reports through an event sink.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from xnote.clean import (
    ASSETS_DIR_NAME,
    DeleteOutcome,
    EventSink,
    JobController,
    Phase,
    ProgressEvent,
    WorkspaceNotFoundError,
    compute_unused_images,
    delete_files,
)

logger = logging.getLogger(__name__)


@dataclass
class BackgroundJob:
    job_id: int
    thread: threading.Thread

    def ack(self) -> dict[str, Any]:
        return {"ok": True, "job_id": self.job_id}

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker; returns True once it has finished."""
        self.thread.join(timeout)
        return not self.thread.is_alive()


class CleanService:
    def __init__(
        self,
        jobs: JobController,
        sink: EventSink,
        *,
        assets_dir_name: str = ASSETS_DIR_NAME,
    ):
        self.jobs = jobs
        self.sink = sink
        self.assets_dir_name = assets_dir_name

    def _spawn(self, name: str, target) -> threading.Thread:
        thread = threading.Thread(target=target, name=name, daemon=True)
        thread.start()
        return thread

    def _emit_error(self, err: object) -> None:
        self.sink.emit_log(f"Clean: error: {err}")
        self.sink.emit_progress(ProgressEvent(phase=Phase.ERROR, current=1, total=1, message="Error"))

    def find_unused_images(self, workspace_root: str | os.PathLike[str]) -> dict[str, list[str]]:
        """Scan synchronously. Raises `WorkspaceNotFoundError`."""
        job_id = self.jobs.start_new_job()
        images = compute_unused_images(
            workspace_root,
            job_id,
            jobs=self.jobs,
            sink=self.sink,
            assets_dir_name=self.assets_dir_name,
        )
        return {"images": images}

    def start_find_unused_images_scan(self, workspace_root: str | os.PathLike[str]) -> BackgroundJob:
        job_id = self.jobs.start_new_job()

        def _run():
            try:
                images = compute_unused_images(
                    workspace_root,
                    job_id,
                    jobs=self.jobs,
                    sink=self.sink,
                    assets_dir_name=self.assets_dir_name,
                )
            except WorkspaceNotFoundError as e:
                self._emit_error(e)
                return
            except Exception as e:
                logger.exception("unused image scan failed job_id=%s", job_id)
                self._emit_error(e)
                return
            self.sink.emit_result("scan-result", {"images": images})

        thread = self._spawn(f"xnote-scan-{job_id}", _run)
        return BackgroundJob(job_id=job_id, thread=thread)

    def delete_unused_images(self, workspace_root: str | os.PathLike[str], paths: Sequence[str]) -> DeleteOutcome:
        job_id = self.jobs.start_new_job()
        return delete_files(workspace_root, list(paths), job_id, jobs=self.jobs, sink=self.sink)

    def start_delete_unused_images(
        self,
        workspace_root: str | os.PathLike[str],
        paths: Sequence[str],
    ) -> BackgroundJob:
        job_id = self.jobs.start_new_job()
        paths = list(paths)

        def _run():
            self.sink.emit_log("Clean: deleting unused images…")
            total = len(paths)
            try:
                outcome = delete_files(workspace_root, paths, job_id, jobs=self.jobs, sink=self.sink)
                deleted = outcome.deleted
            except Exception as e:
                logger.exception("unused image delete failed job_id=%s", job_id)
                self._emit_error(e)
                deleted = 0
            self.sink.emit_log(f"Clean: deleted {deleted} / {total}")
            self.sink.emit_result("delete-result", {"deleted": deleted, "total": total})

        thread = self._spawn(f"xnote-delete-{job_id}", _run)
        return BackgroundJob(job_id=job_id, thread=thread)

    def cancel_current_job(self) -> bool:
        cancelled = self.jobs.request_cancel()
        logger.info("cancel requested job_id=%s accepted=%s", self.jobs.current_job_id, cancelled)
        return cancelled
