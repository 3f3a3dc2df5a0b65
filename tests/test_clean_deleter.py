from __future__ import annotations

import os
from pathlib import Path

import pytest

from xnote.clean import DeleteOutcome, JobController, MemorySink, Phase, delete_files

from conftest import write


def _delete(root: Path, paths: list, jobs: JobController | None = None, sink: MemorySink | None = None) -> DeleteOutcome:
    jobs = jobs or JobController()
    sink = sink if sink is not None else MemorySink()
    return delete_files(root, [str(p) for p in paths], jobs.start_new_job(), jobs=jobs, sink=sink)


def test_paths_outside_workspace_are_skipped_not_fatal(tmp_path: Path, workspace: Path):
    a = write(workspace, "a.png", b"a")
    b = write(workspace, "b.png", b"b")
    hosts = write(tmp_path, "etc/hosts", "127.0.0.1 localhost\n")
    crafted = f"{workspace}/../etc/hosts"

    outcome = _delete(workspace, [a, crafted, b])

    assert outcome == DeleteOutcome(deleted=2, total=3)
    assert hosts.exists()
    assert not a.exists() and not b.exists()


def test_symlink_escaping_the_workspace_is_refused(tmp_path: Path, workspace: Path):
    secret = write(tmp_path, "outside/secret.png", b"s")
    link = workspace / "link.png"
    try:
        os.symlink(secret, link)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    outcome = _delete(workspace, [link])

    assert outcome.deleted == 0
    assert secret.exists()
    assert link.is_symlink()


def test_sibling_directory_with_shared_prefix_is_outside(tmp_path: Path, workspace: Path):
    sibling = write(tmp_path, "ws-other/x.png", b"x")
    assert _delete(workspace, [sibling]).deleted == 0
    assert sibling.exists()


def test_emptied_leaf_directory_is_removed(workspace: Path):
    only = write(workspace, "cat/only.png", b"x")
    keep_a = write(workspace, "keep/a.png", b"x")
    keep_b = write(workspace, "keep/b.png", b"x")

    outcome = _delete(workspace, [only, keep_a])

    assert outcome.deleted == 2
    assert not (workspace / "cat").exists()
    assert (workspace / "keep").is_dir()
    assert keep_b.exists()


def test_workspace_root_is_never_removed(workspace: Path):
    a = write(workspace, "a.png", b"x")
    assert _delete(workspace, [a]).deleted == 1
    assert workspace.is_dir()


def test_missing_files_and_directories_are_not_counted(workspace: Path):
    folder = workspace / "folder"
    folder.mkdir()
    write(workspace, "folder/x.png", b"x")

    outcome = _delete(workspace, [workspace / "gone.png", folder])

    assert outcome == DeleteOutcome(deleted=0, total=2)
    assert folder.is_dir()


def test_cancelled_job_deletes_nothing(workspace: Path):
    files = [write(workspace, f"{i}.png", b"x") for i in range(3)]
    jobs = JobController()
    job_id = jobs.start_new_job()
    jobs.request_cancel()
    sink = MemorySink()

    outcome = delete_files(workspace, [str(p) for p in files], job_id, jobs=jobs, sink=sink)

    assert outcome == DeleteOutcome(deleted=0, total=3)
    assert all(p.exists() for p in files)
    assert sink.phases() == [Phase.CANCELLED]
    assert sink.logs == ["Clean: cancelled"]


def test_cancel_mid_batch_returns_partial_count(workspace: Path):
    files = [write(workspace, f"img/{i:02d}.png", b"x") for i in range(8)]
    jobs = JobController()

    class _CancelOnSecondBatch(MemorySink):
        def emit_progress(self, event):
            super().emit_progress(event)
            if event.phase == Phase.DELETE and event.current == 5:
                jobs.request_cancel()

    sink = _CancelOnSecondBatch()
    outcome = _delete(workspace, files, jobs, sink)

    # The item that triggered the cancel is still processed in the same step.
    assert outcome == DeleteOutcome(deleted=6, total=8)
    assert sum(p.exists() for p in files) == 2
    last = sink.progress[-1]
    assert (last.phase, last.current, last.total) == (Phase.CANCELLED, 6, 8)


def test_progress_events_and_final_done(workspace: Path):
    files = [write(workspace, f"img/{i:02d}.png", b"x") for i in range(12)]
    write(workspace, "img/keep.md", "x")
    sink = MemorySink()

    outcome = _delete(workspace, files, sink=sink)

    assert outcome.deleted == 12
    deletes = [(e.current, e.total) for e in sink.progress if e.phase == Phase.DELETE]
    assert deletes == [(0, 12), (5, 12), (10, 12)]
    done = sink.progress[-1]
    assert (done.phase, done.current, done.total) == (Phase.DONE, 1, 1)


def test_empty_request_still_reports_done(workspace: Path):
    sink = MemorySink()
    assert _delete(workspace, [], sink=sink) == DeleteOutcome(deleted=0, total=0)
    assert sink.phases() == [Phase.DONE]


def test_failed_unlink_lowers_count_and_batch_continues(workspace: Path, monkeypatch):
    locked = write(workspace, "locked/a.png", b"x")
    b = write(workspace, "b.png", b"x")
    c = write(workspace, "c.png", b"x")

    real_unlink = Path.unlink

    def _unlink(self, *args, **kwargs):
        if self.name == "a.png":
            raise PermissionError(13, "Permission denied", str(self))
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", _unlink)
    sink = MemorySink()

    outcome = _delete(workspace, [locked, b, c], sink=sink)

    assert outcome == DeleteOutcome(deleted=2, total=3)
    assert locked.exists()
    assert (workspace / "locked").is_dir()
    assert not b.exists() and not c.exists()
    assert sink.phases()[-1] == Phase.DONE
