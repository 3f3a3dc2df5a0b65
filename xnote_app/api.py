from __future__ import annotations

import json
import logging
from pathlib import Path

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from xnote.clean import FanoutSink, JobController, LoggingSink, WorkspaceNotFoundError
from xnote.clean.paths import is_within
from xnote.workspace import (
    WorkspacePermissionError,
    copy_file,
    create_folder,
    create_note,
    delete_path,
    get_config,
    get_default_workspace,
    get_files,
    move_path,
    note_path,
    read_file,
    save_config,
    save_file,
    search_text,
)

from .events import EventLog
from .service import CleanService
from .settings import Settings

_API_LOG = logging.getLogger("xnote_app.api")


class ScanIn(BaseModel):
    root: str | None = None


class DeleteIn(BaseModel):
    root: str | None = None
    paths: list[str] = []


class FileContentIn(BaseModel):
    path: str
    content: str


class NewNoteIn(BaseModel):
    dir: str | None = None
    name: str


class NewFolderIn(BaseModel):
    parent: str | None = None
    name: str


class TransferIn(BaseModel):
    source: str
    target: str


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="xnote backend API", version="0.1.0")

    if settings.XNOTE_API_CORS_ALLOW_ALL:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    jobs = JobController()
    event_log = EventLog(maxlen=settings.XNOTE_EVENT_BUFFER)
    service = CleanService(
        jobs,
        FanoutSink(event_log, LoggingSink()),
        assets_dir_name=settings.XNOTE_ASSETS_DIR,
    )
    app.state.jobs = jobs
    app.state.events = event_log
    app.state.clean = service

    def _root_or_default(raw: str | None) -> Path:
        s = str(raw or "").strip()
        if s:
            return Path(s)
        return Path(settings.XNOTE_WORKSPACE or settings.XNOTE_HOME / "doc")

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/")
    def root():
        return {
            "service": "xnote backend API",
            "ok": True,
            "endpoints": {
                "health": "/health",
                "workspace": "/workspace",
                "config": "/config",
                "files": "/files?path=...",
                "file_content": "/files/content?path=...",
                "notes": "/notes",
                "folders": "/folders",
                "search": "/search?q=...",
                "clean_scan": "/clean/unused-images",
                "clean_events": "/clean/events?after=...",
                "docs": "/docs",
            },
        }

    @app.get("/workspace")
    def workspace():
        try:
            path = get_default_workspace(settings.XNOTE_HOME)
        except WorkspacePermissionError as e:
            raise HTTPException(status_code=403, detail=str(e))
        return {"path": str(path)}

    @app.get("/config")
    def read_config():
        try:
            text = get_config(settings.XNOTE_HOME)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to read config: {e}")
        return {"config": text}

    @app.put("/config")
    def write_config(config: str = Body(..., embed=True)):
        try:
            json.loads(config)
        except ValueError:
            raise HTTPException(status_code=400, detail="Config must be valid JSON")
        try:
            path = save_config(settings.XNOTE_HOME, config)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to write config: {e}")
        return {"ok": True, "path": str(path)}

    @app.get("/files")
    def files(path: str | None = None):
        target = _root_or_default(path)
        try:
            nodes = get_files(target)
        except WorkspaceNotFoundError:
            raise HTTPException(status_code=404, detail="Directory does not exist")
        return {"path": str(target), "nodes": [n.to_dict() for n in nodes]}

    @app.get("/search")
    def search(q: str = "", limit: int | None = Query(None, ge=1), root: str | None = None):
        hits = search_text(
            _root_or_default(root),
            q,
            limit,
            max_limit=settings.XNOTE_SEARCH_MAX_HITS,
            assets_dir_name=settings.XNOTE_ASSETS_DIR,
        )
        return {"results": [h.to_dict() for h in hits]}

    # Note editing is confined to the workspace; relative paths are taken
    # from the workspace root.
    def _workspace_path(raw: str | None, *, allow_root: bool = True) -> Path:
        base = _root_or_default(None).resolve()
        s = str(raw or "").strip()
        target = (base / s).resolve() if s else base
        if not is_within(target, base) or (target == base and not allow_root):
            raise HTTPException(status_code=400, detail="Invalid path")
        return target

    def _entry_name(name: str) -> str:
        s = name.strip()
        if not s:
            raise HTTPException(status_code=400, detail="Name is required")
        return s

    @app.get("/files/content")
    def file_content(path: str):
        target = _workspace_path(path, allow_root=False)
        try:
            content = read_file(target)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="File not found")
        except (IsADirectoryError, UnicodeDecodeError):
            raise HTTPException(status_code=400, detail="Not a text file")
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to read file: {e}")
        return {"path": str(target), "content": content}

    @app.put("/files/content")
    def write_file_content(body: FileContentIn):
        target = _workspace_path(body.path, allow_root=False)
        try:
            save_file(target, body.content)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Directory does not exist")
        except IsADirectoryError:
            raise HTTPException(status_code=400, detail="Not a text file")
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to write file: {e}")
        return {"ok": True, "path": str(target)}

    @app.post("/notes", status_code=201)
    def new_note(body: NewNoteIn):
        parent = _workspace_path(body.dir)
        target = _workspace_path(str(note_path(parent, _entry_name(body.name))), allow_root=False)
        try:
            path = create_note(target.parent, target.name)
        except FileExistsError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Directory does not exist")
        return {"path": str(path)}

    @app.post("/folders", status_code=201)
    def new_folder(body: NewFolderIn):
        parent = _workspace_path(body.parent)
        target = _workspace_path(str(parent / _entry_name(body.name)), allow_root=False)
        try:
            path = create_folder(target.parent, target.name)
        except FileExistsError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {"path": str(path)}

    @app.post("/files/move")
    def move(body: TransferIn):
        source = _workspace_path(body.source, allow_root=False)
        target = _workspace_path(body.target, allow_root=False)
        try:
            move_path(source, target)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Source does not exist")
        except OSError as e:
            raise HTTPException(status_code=400, detail=f"Failed to move: {e}")
        return {"ok": True, "path": str(target)}

    @app.post("/files/copy")
    def copy(body: TransferIn):
        source = _workspace_path(body.source, allow_root=False)
        target = _workspace_path(body.target, allow_root=False)
        try:
            copy_file(source, target)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Source does not exist")
        except OSError as e:
            raise HTTPException(status_code=400, detail=f"Failed to copy: {e}")
        return {"ok": True, "path": str(target)}

    @app.delete("/files")
    def remove(path: str):
        target = _workspace_path(path, allow_root=False)
        try:
            delete_path(target)
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Not found")
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete: {e}")
        return {"ok": True}

    @app.post("/clean/unused-images")
    def find_unused_images(body: ScanIn | None = None):
        target = _root_or_default(body.root if body else None)
        try:
            return service.find_unused_images(target)
        except WorkspaceNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/clean/unused-images/scan", status_code=202)
    def start_scan(body: ScanIn | None = None):
        target = _root_or_default(body.root if body else None)
        job = service.start_find_unused_images_scan(target)
        _API_LOG.info("clean.scan started job_id=%s root=%s", job.job_id, target)
        return job.ack()

    @app.post("/clean/unused-images/delete", status_code=202)
    def start_delete(body: DeleteIn):
        target = _root_or_default(body.root)
        job = service.start_delete_unused_images(target, body.paths)
        _API_LOG.info("clean.delete started job_id=%s root=%s paths=%s", job.job_id, target, len(body.paths))
        return job.ack()

    @app.post("/clean/cancel")
    def cancel():
        return {"cancelled": service.cancel_current_job()}

    @app.get("/clean/events")
    def clean_events(after: int = Query(0, ge=0)):
        return {
            "events": event_log.since(after),
            "last_seq": event_log.last_seq,
            "job_id": jobs.current_job_id,
        }

    return app
