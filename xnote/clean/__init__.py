"""Unused image reclamation.

Public API is re-exported from the submodules.
"""

from .deleter import delete_files
from .events import (
    DELETE_RESULT_EVENT,
    LOG_EVENT,
    PROGRESS_EVENT,
    SCAN_RESULT_EVENT,
    DeleteOutcome,
    EventSink,
    FanoutSink,
    LoggingSink,
    MemorySink,
    Phase,
    ProgressEvent,
    ProgressSink,
)
from .jobs import JobController
from .paths import (
    ASSETS_DIR_NAME,
    IMAGE_EXTENSIONS,
    TEXT_EXTENSIONS,
    WorkspaceNotFoundError,
    canonicalize,
    normalize_ref_path,
)
from .references import extract_candidate_paths
from .scanner import compute_unused_images

__all__ = [
    "ASSETS_DIR_NAME",
    "DELETE_RESULT_EVENT",
    "IMAGE_EXTENSIONS",
    "LOG_EVENT",
    "PROGRESS_EVENT",
    "SCAN_RESULT_EVENT",
    "TEXT_EXTENSIONS",
    "DeleteOutcome",
    "EventSink",
    "FanoutSink",
    "JobController",
    "LoggingSink",
    "MemorySink",
    "Phase",
    "ProgressEvent",
    "ProgressSink",
    "WorkspaceNotFoundError",
    "canonicalize",
    "compute_unused_images",
    "delete_files",
    "extract_candidate_paths",
    "normalize_ref_path",
]
