from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from .settings import Settings

LOG_FILE_NAME = "xnote_api.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_log_dir(settings: Settings) -> Path:
    """Absolute `XNOTE_LOG_DIR`; relative values live under `XNOTE_HOME`.

    The default workspace is `<home>/doc`, so `<home>/_logs` is never scanned.
    """

    log_dir = Path(settings.XNOTE_LOG_DIR).expanduser()
    if log_dir.is_absolute():
        return log_dir
    return Path(settings.XNOTE_HOME).expanduser() / log_dir


def setup_api_logging(settings: Settings) -> Path:
    """Send root and uvicorn logging to a daily rotating file plus the console.

    Returns the log file path. Root handlers are replaced on every call, so
    a restarted server does not write each line twice. Uvicorn's access log
    stays off unless `XNOTE_LOG_ACCESS` is set; the UI polls `/clean/events`
    several times a second while a job runs.
    """

    log_dir = resolve_log_dir(settings)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    level_name = (settings.XNOTE_LOG_LEVEL or "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        backupCount=max(0, settings.XNOTE_LOG_BACKUP_COUNT),
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in (file_handler, console_handler):
        h.setLevel(level)
        h.setFormatter(formatter)
        root.addHandler(h)
    root.setLevel(level)

    for name in _UVICORN_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.setLevel(level)
        lg.propagate = True
    logging.getLogger("uvicorn.access").disabled = not settings.XNOTE_LOG_ACCESS

    logging.getLogger("xnote_app").info(
        "logging to %s (level=%s, access=%s)", log_file, level_name, settings.XNOTE_LOG_ACCESS
    )
    return log_file
