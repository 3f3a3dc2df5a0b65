from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the xnote backend.

    Values are loaded from environment variables and `.env`.

    Notes:
    - XNOTE_HOME holds `config.json` and, by default, the `doc` workspace.
    - Logs are kept OUTSIDE the workspace so scans never see them.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Workspace
    XNOTE_HOME: Path = Field(default_factory=lambda: Path.home() / ".xnote")
    XNOTE_WORKSPACE: Path | None = Field(default=None)
    # Hidden folder holding pasted images; scanned for images, never for references.
    XNOTE_ASSETS_DIR: str = Field(default=".xnote_assets")

    # API
    XNOTE_API_HOST: str = Field(default="127.0.0.1")
    XNOTE_API_PORT: int = Field(default=8124)
    XNOTE_API_CORS_ALLOW_ALL: bool = Field(default=True)
    # Events kept in memory for the UI to poll (older ones are dropped).
    XNOTE_EVENT_BUFFER: int = Field(default=2000)

    # Search
    XNOTE_SEARCH_MAX_HITS: int = Field(default=200)

    # Logging (diagnostic; stored outside the workspace)
    XNOTE_LOG_DIR: Path = Field(default=Path("_logs"))
    XNOTE_LOG_LEVEL: str = Field(default="INFO")
    # If enabled, logs every request (noisy while a scan is being polled).
    XNOTE_LOG_ACCESS: bool = Field(default=False)
    # Timed rotation retention count (days). Old log files are auto-deleted.
    XNOTE_LOG_BACKUP_COUNT: int = Field(default=14)


def load_settings() -> Settings:
    s = Settings()
    s.XNOTE_HOME = s.XNOTE_HOME.expanduser()
    if s.XNOTE_WORKSPACE is None:
        s.XNOTE_WORKSPACE = s.XNOTE_HOME / "doc"
    else:
        s.XNOTE_WORKSPACE = s.XNOTE_WORKSPACE.expanduser()
    return s
