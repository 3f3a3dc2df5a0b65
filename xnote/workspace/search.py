from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path

from xnote.clean.paths import ASSETS_DIR_NAME, is_text_path
from xnote.clean.scanner import walk_entries

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@dataclass(frozen=True)
class SearchHit:
    path: str
    name: str
    line: int
    preview: str

    def to_dict(self) -> dict:
        return asdict(self)


def search_text(
    root: str | os.PathLike[str],
    query: str,
    limit: int | None = None,
    *,
    max_limit: int = MAX_LIMIT,
    assets_dir_name: str = ASSETS_DIR_NAME,
) -> list[SearchHit]:
    q = (query or "").strip()
    if not q:
        return []

    q_lower = q.lower()
    max_hits = min(limit if limit is not None else DEFAULT_LIMIT, max_limit)
    if max_hits <= 0:
        return []

    def keep_dir(name: str) -> bool:
        return name != assets_dir_name and not name.startswith(".")

    results: list[SearchHit] = []
    for path, is_dir in walk_entries(Path(root), keep_dir):
        if len(results) >= max_hits:
            break
        if is_dir or not is_text_path(path):
            continue

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue

        for idx, line in enumerate(content.splitlines()):
            if len(results) >= max_hits:
                break
            if q_lower in line.lower():
                results.append(SearchHit(path=str(path), name=path.name, line=idx + 1, preview=line))

    return results
