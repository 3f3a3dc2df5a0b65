from __future__ import annotations

import re

_WRAPPERS = (("<", ">"), ('"', '"'), ("'", "'"))
_SPACE_RUN = re.compile(r"\s*")
_TOKEN = re.compile(r"\S*")


def trim_wrapping(value: str) -> str:
    """Trim whitespace and strip one layer of `<...>`, `"..."` or `'...'`."""

    out = value.strip()
    for start, end in _WRAPPERS:
        if len(out) >= 2 and out.startswith(start) and out.endswith(end):
            out = out[1:-1]
            break
    return out.strip()


def _link_targets(text: str) -> list[str]:
    out: list[str] = []
    i = 0
    while True:
        at = text.find("](", i)
        if at < 0:
            break
        start = at + 2
        end = text.find(")", start)
        if end < 0:
            # No `)` after this opener means no later opener can close either.
            break
        raw = text[start:end]
        parts = raw.split()
        raw = trim_wrapping(parts[0] if parts else raw)
        if raw:
            out.append(raw)
        i = end + 1
    return out


def _src_values(text: str) -> list[str]:
    out: list[str] = []
    # Offsets into `lower` must line up with `text`.
    lower = text.lower()
    if len(lower) != len(text):
        lower = "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)

    # Quote characters with no closing match left in the rest of the text.
    unclosed: set[str] = set()
    j = 0
    n = len(text)
    while True:
        pos = lower.find("src=", j)
        if pos < 0:
            break
        at = pos + 4
        if at >= n:
            break

        k = _SPACE_RUN.match(text, at).end()
        quote = text[k] if k < n else ""
        if quote in ('"', "'"):
            end = -1 if quote in unclosed else text.find(quote, k + 1)
            if end >= 0:
                raw = trim_wrapping(text[k + 1 : end])
                if raw:
                    out.append(raw)
                j = end + 1
                continue
            unclosed.add(quote)
            j = at
            continue

        # Unquoted: one token, and scanning resumes after it.
        m = _TOKEN.match(text, k).end()
        raw = trim_wrapping(text[k:m])
        if raw:
            out.append(raw)
        j = m
    return out


def extract_candidate_paths(text: str) -> list[str]:
    """Return raw path-like references found in a document.

    Markdown link targets (`[label](target "title")`) come first, in document
    order, followed by HTML/XML `src=` attribute values, in document order.
    Duplicates are kept.
    """

    if not text:
        return []
    return _link_targets(text) + _src_values(text)
