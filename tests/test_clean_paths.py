from __future__ import annotations

import os
from pathlib import Path

import pytest

from xnote.clean import canonicalize, normalize_ref_path
from xnote.clean.paths import is_image_path, is_text_path, is_within, looks_like_asset_ref

from conftest import write


def test_relative_reference_resolves_against_note_directory(workspace: Path):
    note = workspace / "docs" / "sub" / "note.md"
    p = normalize_ref_path(workspace, note, "./sub/img.png")
    assert p == workspace / "docs" / "sub" / "sub" / "img.png"


def test_root_relative_reference_ignores_note_location(workspace: Path):
    note = workspace / "a" / "b" / "c" / "note.md"
    assert normalize_ref_path(workspace, note, "/img.png") == workspace / "img.png"
    assert normalize_ref_path(workspace, note, "//img.png") == workspace / "img.png"


def test_note_without_parent_falls_back_to_root(workspace: Path):
    assert normalize_ref_path(workspace, "note.md", "a.png") == workspace / "a.png"


@pytest.mark.parametrize(
    "raw",
    [
        "http://example.com/a.png",
        "HTTPS://example.com/a.png",
        "data:image/png;base64,AAAA",
        "blob:abc",
        "file:///tmp/a.png",
        "tauri://localhost/a.png",
        "asset://localhost/a.png",
        "   ",
        "",
    ],
)
def test_urls_and_empty_values_are_rejected(workspace: Path, raw: str):
    assert normalize_ref_path(workspace, workspace / "note.md", raw) is None


def test_fragment_query_and_wrappers_are_stripped(workspace: Path):
    note = workspace / "note.md"
    assert normalize_ref_path(workspace, note, "img.png#section") == workspace / "img.png"
    assert normalize_ref_path(workspace, note, "img.png?v=2#x") == workspace / "img.png"
    assert normalize_ref_path(workspace, note, "<img.png>") == workspace / "img.png"


def test_parent_segments_are_kept_until_canonicalized(workspace: Path):
    img = write(workspace, "img.png", b"x")
    p = normalize_ref_path(workspace, workspace / "docs" / "note.md", "../img.png")
    assert p == workspace / "docs" / ".." / "img.png"
    assert canonicalize(p) == img.resolve()


def test_canonicalize_falls_back_for_missing_targets(workspace: Path):
    missing = workspace / "nope" / ".." / "gone.png"
    assert canonicalize(missing) == missing


def test_extension_checks_are_case_insensitive():
    assert is_image_path("a/B.PNG")
    assert is_image_path("x.svg")
    assert not is_image_path("x.tiff")
    assert is_text_path("diagram.PUML")
    assert not is_text_path("note.markdown")


def test_asset_reference_filter():
    assert looks_like_asset_ref("/.xnote_assets/note/abc")
    assert looks_like_asset_ref("../.xnote_assets/note/abc")
    assert looks_like_asset_ref("pics/IMG.JPEG")
    assert not looks_like_asset_ref("other.md")
    assert not looks_like_asset_ref("https://example.com/a.png")
    assert not looks_like_asset_ref("notes/.xnote_assets")


def test_is_within(tmp_path: Path):
    root = tmp_path / "ws"
    assert is_within(root, root)
    assert is_within(root / "a" / "b.png", root)
    assert not is_within(tmp_path / "wsx" / "b.png", root)
    assert not is_within(tmp_path, root)


def test_is_within_needs_collapsed_paths(tmp_path: Path):
    root = tmp_path / "ws"
    root.mkdir()
    write(tmp_path, "etc/hosts", "127.0.0.1 localhost\n")
    escaping = root / ".." / "etc" / "hosts"
    # The raw path still has `root` as a prefix, so the lexical check accepts it.
    assert is_within(escaping, root)
    assert not is_within(Path(os.path.abspath(escaping)), root)
    assert not is_within(canonicalize(escaping), canonicalize(root))
