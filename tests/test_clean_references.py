from __future__ import annotations

import time

from xnote.clean import extract_candidate_paths
from xnote.clean.references import trim_wrapping


def test_markdown_targets_drop_titles_and_wrappers():
    text = '\n'.join(
        [
            '![a](img/a.png "Title here")',
            "[doc](<b.png>)",
            "![c]('c.png')",
        ]
    )
    assert extract_candidate_paths(text) == ["img/a.png", "b.png", "c.png"]


def test_src_attributes_any_case_and_quoting():
    text = "<img src=\"a.png\"> <IMG SRC='b.png'> <img src= c.png />"
    assert extract_candidate_paths(text) == ["a.png", "b.png", "c.png"]


def test_link_targets_come_before_src_values():
    text = '<img src="z.png">\n![](a.png)\n<img src="y.png">\n![](b.png)'
    assert extract_candidate_paths(text) == ["a.png", "b.png", "z.png", "y.png"]


def test_duplicates_are_kept():
    text = '![](a.png) <img src="a.png"> ![](a.png)'
    assert extract_candidate_paths(text) == ["a.png", "a.png", "a.png"]


def test_empty_and_unterminated_targets_are_skipped():
    assert extract_candidate_paths("![]() and [x](   )") == []
    assert extract_candidate_paths("see ](a.png and nothing else") == []
    assert extract_candidate_paths('<img src="never-closed.png') == []
    assert extract_candidate_paths("") == []


def test_unterminated_opener_swallows_up_to_next_paren():
    # The first opener takes everything up to the next `)`, hiding the link inside.
    text = "](x ![b](b.png)"
    assert extract_candidate_paths(text) == ["x"]


def test_non_ascii_text_keeps_offsets_aligned():
    text = 'İstanbul notes <img src="photo.png"> ![](pic.png)'
    assert extract_candidate_paths(text) == ["pic.png", "photo.png"]


def test_trim_wrapping_strips_one_layer_only():
    assert trim_wrapping("  <a.png>  ") == "a.png"
    assert trim_wrapping('"\'a.png\'"') == "'a.png'"
    assert trim_wrapping('"') == '"'
    assert trim_wrapping("plain.png") == "plain.png"


def test_unquoted_src_value_is_consumed_once():
    assert extract_candidate_paths("<img src=src=a.png>") == ["src=a.png>"]


def test_unclosed_quote_does_not_hide_other_quote_style():
    text = "<img src=\"a.png <img src='b.png'>"
    assert extract_candidate_paths(text) == ["b.png"]


def test_opener_without_any_closing_paren_stops_link_scan():
    assert extract_candidate_paths("](a.png ](b.png ](c.png") == []


def _best_of(fn, repeat: int = 3) -> float:
    best = float("inf")
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - t0)
    return best


def test_extraction_time_grows_linearly_on_pathological_input():
    base = 20_000
    inputs = [
        lambda n: "src=" * n,
        lambda n: 'src="' * n,
        lambda n: "src=x " * n,
        lambda n: "](" * n,
        lambda n: "](a.png) " * n,
    ]
    for make in inputs:
        small, large = make(base), make(base * 4)
        t_small = _best_of(lambda: extract_candidate_paths(small))
        t_large = _best_of(lambda: extract_candidate_paths(large))
        # 4x the input must stay well below the 16x a quadratic scan would take.
        assert t_large < max(t_small, 0.005) * 10
        assert t_large < 2.0
