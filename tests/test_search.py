from __future__ import annotations

from jsonforge.search import count_matches, find_matches, render_leaf


def _hits(value, query):
    return [(match.path, match.target) for match in find_matches(value, query)]


def test_matches_keys_and_values_case_insensitively() -> None:
    doc = {"name": "Alice", "tags": ["admin", "Name-less"], "n": 42}
    assert _hits(doc, "NAME") == [("/name", "key"), ("/tags/1", "value")]


def test_matches_are_in_document_order() -> None:
    doc = {"a": {"xa": "x"}, "b": ["x", {"x": 1}]}
    assert _hits(doc, "x") == [
        ("/a/xa", "key"),
        ("/a/xa", "value"),
        ("/b/0", "value"),
        ("/b/1/x", "key"),
    ]


def test_scalars_match_as_rendered() -> None:
    doc = {"n": 42, "ok": True, "nothing": None, "ratio": 0.5}
    assert _hits(doc, "42") == [("/n", "value")]
    assert _hits(doc, "true") == [("/ok", "value")]
    assert _hits(doc, "null") == [("/nothing", "value")]
    assert _hits(doc, "0.5") == [("/ratio", "value")]


def test_pointer_tokens_are_escaped() -> None:
    doc = {"a/b": {"~k": 1}}
    assert _hits(doc, "k") == [("/a~1b/~0k", "key")]


def test_query_is_literal_not_a_pattern() -> None:
    doc = {"pattern": "a.*b", "other": "axxb"}
    assert _hits(doc, ".*") == [("/pattern", "value")]


def test_empty_query_matches_nothing() -> None:
    assert find_matches({"a": "b"}, "") == []


def test_occurrences_are_counted_per_text() -> None:
    doc = {"s": "banana", "t": ["Ana"]}
    matches = find_matches(doc, "an")
    assert [match.occurrences for match in matches] == [2, 1]
    assert count_matches(doc, "an") == 3


def test_root_scalar_has_empty_path() -> None:
    matches = find_matches("hello", "ell")
    assert len(matches) == 1
    assert matches[0].path == ""
    assert matches[0].text == "hello"


def test_render_leaf() -> None:
    assert render_leaf("raw") == "raw"
    assert render_leaf(False) == "false"
    assert render_leaf(None) == "null"
    assert render_leaf(3) == "3"
