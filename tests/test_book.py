"""Tests for the chapter tree model, its wire codec, and the tree walker."""

from __future__ import annotations

import copy

import pytest

from mdbook_wavedrom.preprocess.book import (
    Book,
    Chapter,
    PartTitle,
    ProtocolError,
    Separator,
    decode_book,
    decode_item,
    encode_book,
)
from mdbook_wavedrom.preprocess.walker import transform
from tests.helpers import make_chapter


def _shape(items):
    """Kinds, names and nesting of a decoded tree, without bodies."""
    out = []
    for item in items:
        if isinstance(item, Chapter):
            out.append(("chapter", item.name, item.extra, _shape(item.sub_items)))
        else:
            out.append(item)
    return out


class TestDecode:
    def test_decodes_all_item_kinds(self, book) -> None:
        decoded = decode_book(book)

        assert [type(i) for i in decoded.items] == [Chapter, Separator, PartTitle, Chapter]
        intro = decoded.items[0]
        assert intro.name == "Intro"
        assert intro.extra["number"] == [1]
        assert intro.extra["path"] == "intro.md"
        assert intro.sub_items[0].name == "Nested"
        assert decoded.items[2] == PartTitle(title="Reference")
        assert decoded.extra == {"__non_exhaustive": None}

    def test_null_content_is_empty(self) -> None:
        raw = make_chapter("Draft", None)
        assert decode_item(raw).content == ""

    def test_round_trip_preserves_payload(self, book) -> None:
        assert encode_book(decode_book(book)) == book

    @pytest.mark.parametrize("raw", [
        "Chapter",
        {"Appendix": {}},
        {"Chapter": {"content": "x"}},
        {"Chapter": {"name": "x", "content": 3}},
        {"Chapter": {"name": "x", "sub_items": {}}},
        {"PartTitle": ["x"]},
        {"Chapter": {"name": "x"}, "PartTitle": "y"},
        42,
    ])
    def test_rejects_malformed_items(self, raw) -> None:
        with pytest.raises(ProtocolError):
            decode_item(raw)

    def test_rejects_book_without_sections(self) -> None:
        with pytest.raises(ProtocolError):
            decode_book({"chapters": []})


class TestIterChapters:
    def test_depth_first_in_declared_order(self, book) -> None:
        names = [c.name for c in decode_book(book).iter_chapters()]
        assert names == ["Intro", "Nested", "Signals"]


class TestTransform:
    def test_rewrites_every_chapter_body(self, book) -> None:
        result = transform(decode_book(book))

        for chapter in result.iter_chapters():
            assert "```wavedrom" not in chapter.content
        nested = result.items[0].sub_items[0]
        assert "<script type=\"WaveDrom\">{signal:[{name:'clk',wave:'p..'}]}</script>" in nested.content

    def test_shape_is_unchanged(self, book) -> None:
        original = decode_book(book)
        result = transform(original)

        assert _shape(result.items) == _shape(original.items)
        assert result.extra == original.extra

    def test_input_is_not_mutated(self, book) -> None:
        original = decode_book(book)
        before = copy.deepcopy(original)
        transform(original)
        assert original == before

    def test_idempotent(self, book) -> None:
        once = transform(decode_book(book))
        assert transform(once) == once

    def test_custom_rewrite_sees_every_chapter(self) -> None:
        tree = Book(items=[
            Chapter(name="a", content="1", sub_items=[
                Chapter(name="b", content="2", sub_items=[Chapter(name="c", content="3")]),
            ]),
            Separator(),
            Chapter(name="d", content=""),
        ])
        seen = []

        def record(text):
            seen.append(text)
            return text.upper()

        transform(tree, rewrite=record)
        assert seen == ["1", "2", "3", ""]

    def test_rejects_unknown_item(self) -> None:
        with pytest.raises(TypeError):
            transform(Book(items=["Separator"]))
