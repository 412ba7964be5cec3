"""mdBook chapter tree: tagged-variant records and the JSON wire codec.

mdBook serializes a book as::

    {"sections": [ITEM, ...], "__non_exhaustive": null}

where each ITEM is one of::

    {"Chapter": {"name": ..., "content": ..., "sub_items": [ITEM, ...], ...}}
    "Separator"
    {"PartTitle": "..."}

Fields we do not interpret (chapter numbers, paths, parent names, and any
keys a newer mdBook adds) are carried through verbatim in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

_SEPARATOR_TAG = "Separator"
_CHAPTER_TAG = "Chapter"
_PART_TITLE_TAG = "PartTitle"


class ProtocolError(Exception):
    """Raised when the host's payload cannot be decoded."""


@dataclass
class Chapter:
    """A chapter: text body plus nested sub-chapters."""

    name: str
    content: str = ""
    sub_items: list[BookItem] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Separator:
    """Structural spacer between chapter groups."""


@dataclass(frozen=True)
class PartTitle:
    """Heading that opens a part of the book."""

    title: str


BookItem = Union[Chapter, Separator, PartTitle]


@dataclass
class Book:
    """The whole chapter tree plus top-level wire keys we pass through."""

    items: list[BookItem] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def iter_chapters(self):
        """Yield every Chapter in declared order, depth first."""
        stack = list(reversed(self.items))
        while stack:
            item = stack.pop()
            if isinstance(item, Chapter):
                yield item
                stack.extend(reversed(item.sub_items))


# ── Decoding ──


def _decode_chapter(raw: Any) -> Chapter:
    if not isinstance(raw, dict):
        raise ProtocolError(f"Chapter must be an object, got {type(raw).__name__}")
    if "name" not in raw or not isinstance(raw["name"], str):
        raise ProtocolError("Chapter is missing a string 'name'")

    content = raw.get("content")
    if content is None:
        content = ""
    elif not isinstance(content, str):
        raise ProtocolError(f"Chapter {raw['name']!r} has non-string content")

    sub_items = raw.get("sub_items")
    if sub_items is None:
        sub_items = []
    elif not isinstance(sub_items, list):
        raise ProtocolError(f"Chapter {raw['name']!r} has non-list sub_items")

    extra = {k: v for k, v in raw.items() if k not in ("name", "content", "sub_items")}
    return Chapter(
        name=raw["name"],
        content=content,
        sub_items=[decode_item(sub) for sub in sub_items],
        extra=extra,
    )


def decode_item(raw: Any) -> BookItem:
    """Decode one wire item by its discriminant."""
    if raw == _SEPARATOR_TAG:
        return Separator()
    if isinstance(raw, dict) and len(raw) == 1:
        (tag, body), = raw.items()
        if tag == _CHAPTER_TAG:
            return _decode_chapter(body)
        if tag == _PART_TITLE_TAG:
            if not isinstance(body, str):
                raise ProtocolError("PartTitle must be a string")
            return PartTitle(title=body)
    raise ProtocolError(f"Unknown book item: {str(raw)[:80]}")


def decode_book(raw: Any) -> Book:
    """Decode the book object of the host's payload."""
    if not isinstance(raw, dict):
        raise ProtocolError(f"Book must be an object, got {type(raw).__name__}")
    sections = raw.get("sections")
    if not isinstance(sections, list):
        raise ProtocolError("Book is missing a 'sections' list")
    extra = {k: v for k, v in raw.items() if k != "sections"}
    return Book(items=[decode_item(item) for item in sections], extra=extra)


# ── Encoding ──


def encode_item(item: BookItem) -> Any:
    """Encode one item back into its tagged wire form."""
    if isinstance(item, Chapter):
        return {
            _CHAPTER_TAG: {
                "name": item.name,
                "content": item.content,
                **item.extra,
                "sub_items": [encode_item(sub) for sub in item.sub_items],
            }
        }
    if isinstance(item, Separator):
        return _SEPARATOR_TAG
    if isinstance(item, PartTitle):
        return {_PART_TITLE_TAG: item.title}
    raise TypeError(f"Not a book item: {item!r}")


def encode_book(book: Book) -> dict[str, Any]:
    """Encode *book* as the object mdBook expects on stdout."""
    return {"sections": [encode_item(item) for item in book.items], **book.extra}
