"""Walk the chapter tree and rewrite every chapter body."""

from __future__ import annotations

from collections.abc import Callable

from mdbook_wavedrom.preprocess.book import Book, BookItem, Chapter, PartTitle, Separator
from mdbook_wavedrom.preprocess.rewriter import rewrite as default_rewrite


def transform_item(item: BookItem, rewrite: Callable[[str], str] = default_rewrite) -> BookItem:
    """Return a copy of *item* with chapter bodies rewritten, recursively."""
    if isinstance(item, Chapter):
        return Chapter(
            name=item.name,
            content=rewrite(item.content or ""),
            sub_items=[transform_item(sub, rewrite) for sub in item.sub_items],
            extra=dict(item.extra),
        )
    if isinstance(item, (Separator, PartTitle)):
        return item
    raise TypeError(f"Not a book item: {item!r}")


def transform(book: Book, rewrite: Callable[[str], str] = default_rewrite) -> Book:
    """Return a new Book of identical shape with every chapter body rewritten."""
    return Book(
        items=[transform_item(item, rewrite) for item in book.items],
        extra=dict(book.extra),
    )
