"""mdBook preprocessor protocol: capability query and render request.

mdBook runs ``mdbook-wavedrom supports <renderer>`` first and only pipes the
book through us when that exits 0. The render request arrives on stdin as a
JSON array ``[context, book]``; we answer with the book alone on stdout.
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from mdbook_wavedrom import config
from mdbook_wavedrom.preprocess.book import Book, ProtocolError, decode_book, encode_book
from mdbook_wavedrom.preprocess.walker import transform

logger = logging.getLogger(__name__)


class PreprocessorContext(BaseModel):
    """Host context sent alongside the book. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    root: str
    config: dict[str, Any] = {}
    renderer: str
    mdbook_version: str


def supports_renderer(renderer: str) -> bool:
    return renderer in config.SUPPORTED_RENDERERS


def parse_input(data: str | bytes) -> tuple[PreprocessorContext, Book]:
    """Decode the ``[context, book]`` payload. Raises ProtocolError."""
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolError(f"Unable to parse the input: {e}") from e

    if not isinstance(raw, list) or len(raw) != 2:
        raise ProtocolError("Expected a JSON array of [context, book]")

    try:
        ctx = PreprocessorContext.model_validate(raw[0])
    except ValidationError as e:
        raise ProtocolError(f"Invalid preprocessor context: {e}") from e

    return ctx, decode_book(raw[1])


def run(ctx: PreprocessorContext, book: Book) -> Book:
    """Transform *book*. The context only feeds the version check."""
    if not config.is_supported_mdbook_version(ctx.mdbook_version):
        logger.warning(
            "The mdbook-wavedrom preprocessor was built against mdbook %s.x, "
            "but we're being called from version %s",
            config.SUPPORTED_MDBOOK_SERIES,
            ctx.mdbook_version,
        )

    processed = transform(book)

    changed = sum(
        1 for before, after in zip(book.iter_chapters(), processed.iter_chapters())
        if before.content != after.content
    )
    logger.debug("Rewrote wavedrom blocks in %d chapter(s) for renderer %r", changed, ctx.renderer)
    return processed


def handle_preprocessing(stdin: IO, stdout: IO[str]) -> None:
    """Read a render request from *stdin* and write the result to *stdout*.

    The whole response is serialized before anything is written, so a
    failure never leaves a partial book on *stdout*.
    """
    ctx, book = parse_input(stdin.read())
    payload = json.dumps(encode_book(run(ctx, book)))
    stdout.write(payload)
    stdout.flush()
