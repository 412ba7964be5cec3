"""Rewrite ```wavedrom fenced blocks into WaveDrom script elements."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from mdbook_wavedrom import config

logger = logging.getLogger(__name__)

# One element per line, terminator included. Matches markdown-it's own
# notion of a line break (\r\n, \r, \n), so token.map indexes line up.
_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z")


def _split_lines(text: str) -> list[str]:
    return _LINE_RE.findall(text)


def _line_ending(line: str) -> str:
    return line[len(line.rstrip("\r\n")):]


@dataclass(frozen=True)
class FencedBlock:
    """A terminated diagram fence located in a chapter body.

    start_line/end_line are 0-based, end exclusive, and cover the opening
    fence line through the closing fence line.
    """

    start_line: int
    end_line: int
    prefix: str
    payload: str
    line_ending: str

    def render(self) -> str:
        return f'{self.prefix}<script type="WaveDrom">{self.payload}</script>{self.line_ending}'


class WavedromRewriter:
    """Finds diagram fences with a CommonMark parser and swaps in embeds.

    The parser enables the same block extensions as mdBook so that tables,
    footnote definitions and task lists split the document the way the host
    will.
    """

    def __init__(self, language: str = config.FENCE_LANGUAGE) -> None:
        self._language = language
        self._md = (
            MarkdownIt("commonmark")
            .enable("table")
            .enable("strikethrough")
            .use(footnote_plugin)
            .use(tasklists_plugin)
        )

    def _scan(self, text: str) -> tuple[list[str], list[FencedBlock]]:
        lines = _split_lines(text)
        blocks: list[FencedBlock] = []

        for token in self._md.parse(text):
            if token.type != "fence" or token.info.strip() != self._language:
                continue
            if not token.map:
                continue

            start, end = token.map
            # A closed fence spans opening + payload + closing lines. Anything
            # shorter ran into the end of its container without a closer.
            if end - start < len(_split_lines(token.content)) + 2:
                logger.debug("Unterminated %s fence at line %d left as-is", self._language, start + 1)
                continue

            opening = lines[start]
            prefix = opening[: opening.index(token.markup)]
            payload_lines = lines[start + 1:end - 1]
            # The first payload line joins the opening line, so it drops the
            # container prefix the host strips from every other line.
            if payload_lines and prefix and payload_lines[0].startswith(prefix):
                payload_lines[0] = payload_lines[0][len(prefix):]
            payload = "".join(payload_lines)
            if payload_lines:
                payload = payload[: len(payload) - len(_line_ending(payload_lines[-1]))]
            blocks.append(
                FencedBlock(
                    start_line=start,
                    end_line=end,
                    prefix=prefix,
                    payload=payload,
                    line_ending=_line_ending(lines[end - 1]),
                )
            )

        return lines, blocks

    def find_blocks(self, text: str) -> list[FencedBlock]:
        """Return every terminated diagram fence in *text*, in document order."""
        return self._scan(text)[1]

    def rewrite(self, text: str) -> str:
        """Replace each diagram fence in *text* with a WaveDrom script element.

        Text without a terminated diagram fence is returned unchanged.
        """
        lines, blocks = self._scan(text)
        if not blocks:
            return text

        out: list[str] = []
        cursor = 0
        for block in blocks:
            out.extend(lines[cursor:block.start_line])
            out.append(block.render())
            cursor = block.end_line
            logger.debug(
                "Rewrote %s block at lines %d-%d (%d chars)",
                self._language, block.start_line + 1, block.end_line, len(block.payload),
            )
        out.extend(lines[cursor:])
        return "".join(out)


# Lazy-initialized default rewriter (parser setup is not free)
_default_rewriter: WavedromRewriter | None = None


def rewrite(text: str) -> str:
    """Rewrite *text* with the default ``wavedrom`` rewriter."""
    global _default_rewriter
    if _default_rewriter is None:
        _default_rewriter = WavedromRewriter()
    return _default_rewriter.rewrite(text)
