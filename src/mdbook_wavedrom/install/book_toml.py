"""Idempotent, format-preserving merge of our settings into book.toml."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array
from tomlkit.toml_document import TOMLDocument

from mdbook_wavedrom import config

logger = logging.getLogger(__name__)

ADDITIONAL_JS_KEY = "additional-js"


class BookConfigError(Exception):
    """Raised when book.toml cannot be read, parsed, merged or written."""


@dataclass
class MergeResult:
    added_preprocessor: bool = False
    added_files: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.added_preprocessor or bool(self.added_files)


def _get_table(parent: MutableMapping, key: str, dotted: str) -> MutableMapping | None:
    """Return parent[key] if it is a table, None if absent. Raises on other types."""
    value = parent.get(key)
    if value is None:
        return None
    if not isinstance(value, MutableMapping):
        raise BookConfigError(f"'{dotted}' must be a table, found {type(value).__name__}")
    return value


def _get_or_insert_table(parent: MutableMapping, key: str, dotted: str, super_table: bool = False) -> MutableMapping:
    table = _get_table(parent, key, dotted)
    if table is None:
        parent[key] = tomlkit.table(is_super_table=super_table)
        table = parent[key]
    return table


def has_preprocessor(doc: TOMLDocument, name: str = config.PREPROCESSOR_NAME) -> bool:
    preprocessors = _get_table(doc, "preprocessor", "preprocessor")
    if preprocessors is None:
        return False
    return isinstance(preprocessors.get(name), Mapping)


def add_preprocessor(
    doc: TOMLDocument,
    name: str = config.PREPROCESSOR_NAME,
    command: str = config.PREPROCESSOR_COMMAND,
) -> None:
    """Register ``[preprocessor.<name>]`` with its command."""
    preprocessors = _get_or_insert_table(doc, "preprocessor", "preprocessor", super_table=True)
    entry = _get_or_insert_table(preprocessors, name, f"preprocessor.{name}")
    entry["command"] = command


def additional_js(doc: TOMLDocument) -> Array | None:
    """Return ``output.html.additional-js`` or None when any level is absent."""
    output = _get_table(doc, "output", "output")
    if output is None:
        return None
    html = _get_table(output, "html", "output.html")
    if html is None:
        return None
    files = html.get(ADDITIONAL_JS_KEY)
    if files is None:
        return None
    if not isinstance(files, list):
        raise BookConfigError(
            f"'output.html.{ADDITIONAL_JS_KEY}' must be an array, found {type(files).__name__}"
        )
    return files


def has_file(files: Sequence | None, filename: str) -> bool:
    if files is None:
        return False
    return any(isinstance(entry, str) and entry == filename for entry in files)


def add_additional_files(doc: TOMLDocument, filenames: Sequence[str]) -> list[str]:
    """Append each missing filename to ``output.html.additional-js``.

    Existing entries keep their order. Returns the filenames added.
    """
    added: list[str] = []
    for filename in filenames:
        if has_file(additional_js(doc), filename):
            logger.debug("'%s' already in '%s'. Skipping", filename, ADDITIONAL_JS_KEY)
            continue

        files = additional_js(doc)
        if files is None:
            output = _get_or_insert_table(doc, "output", "output", super_table=True)
            html = _get_or_insert_table(output, "html", "output.html")
            html[ADDITIONAL_JS_KEY] = tomlkit.array()
            files = html[ADDITIONAL_JS_KEY]

        logger.debug("Adding '%s' to '%s'", filename, ADDITIONAL_JS_KEY)
        files.append(filename)
        added.append(filename)
    return added


def merge(doc: TOMLDocument, filenames: Sequence[str]) -> MergeResult:
    """Bring *doc* up to date in place. Running it twice changes nothing."""
    result = MergeResult()

    if not has_preprocessor(doc):
        logger.info("Adding preprocessor configuration")
        add_preprocessor(doc)
        result.added_preprocessor = True

    result.added_files = add_additional_files(doc, filenames)
    if result.added_files:
        logger.info("Adding additional files to configuration: %s", ", ".join(result.added_files))

    return result


def load(path: Path) -> TOMLDocument:
    if not path.exists():
        raise BookConfigError(f"Configuration file '{path}' missing")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BookConfigError(f"Can't read configuration file '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise BookConfigError(f"Configuration file '{path}' is not valid UTF-8: {e}") from e
    try:
        return tomlkit.parse(text)
    except TOMLKitError as e:
        raise BookConfigError(f"Configuration file '{path}' is not valid TOML: {e}") from e


def save(doc: TOMLDocument, path: Path) -> None:
    """Write *doc* to *path* atomically (temp file + rename)."""
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(tomlkit.dumps(doc), encoding="utf-8")
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise BookConfigError(f"Can't write configuration file '{path}': {e}") from e
