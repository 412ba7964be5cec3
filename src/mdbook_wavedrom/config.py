"""Configuration loaded from environment variables."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


# Logging
LOG_LEVEL: str = os.getenv("MDBOOK_WAVEDROM_LOG_LEVEL", "INFO").upper()

# Book project layout
BOOK_CONFIG_FILENAME: str = "book.toml"

# Preprocessor identity, as registered in book.toml
PREPROCESSOR_NAME: str = "wavedrom"
PREPROCESSOR_COMMAND: str = "mdbook-wavedrom"

# Info string of the fenced code blocks we rewrite
FENCE_LANGUAGE: str = "wavedrom"

# Host compatibility
SUPPORTED_RENDERERS: tuple[str, ...] = ("html",)
SUPPORTED_MDBOOK_SERIES: str = "0.4"


def is_supported_mdbook_version(version: str) -> bool:
    """Return True if *version* belongs to the mdBook series we were built for.

    "0.4.37" and "0.4" match the "0.4" series; "0.5.0" and "0.40.1" do not.
    """
    return version == SUPPORTED_MDBOOK_SERIES or version.startswith(SUPPORTED_MDBOOK_SERIES + ".")
