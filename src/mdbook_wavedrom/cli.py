"""CLI: mdBook preprocessor entry point for WaveDrom diagrams.

    mdbook-wavedrom                      # preprocess: JSON on stdin -> stdout
    mdbook-wavedrom supports <renderer>  # exit 0 if supported, 1 otherwise
    mdbook-wavedrom install [DIR]        # set up book.toml and copy assets
"""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from mdbook_wavedrom import config
from mdbook_wavedrom.install.book_toml import BookConfigError
from mdbook_wavedrom.install.pipeline import install
from mdbook_wavedrom.preprocess.book import ProtocolError
from mdbook_wavedrom.preprocess.protocol import handle_preprocessing, supports_renderer

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return version("mdbook-wavedrom")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdbook-wavedrom",
        description="mdbook preprocessor to add wavedrom support",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    sub = parser.add_subparsers(dest="command")

    supports = sub.add_parser(
        "supports",
        help="Check whether a renderer is supported by this preprocessor",
    )
    supports.add_argument("renderer")

    install_cmd = sub.add_parser(
        "install",
        help="Install the required asset files and include them in the config",
    )
    install_cmd.add_argument(
        "dir",
        nargs="?",
        type=Path,
        default=Path("."),
        help="Root directory for the book, should contain the configuration file (book.toml)",
    )
    install_cmd.add_argument(
        "--force",
        action="store_true",
        help="Overwrite asset files that already exist",
    )
    return parser


def _configure_logging() -> None:
    # stdout carries the protocol payload, so logs always go to stderr
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def handle_supports(renderer: str) -> int:
    # Signal whether the renderer is supported by exiting with 0 or 1.
    return 0 if supports_renderer(renderer) else 1


def handle_install(project_dir: Path, force: bool) -> int:
    try:
        report = install(project_dir, force=force)
    except BookConfigError as e:
        logger.error("%s", e)
        return 1
    return 0 if report.ok else 1


def handle_render() -> int:
    try:
        handle_preprocessing(sys.stdin.buffer, sys.stdout)
    except ProtocolError as e:
        logger.error("%s", e)
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    _configure_logging()

    if args.command == "supports":
        sys.exit(handle_supports(args.renderer))
    elif args.command == "install":
        sys.exit(handle_install(args.dir, args.force))
    else:
        sys.exit(handle_render())


if __name__ == "__main__":
    main()
