"""Copy the bundled JavaScript assets into a book project."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ASSETS_DIR: Path = Path(__file__).resolve().parent.parent / "assets"

COPIED = "copied"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class Asset:
    """One bundled file: its name under ASSETS_DIR and its path in the book."""

    source: str
    destination: str


# Order matters: the loader must run before the init script in the page.
MANIFEST: tuple[Asset, ...] = (
    Asset(source="wavedrom-loader.js", destination="wavedrom-loader.js"),
    Asset(source="wavedrom-init.js", destination="wavedrom-init.js"),
)


@dataclass
class InstallAction:
    asset: Asset
    path: Path
    status: str
    detail: str = ""


def install_assets(
    dest_dir: Path,
    manifest: tuple[Asset, ...] = MANIFEST,
    overwrite: bool = False,
    source_dir: Path = ASSETS_DIR,
) -> list[InstallAction]:
    """Copy each manifest asset into *dest_dir*.

    Existing files are kept unless *overwrite* is set. A failing copy is
    recorded and the remaining assets are still attempted.
    """
    actions: list[InstallAction] = []
    announced = False

    for asset in manifest:
        target = dest_dir / asset.destination

        if target.exists() and not overwrite:
            logger.debug("'%s' already exists (Path: %s). Skipping.", asset.destination, target)
            actions.append(InstallAction(asset, target, SKIPPED, "exists"))
            continue

        if not announced:
            logger.info("Writing additional files to project directory at %s", dest_dir)
            announced = True

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source_dir / asset.source, target)
        except OSError as e:
            logger.warning("Failed to copy '%s' to %s: %s", asset.source, target, e)
            actions.append(InstallAction(asset, target, FAILED, str(e)))
            continue

        logger.debug("Wrote '%s' into %s", asset.source, target)
        actions.append(InstallAction(asset, target, COPIED))

    return actions
