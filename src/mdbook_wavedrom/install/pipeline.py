"""Install steps: merge book.toml, then copy the bundled assets.

The config step runs first and raises BookConfigError on failure, so assets
are only copied into a project whose configuration could be updated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mdbook_wavedrom import config
from mdbook_wavedrom.install import book_toml
from mdbook_wavedrom.install.assets import FAILED, MANIFEST, Asset, InstallAction, install_assets

logger = logging.getLogger(__name__)

SAMPLE_BLOCK = """\
```wavedrom
{signal: [
  {name: 'clk', wave: 'p.....|...'},
  {name: 'dat', wave: 'x.345x|=.x', data: ['head', 'body', 'tail', 'data']},
  {name: 'req', wave: '0.1..0|1.0'},
  {},
  {name: 'ack', wave: '1.....|01.'}
]}
```"""


@dataclass
class InstallReport:
    config_path: Path
    merge: book_toml.MergeResult
    actions: list[InstallAction] = field(default_factory=list)

    @property
    def failures(self) -> list[InstallAction]:
        return [a for a in self.actions if a.status == FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures


def run_merge_config(config_path: Path, manifest: tuple[Asset, ...] = MANIFEST) -> book_toml.MergeResult:
    """Merge our settings into *config_path*, writing only if something changed."""
    logger.info("Reading configuration file %s", config_path)
    doc = book_toml.load(config_path)

    result = book_toml.merge(doc, [asset.destination for asset in manifest])
    if result.changed:
        logger.info("Saving changed configuration to %s", config_path)
        book_toml.save(doc, config_path)
    else:
        logger.info("Configuration already up to date")
    return result


def install(project_dir: Path, force: bool = False, manifest: tuple[Asset, ...] = MANIFEST) -> InstallReport:
    """Set up *project_dir* for mdbook-wavedrom. Safe to run repeatedly.

    Raises BookConfigError if book.toml is missing, invalid, or unwritable.
    Asset copy failures are reported on the returned InstallReport.
    """
    config_path = project_dir / config.BOOK_CONFIG_FILENAME
    merge_result = run_merge_config(config_path, manifest)

    actions = install_assets(project_dir, manifest, overwrite=force)
    report = InstallReport(config_path=config_path, merge=merge_result, actions=actions)

    if report.ok:
        logger.info(
            "Files & configuration for mdbook-wavedrom are installed. "
            "You can start using it in your book."
        )
        logger.info("Add a code block like:\n%s", SAMPLE_BLOCK)
    else:
        for action in report.failures:
            logger.error("Could not install %s: %s", action.path, action.detail)
    return report
