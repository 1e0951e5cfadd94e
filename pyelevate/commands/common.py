"""Helpers shared by the pyelevate subcommands."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any, List, Optional, Tuple

import click

from pyelevate.config import PyElevateConfig
from pyelevate.context import PyElevateContext
from pyelevate.core.parser import ManifestParser
from pyelevate.core.pipeline import analyze
from pyelevate.models.package import PackageRecord
from pyelevate.utils.filesystem import resolve_manifest_path
from pyelevate.utils.logger import get_logger

logger = get_logger("commands")

#: ``-r/--requirements`` option shared by every subcommand.
requirements_option = click.option(
    "--requirements",
    "-r",
    "requirements",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the requirements file (default: ./requirements.txt).",
)


def effective_config(ctx: PyElevateContext, **overrides: Any) -> PyElevateConfig:
    """Apply CLI overrides on top of the loaded configuration.

    ``None`` values mean the flag was not given and are ignored.
    """
    changes = {name: value for name, value in overrides.items() if value is not None}
    if not changes:
        return ctx.config
    return dataclasses.replace(ctx.config, **changes)


def load_and_analyze(
    requirements: Optional[Path],
    config: PyElevateConfig,
) -> Tuple[Path, List[PackageRecord]]:
    """Resolve the manifest, parse it and run every configured phase.

    Path resolution happens first, so a missing manifest fails before any
    network activity.

    Raises:
        ConfigError: No manifest could be found.
        FileOperationError: The manifest could not be read.
    """
    path = resolve_manifest_path(requirements)
    records = ManifestParser().parse_file(path)
    logger.info("Found %d package(s) in %s", len(records), path)

    analyze(records, config)
    return path, records
