"""Upgrade command implementation for pyelevate.

Resolves every package, selects each one with a pending upgrade and
rewrites the requirements file in place. The original file is backed up
first and every write is atomic.

Typical usage::

    $ pyelevate upgrade --dry-run
    $ pyelevate upgrade --yes --lock
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.markup import escape

from pyelevate.context import PyElevateContext, pass_context
from pyelevate.commands.common import effective_config, load_and_analyze, requirements_option
from pyelevate.core.selection import select_upgradable, selected_records
from pyelevate.core.simulator import UpgradeSimulator
from pyelevate.core.writer import write_upgrade
from pyelevate.utils.console import (
    colorize_risk,
    colorize_status,
    confirm,
    get_raw_console,
    print_info,
    print_success,
    print_table,
    print_warning,
)
from pyelevate.utils.logger import get_logger

logger = get_logger("commands.upgrade")


@click.command()
@requirements_option
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would change without writing any file.",
)
@click.option(
    "--lock",
    is_flag=True,
    help="Also write <requirements>.lock with exact versions.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Apply without asking for confirmation.",
)
@pass_context
def upgrade(
    ctx: PyElevateContext,
    requirements: Optional[Path],
    dry_run: bool,
    lock: bool,
    yes: bool,
) -> None:
    """Upgrade packages in a requirements file to their latest releases.

    Version rules keep their operator: ``==1.0`` becomes ``==<latest>``,
    ``>=1.0`` becomes ``>=<latest>``. Git, local and URL requirements are
    never touched.
    """
    config = effective_config(ctx)
    path, records = load_and_analyze(requirements, config)

    select_upgradable(records)
    targets = selected_records(records)

    if not targets:
        print_success("All packages are up to date")
        return

    print_table(
        [
            [
                escape(record.name),
                escape(record.current_version),
                escape(record.latest_version or ""),
                colorize_status(record.status),
            ]
            for record in targets
        ],
        headers=["Package", "Current", "Latest", "Status"],
        title=f"Available upgrades: {len(targets)}",
    )

    risk = UpgradeSimulator().simulate_upgrade(records).risk_level
    get_raw_console().print(f"Upgrade risk: {colorize_risk(risk)}")

    if dry_run:
        print_info("Dry run: no files were modified")
        return

    question = f"Upgrade {len(targets)} package(s) in {escape(str(path))}?"
    if not yes and not confirm(question):
        print_warning("Upgrade cancelled")
        return

    result = write_upgrade(path, records, lock=lock)

    print_success(
        f"Updated {len(result.upgraded)} package(s) in "
        f"{escape(str(result.manifest_path))}"
    )
    print_info(f"Backup: {escape(str(result.backup_path))}")
    if result.lock_path is not None:
        print_info(f"Lock file: {escape(str(result.lock_path))}")
