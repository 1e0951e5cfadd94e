"""Check command implementation for pyelevate.

Reports, for every package in a requirements file, the latest release on
the package index, the kind of upgrade it would be and whether the
declared version has known advisories. Nothing is modified.

Typical usage::

    $ pyelevate check
    $ pyelevate check -r requirements/prod.txt --outdated-only
    $ pyelevate check --format json > report.json
    $ pyelevate check --popularity --sort popularity
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click
from rich.markup import escape

from pyelevate.context import PyElevateContext, pass_context
from pyelevate.commands.common import effective_config, load_and_analyze, requirements_option
from pyelevate.core.dependency_graph import DependencyGraph
from pyelevate.core.selection import SortBy, filter_records, sort_records
from pyelevate.models import Conflict, PackageRecord, UpgradeStats
from pyelevate.utils.console import (
    colorize_security,
    colorize_status,
    print_stats,
    print_table,
    print_warning,
)
from pyelevate.utils.logger import get_logger

logger = get_logger("commands.check")


@click.command()
@requirements_option
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only packages with an available upgrade.",
)
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice([key.value for key in SortBy], case_sensitive=False),
    default=SortBy.STATUS.value,
    help="Row order of the table.",
)
@click.option(
    "--filter",
    "query",
    default="",
    help="Fuzzy filter on package names.",
)
@click.option(
    "--security/--no-security",
    default=None,
    help="Look up security advisories (default from config).",
)
@click.option(
    "--popularity/--no-popularity",
    default=None,
    help="Fetch download statistics (default from config).",
)
@click.option(
    "--changelog/--no-changelog",
    default=None,
    help="Fetch changelog summaries (default from config).",
)
@pass_context
def check(
    ctx: PyElevateContext,
    requirements: Optional[Path],
    output_format: str,
    outdated_only: bool,
    sort_by: str,
    query: str,
    security: Optional[bool],
    popularity: Optional[bool],
    changelog: Optional[bool],
) -> None:
    """Check a requirements file for available upgrades."""
    config = effective_config(
        ctx,
        check_security=security,
        fetch_popularity=popularity,
        fetch_changelog=changelog,
    )
    path, records = load_and_analyze(requirements, config)

    conflicts = DependencyGraph.detect_conflicts(records)
    stats = UpgradeStats.from_records(records, conflicts=len(conflicts))

    shown = filter_records(sort_records(records, SortBy(sort_by.lower())), query)
    if outdated_only:
        shown = [record for record in shown if record.has_update()]

    if output_format.lower() == "json":
        click.echo(json.dumps(_build_json(path, stats, shown, conflicts), indent=2))
        return

    if not records:
        print_warning("No packages found in requirements file")
        return

    _display_stats(path, stats)
    _display_table(shown, with_popularity=config.fetch_popularity)
    _display_conflicts(conflicts)


def _display_stats(path: Path, stats: UpgradeStats) -> None:
    click.echo(f"\nDependency check: {path}\n")
    print_stats(
        {
            "Total packages": stats.total,
            "Patch updates": stats.patch_available,
            "Minor updates": stats.minor_available,
            "Major updates": stats.major_available,
            "Up to date": stats.up_to_date,
            "Vulnerable": stats.vulnerable,
            "Errors": stats.errors,
            "Conflicts": stats.conflicts,
        }
    )
    click.echo()


def _display_table(records: Sequence[PackageRecord], *, with_popularity: bool) -> None:
    headers = ["Package", "Current", "Latest", "Status", "Security"]
    if with_popularity:
        headers.append("Weekly downloads")

    rows: List[List[str]] = []
    for record in records:
        row = [
            escape(record.name),
            escape(record.current_version),
            escape(record.latest_version or "N/A"),
            colorize_status(record.status),
            colorize_security(record.security_status),
        ]
        if with_popularity:
            row.append(
                f"{record.popularity.weekly_downloads:,}" if record.popularity else "-"
            )
        rows.append(row)

    print_table(rows, headers=headers)


def _display_conflicts(conflicts: Sequence[Conflict]) -> None:
    if not conflicts:
        return
    click.echo()
    print_warning(f"{len(conflicts)} potential conflict(s):")
    for conflict in conflicts:
        click.echo(f"  {conflict.to_display_string()}")


def _build_json(
    path: Path,
    stats: UpgradeStats,
    records: Sequence[PackageRecord],
    conflicts: Sequence[Conflict],
) -> Dict[str, Any]:
    return {
        "requirements": str(path),
        "stats": {
            "total": stats.total,
            "patch": stats.patch_available,
            "minor": stats.minor_available,
            "major": stats.major_available,
            "up_to_date": stats.up_to_date,
            "vulnerable": stats.vulnerable,
            "errors": stats.errors,
            "conflicts": stats.conflicts,
            "upgradable": stats.total_upgradable,
        },
        "packages": [record.to_json() for record in records],
        "conflicts": [conflict.to_json() for conflict in conflicts],
    }
