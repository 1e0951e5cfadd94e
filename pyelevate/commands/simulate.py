"""Simulate command implementation for pyelevate.

Scores the risk of upgrading every package with a pending upgrade, without
touching any file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from pyelevate.context import PyElevateContext, pass_context
from pyelevate.commands.common import effective_config, load_and_analyze, requirements_option
from pyelevate.core.dependency_graph import DependencyGraph
from pyelevate.core.selection import select_upgradable
from pyelevate.core.simulator import UpgradeSimulator
from pyelevate.utils.console import print_report


@click.command()
@requirements_option
@pass_context
def simulate(ctx: PyElevateContext, requirements: Optional[Path]) -> None:
    """Print the risk report for upgrading every outdated package."""
    _, records = load_and_analyze(requirements, effective_config(ctx))

    select_upgradable(records)
    print_report(UpgradeSimulator().generate_report(records))

    for conflict in DependencyGraph.detect_conflicts(records):
        click.echo(f"  - {conflict.to_display_string()}")
