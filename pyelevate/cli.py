"""
Command-line interface for pyelevate.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from pyelevate.config import load_config
from pyelevate.__version__ import __version__
from pyelevate.context import PyElevateContext
from pyelevate.exceptions import PyElevateError
from pyelevate.utils.logger import get_logger, setup_logging
from pyelevate.utils.console import print_error, print_warning, reconfigure_console
from pyelevate.commands.check import check
from pyelevate.commands.upgrade import upgrade
from pyelevate.commands.simulate import simulate

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="PYELEVATE_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="PYELEVATE_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="pyelevate",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """pyelevate: dependency intelligence for requirements.txt files.

    \b
    Available commands:
      pyelevate check              Report available upgrades and advisories
      pyelevate upgrade            Rewrite the file with the latest versions
      pyelevate simulate           Score the risk of upgrading everything

    \b
    Examples:
      pyelevate check
      pyelevate -v check -r requirements/prod.txt
      pyelevate upgrade --dry-run
    """
    _configure_logging(verbose)

    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    loaded_config = load_config(config)

    pyelevate_ctx = PyElevateContext()
    pyelevate_ctx.config_path = config or loaded_config.source_path
    pyelevate_ctx.config = loaded_config
    pyelevate_ctx.color = color
    pyelevate_ctx.verbose = verbose
    ctx.obj = pyelevate_ctx

    logger.debug("pyelevate v%s", __version__)
    logger.debug("Config path: %s", pyelevate_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


def _configure_logging(verbose: int) -> None:
    """Map ``-v`` counts to a log level: WARNING, INFO, then DEBUG."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(check)
cli.add_command(upgrade)
cli.add_command(simulate)


def main() -> int:
    """Main entry point for the pyelevate CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except PyElevateError as exc:
        print_error(str(exc))
        logger.debug("Error details: %s", exc.details or "<none>", exc_info=True)
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
