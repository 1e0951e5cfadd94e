"""
Executable module for pyelevate.

Running:
    python -m pyelevate

is equivalent to:
    pyelevate

This module simply forwards execution to the CLI entrypoint defined in
`pyelevate.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("pyelevate CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from pyelevate.__version__ import __version__

        sys.stderr.write(f"pyelevate version: {__version__}\n")
    except ImportError:
        sys.stderr.write("pyelevate version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m pyelevate`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from pyelevate.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
