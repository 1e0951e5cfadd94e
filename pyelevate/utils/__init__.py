"""
Utility helpers for pyelevate.

This package provides reusable utilities used across pyelevate:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client
- Version normalization and classification

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from pyelevate.utils.filesystem import (
    create_timestamped_backup,
    resolve_manifest_path,
    safe_read_file,
    safe_write_file,
)
from pyelevate.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)
from pyelevate.utils.console import (
    colorize_risk,
    colorize_security,
    colorize_status,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_report,
    print_stats,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.version_utils import compare_versions, is_newer, normalize_version

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_info",
    "print_report",
    "print_stats",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_risk",
    "colorize_security",
    "colorize_status",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_timestamped_backup",
    "resolve_manifest_path",
    # HTTP
    "HTTPClient",
    # Versions
    "compare_versions",
    "is_newer",
    "normalize_version",
]
