"""
Centralized constants for pyelevate.

This module defines immutable configuration values used across pyelevate,
including endpoints, network settings, manifest prefixes, changelog
keywords and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "pyelevate/{version}"

# ---------------------------------------------------------------------------
# Remote endpoints
# ---------------------------------------------------------------------------

#: PyPI JSON API for the latest release of a package.
PYPI_JSON_API: Final[str] = "https://pypi.org/pypi/{package}/json"

#: PyPI JSON API for a specific release of a package.
PYPI_RELEASE_JSON_API: Final[str] = "https://pypi.org/pypi/{package}/{version}/json"

#: OSV vulnerability query endpoint.
OSV_QUERY_API: Final[str] = "https://api.osv.dev/v1/query"

#: Public advisory page for an OSV identifier.
OSV_ADVISORY_URL: Final[str] = "https://osv.dev/{id}"

#: Ecosystem name sent with OSV queries.
OSV_ECOSYSTEM: Final[str] = "PyPI"

#: pypistats.org recent-downloads endpoint.
PYPISTATS_RECENT_API: Final[str] = (
    "https://pypistats.org/api/packages/{package}/recent"
)

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default per-request network timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 10.0

#: Retries for failed HTTP requests. Resolution reports failures as-is.
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Maximum number of in-flight requests.
DEFAULT_MAX_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# Enrichment defaults
# ---------------------------------------------------------------------------

DEFAULT_CHECK_SECURITY: Final[bool] = True
DEFAULT_FETCH_POPULARITY: Final[bool] = False
DEFAULT_FETCH_CHANGELOG: Final[bool] = False

#: Number of recent daily download counts kept per package.
POPULARITY_TREND_DAYS: Final[int] = 7

#: Weekly downloads are multiplied by this to approximate a month.
WEEKS_PER_MONTH: Final[int] = 4

# ---------------------------------------------------------------------------
# Manifest format
# ---------------------------------------------------------------------------

#: Default manifest looked up in the working directory.
DEFAULT_MANIFEST: Final[str] = "requirements.txt"

#: Version operators in match priority order.
VERSION_OPERATORS: Final[Sequence[str]] = ("==", ">=", "<=", "~=", "<", ">", "!=")

#: Prefix routing a line to Git-source parsing.
VCS_PREFIX: Final[str] = "git+"

#: Prefix routing a line to editable LocalPath parsing.
EDITABLE_PREFIX: Final[str] = "-e"

#: URL schemes routing a line to Url-source parsing.
URL_SCHEMES: Final[Sequence[str]] = ("http://", "https://", "file://")

#: Version used when no concrete current version is derivable.
UNKNOWN_VERSION: Final[str] = "0.0.0"

GIT_SOURCE_VERSION: Final[str] = "git-source"
LOCAL_SOURCE_VERSION: Final[str] = "local"
URL_SOURCE_VERSION: Final[str] = "url-source"

#: Suffix appended to the manifest path for lock files.
LOCK_FILE_SUFFIX: Final[str] = ".lock"

#: Maximum allowed file size (in bytes) when reading manifests.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Changelog keyword heuristics
# ---------------------------------------------------------------------------

BREAKING_KEYWORDS: Final[Sequence[str]] = (
    "breaking change",
    "breaking changes",
    "removed",
    "incompatible",
    "deprecated in favor of",
)

DEPRECATION_KEYWORDS: Final[Sequence[str]] = (
    "deprecated",
    "will be removed",
)

SECURITY_KEYWORDS: Final[Sequence[str]] = (
    "security",
    "cve",
    "vulnerability",
    "fix vulnerability",
    "patch vulnerability",
)

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
