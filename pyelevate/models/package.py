"""
Package record model for pyelevate.

A :class:`PackageRecord` is the in-memory representation of one
manifest-declared package together with everything learned about it:
the resolved latest version, its classification, security state and
optional enrichment payloads.

Where a package comes from (:data:`DependencySource`) and the version rule
it was declared with (:data:`VersionConstraint`) are closed sets of
immutable variants. They are fixed at parse time and never mutated, so a
writer can always regenerate the manifest line from the record.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from pyelevate.models.enrichment import Changelog, PopularityData


# ---------------------------------------------------------------------------
# Version status
# ---------------------------------------------------------------------------


class VersionStatus(Enum):
    """Classification of a package's pending upgrade."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    PRERELEASE = "prerelease"
    UNKNOWN = "unknown"
    UP_TO_DATE = "up_to_date"
    ERROR = "error"
    VULNERABLE = "vulnerable"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return _STATUS_LABELS[self]

    @property
    def priority(self) -> int:
        """Display ordering; lower sorts first."""
        return _STATUS_PRIORITY[self]


_STATUS_LABELS: Dict[VersionStatus, str] = {
    VersionStatus.PATCH: "Patch",
    VersionStatus.MINOR: "Minor",
    VersionStatus.MAJOR: "Major",
    VersionStatus.PRERELEASE: "Prerelease",
    VersionStatus.UNKNOWN: "Unknown",
    VersionStatus.UP_TO_DATE: "Up-to-date",
    VersionStatus.ERROR: "Error",
    VersionStatus.VULNERABLE: "Vulnerable",
}

_STATUS_PRIORITY: Dict[VersionStatus, int] = {
    VersionStatus.VULNERABLE: 0,
    VersionStatus.ERROR: 1,
    VersionStatus.MAJOR: 2,
    VersionStatus.MINOR: 3,
    VersionStatus.PRERELEASE: 4,
    VersionStatus.PATCH: 5,
    VersionStatus.UNKNOWN: 6,
    VersionStatus.UP_TO_DATE: 7,
}

#: Statuses that count as an available upgrade.
UPGRADE_STATUSES = frozenset(
    {VersionStatus.PATCH, VersionStatus.MINOR, VersionStatus.MAJOR}
)


# ---------------------------------------------------------------------------
# Security status
# ---------------------------------------------------------------------------


class SecurityState(Enum):
    VULNERABLE = "vulnerable"
    SAFE = "safe"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SecurityStatus:
    """Vulnerability state of a package's current version.

    Attributes:
        state: Vulnerable, safe, or unknown (lookup failed or not run).
        advisory_count: Number of advisories; only non-zero when vulnerable.
    """

    state: SecurityState = SecurityState.UNKNOWN
    advisory_count: int = 0

    @classmethod
    def vulnerable(cls, advisory_count: int) -> "SecurityStatus":
        return cls(SecurityState.VULNERABLE, advisory_count)

    @classmethod
    def safe(cls) -> "SecurityStatus":
        return cls(SecurityState.SAFE)

    @classmethod
    def unknown(cls) -> "SecurityStatus":
        return cls(SecurityState.UNKNOWN)

    @property
    def is_vulnerable(self) -> bool:
        return self.state is SecurityState.VULNERABLE

    def __str__(self) -> str:
        if self.is_vulnerable:
            return f"Vulnerable ({self.advisory_count})"
        return self.state.value.capitalize()


# ---------------------------------------------------------------------------
# Dependency sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexSource:
    """Package resolved from the package index (PyPI)."""

    source_type = "PyPI"

    def description(self) -> str:
        return "Python Package Index"


@dataclass(frozen=True)
class GitSource:
    """Package installed from a Git repository."""

    url: str
    ref: Optional[str] = None

    source_type = "Git"

    def description(self) -> str:
        branch = f"Branch/Tag: {self.ref}" if self.ref else ""
        return f"Git Repository: {self.url}\n{branch}"


@dataclass(frozen=True)
class LocalPathSource:
    """Package installed from a local directory."""

    path: str
    editable: bool = False

    source_type = "Local"

    def description(self) -> str:
        mode = "Editable Install" if self.editable else "Standard Install"
        return f"Local Path: {self.path}\n{mode}"


@dataclass(frozen=True)
class UrlSource:
    """Package installed from a direct URL."""

    url: str

    source_type = "URL"

    def description(self) -> str:
        return f"URL: {self.url}"


@dataclass(frozen=True)
class UnknownSource:
    source_type = "Unknown"

    def description(self) -> str:
        return "Unknown Source"


DependencySource = Union[IndexSource, GitSource, LocalPathSource, UrlSource, UnknownSource]


# ---------------------------------------------------------------------------
# Version constraints
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pinned:
    version: str

    def as_str(self) -> str:
        return f"=={self.version}"


@dataclass(frozen=True)
class GreaterEqual:
    version: str

    def as_str(self) -> str:
        return f">={self.version}"


@dataclass(frozen=True)
class Less:
    version: str

    def as_str(self) -> str:
        return f"<{self.version}"


@dataclass(frozen=True)
class Range:
    low: str
    high: str

    def as_str(self) -> str:
        return f">={self.low},<{self.high}"


@dataclass(frozen=True)
class Compatible:
    version: str

    def as_str(self) -> str:
        return f"~={self.version}"


@dataclass(frozen=True)
class Unspecified:
    def as_str(self) -> str:
        return ""


VersionConstraint = Union[Pinned, GreaterEqual, Less, Range, Compatible, Unspecified]


# ---------------------------------------------------------------------------
# Package record
# ---------------------------------------------------------------------------


@dataclass
class PackageRecord:
    """One manifest-declared package and its resolved/enriched state.

    Attributes:
        name: Lower-cased package name; unique within a manifest.
        current_version: Declared version normalized to ``X.Y.Z`` where
            possible, otherwise a sentinel such as ``"0.0.0"`` or
            ``"git-source"``.
        latest_version: Latest release on the index, once resolved.
        status: Derived classification; set by the resolution phase.
        selected: Operator intent to include this package in an upgrade.
        extras: Optional-feature names declared with the package.
        constraint: Declared version rule.
        source: Where the package comes from.
        error: Last resolution failure, cleared on success.
        security_status: Vulnerability state of ``current_version``.
        changelog: Changelog hints for ``latest_version``, if fetched.
        popularity: Download statistics, if fetched.
        dependencies: Names of other records this package depends on.
    """

    name: str
    current_version: str = "0.0.0"
    latest_version: Optional[str] = None
    status: VersionStatus = VersionStatus.UNKNOWN
    selected: bool = False
    extras: Tuple[str, ...] = ()
    constraint: VersionConstraint = field(default_factory=Unspecified)
    source: DependencySource = field(default_factory=IndexSource)
    error: Optional[str] = None
    security_status: SecurityStatus = field(default_factory=SecurityStatus.unknown)
    changelog: Optional["Changelog"] = None
    popularity: Optional["PopularityData"] = None
    dependencies: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.name = self.name.strip().lower()
        if not self.name:
            raise ValueError("PackageRecord name must not be empty")
        self.extras = tuple(dict.fromkeys(self.extras))

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def is_index_source(self) -> bool:
        """True if the package is eligible for index lookups."""
        return isinstance(self.source, IndexSource)

    def has_update(self) -> bool:
        """True if the last classification found a newer release."""
        return self.status in UPGRADE_STATUSES

    # ------------------------------------------------------------------
    # Phase results (applied by the single-threaded apply step)
    # ------------------------------------------------------------------

    def mark_resolved(self, latest_version: str, status: VersionStatus) -> None:
        self.latest_version = latest_version
        self.status = status
        self.error = None

    def mark_failed(self, message: str) -> None:
        self.error = message
        self.status = VersionStatus.ERROR

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-compatible dictionary."""
        entry: Dict[str, Any] = {
            "name": self.name,
            "current_version": self.current_version,
            "latest_version": self.latest_version,
            "status": self.status.value,
            "constraint": self.constraint.as_str(),
            "source": self.source.source_type,
            "security": str(self.security_status),
        }
        if self.extras:
            entry["extras"] = list(self.extras)
        if self.error:
            entry["error"] = self.error
        if self.dependencies:
            entry["dependencies"] = list(self.dependencies)
        if self.popularity is not None:
            entry["weekly_downloads"] = self.popularity.weekly_downloads
        if self.changelog is not None:
            entry["changelog_risk"] = self.changelog.risk_level().value
        return entry

    def __str__(self) -> str:
        if self.latest_version:
            return (
                f"{self.name} {self.current_version} -> "
                f"{self.latest_version} ({self.status.label})"
            )
        return f"{self.name} {self.current_version} ({self.status.label})"
