"""
Security advisory model for pyelevate.

Advisories are owned by the advisory checker's cache; a
:class:`~pyelevate.models.package.PackageRecord` only keeps their count.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class Severity(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Severity":
        """Map an advisory severity label to a :class:`Severity`.

        A missing label is treated as medium; unrecognized labels as low.
        """
        if label is None:
            return cls.MEDIUM
        try:
            return cls(label.upper())
        except ValueError:
            return cls.LOW


@dataclass(frozen=True)
class SecurityAdvisory:
    """A single published vulnerability affecting a package.

    Attributes:
        id: Advisory identifier (e.g. ``GHSA-...`` or ``PYSEC-...``).
        title: One-line summary.
        severity: Coarse severity bucket.
        affected_versions: Affected version strings, when known.
        fixed_version: First fixed version, when known.
        url: Public advisory page.
    """

    id: str
    title: str
    severity: Severity
    url: str
    affected_versions: List[str] = field(default_factory=list)
    fixed_version: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.value,
            "affected_versions": list(self.affected_versions),
            "fixed_version": self.fixed_version,
            "url": self.url,
        }
