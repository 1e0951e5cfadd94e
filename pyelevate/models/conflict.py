"""
Dependency conflict model for pyelevate.

A :class:`Conflict` is a heuristic warning produced by the conflict
detector: package ``package`` depends on a package whose pending upgrade
(``current`` → ``required``) may affect it. It is a report entity and is
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Conflict:
    """Potential upgrade conflict between a package and one dependency.

    Args:
        package: Dependent package name.
        reason: Human-readable explanation.
        current: Dependency's current version.
        required: Dependency's latest version.
    """

    package: str
    reason: str
    current: str
    required: str

    def to_display_string(self) -> str:
        return f"{self.package}: {self.reason}"

    def to_short_string(self) -> str:
        return f"{self.package} ({self.current} -> {self.required})"

    def to_json(self) -> Dict[str, str]:
        return {
            "package": self.package,
            "reason": self.reason,
            "current": self.current,
            "required": self.required,
        }

    def __str__(self) -> str:
        return self.to_display_string()
