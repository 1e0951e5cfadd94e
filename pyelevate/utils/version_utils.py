"""
Version helpers for pyelevate.

Two pure functions live here:

- :func:`normalize_version` turns a declared version (``"3.2"``) into the
  three-component form used for classification (``"3.2.0"``).
- :func:`compare_versions` classifies the delta between a current and a
  latest version into a :class:`~pyelevate.models.package.VersionStatus`.

Classification follows Semantic Versioning (``major.minor.patch[-qualifier]``)
via the ``semver`` library. When either side is not a semantic version the
comparison falls back to plain string ordering and never guesses a
direction: it is either up to date or unknown.
"""

from __future__ import annotations

import re

import semver

from pyelevate.models.package import VersionStatus

_FULL = re.compile(r"^(\d+)\.(\d+)\.(\d+)(.*)$")
_MAJOR_MINOR = re.compile(r"^(\d+)\.(\d+)$")
_MAJOR = re.compile(r"^(\d+)$")


def normalize_version(version: str) -> str:
    """Pad a numeric version to three components.

    Qualifiers after the third component are passed through unchanged.
    Anything that does not start with a numeric release is returned as-is.

    Examples:
        >>> normalize_version("3.2")
        '3.2.0'
        >>> normalize_version("2")
        '2.0.0'
        >>> normalize_version("1.0.0rc1")
        '1.0.0rc1'
    """
    match = _FULL.match(version)
    if match:
        major, minor, patch, rest = match.groups()
        return f"{major}.{minor}.{patch}{rest}"

    match = _MAJOR_MINOR.match(version)
    if match:
        return f"{match.group(1)}.{match.group(2)}.0"

    match = _MAJOR.match(version)
    if match:
        return f"{match.group(1)}.0.0"

    return version


def parse_semver(version: str) -> semver.Version:
    """Parse a strict semantic version.

    Raises:
        ValueError: ``version`` is not ``major.minor.patch[-pre][+build]``.
    """
    return semver.Version.parse(version)


def compare_versions(current: str, latest: str) -> VersionStatus:
    """Classify the change from ``current`` to ``latest``.

    Examples:
        >>> compare_versions("1.0.0", "2.0.0")
        <VersionStatus.MAJOR: 'major'>
        >>> compare_versions("1.2.0", "1.2.5")
        <VersionStatus.PATCH: 'patch'>
        >>> compare_versions("1.0.0", "git-source")
        <VersionStatus.UNKNOWN: 'unknown'>
    """
    try:
        curr = parse_semver(current)
        newest = parse_semver(latest)
    except ValueError:
        if latest <= current:
            return VersionStatus.UP_TO_DATE
        return VersionStatus.UNKNOWN

    if newest < curr:
        return VersionStatus.UP_TO_DATE
    if newest == curr:
        if _build_newer(curr, newest):
            return VersionStatus.PATCH
        return VersionStatus.UP_TO_DATE
    if newest.major > curr.major:
        return VersionStatus.MAJOR
    if newest.minor > curr.minor:
        return VersionStatus.MINOR
    return VersionStatus.PATCH


def is_newer(current: str, latest: str) -> bool:
    """Return True if ``latest`` orders after ``current``.

    Semantic ordering is used when both parse; otherwise plain string
    ordering.
    """
    try:
        curr = parse_semver(current)
        newest = parse_semver(latest)
    except ValueError:
        return latest > current
    return newest > curr or (newest == curr and _build_newer(curr, newest))


def _build_newer(current: semver.Version, latest: semver.Version) -> bool:
    """semver ignores build metadata when ordering; compare it as text."""
    return (latest.build or "") > (current.build or "")
