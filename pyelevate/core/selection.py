"""Selection, sorting and filtering of package records.

Bulk selection only ever selects records that have a resolved
``latest_version``; :func:`toggle` is operator-directed and unconditional.
All functions operate in place on the records passed in, which may be a
filtered view of the full set.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence

from pyelevate.models.package import PackageRecord, VersionStatus
from pyelevate.constants import UNKNOWN_VERSION


class SortBy(Enum):
    NAME = "name"
    STATUS = "status"
    CURRENT = "current"
    LATEST = "latest"
    POPULARITY = "popularity"


def toggle(record: PackageRecord) -> None:
    record.selected = not record.selected


def select_all(records: Iterable[PackageRecord]) -> None:
    """Select every record that has a resolved latest version."""
    for record in records:
        if record.latest_version is not None:
            record.selected = True


def deselect_all(records: Iterable[PackageRecord]) -> None:
    for record in records:
        record.selected = False


def select_by_status(records: Iterable[PackageRecord], status: VersionStatus) -> None:
    """Select every resolved record whose status is ``status``."""
    for record in records:
        if record.status is status and record.latest_version is not None:
            record.selected = True


def select_upgradable(records: Iterable[PackageRecord]) -> None:
    """Select every record with a pending patch, minor or major upgrade.

    Vulnerable records are included when their latest version differs from
    the declared one.
    """
    for record in records:
        if record.latest_version is None:
            continue
        if record.has_update() or (
            record.status is VersionStatus.VULNERABLE
            and record.latest_version != record.current_version
        ):
            record.selected = True


def selected_records(records: Iterable[PackageRecord]) -> List[PackageRecord]:
    return [record for record in records if record.selected]


def count_selected(records: Iterable[PackageRecord]) -> int:
    return sum(1 for record in records if record.selected)


def has_upgradable(records: Iterable[PackageRecord]) -> bool:
    return any(record.latest_version is not None for record in records)


def sort_records(records: Sequence[PackageRecord], sort_by: SortBy) -> List[PackageRecord]:
    """Return ``records`` in display order; the sort is stable.

    Versions sort as plain strings with a missing latest version treated as
    ``"0.0.0"``. Popularity sorts by weekly downloads, most first.
    """
    if sort_by is SortBy.NAME:
        return sorted(records, key=lambda r: r.name)
    if sort_by is SortBy.STATUS:
        return sorted(records, key=lambda r: r.status.priority)
    if sort_by is SortBy.CURRENT:
        return sorted(records, key=lambda r: r.current_version)
    if sort_by is SortBy.LATEST:
        return sorted(records, key=lambda r: r.latest_version or UNKNOWN_VERSION)
    if sort_by is SortBy.POPULARITY:
        return sorted(
            records,
            key=lambda r: r.popularity.weekly_downloads if r.popularity else 0,
            reverse=True,
        )
    raise ValueError(f"Unsupported sort key: {sort_by}")


def fuzzy_match(name: str, query: str) -> bool:
    """True if ``query`` appears in ``name`` as an ordered subsequence.

    Matching is case-insensitive; whitespace in the query is ignored.

    Example::

        >>> fuzzy_match("django-rest-framework", "drf")
        True
        >>> fuzzy_match("flask", "fz")
        False
    """
    remaining = iter(name.lower())
    return all(char in remaining for char in query.lower() if not char.isspace())


def filter_records(records: Iterable[PackageRecord], query: str) -> List[PackageRecord]:
    """Records whose name fuzzy-matches ``query``; an empty query keeps all."""
    if not query.strip():
        return list(records)
    return [record for record in records if fuzzy_match(record.name, query)]
