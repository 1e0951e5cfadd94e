"""Manifest write-back and lock file generation.

Only selected, index-sourced records with a resolved latest version are
rewritten. Each keeps its operator kind and trailing comment; every other
line of the manifest is reproduced byte for byte.

Typical usage::

    from pyelevate.core.writer import write_upgrade

    result = write_upgrade("requirements.txt", records, lock=True)
    print(result.backup_path, result.lock_path)
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Union

from pyelevate.core.parser import ManifestParser
from pyelevate.models.package import (
    Compatible,
    GreaterEqual,
    Less,
    PackageRecord,
    Range,
)
from pyelevate.utils.filesystem import (
    create_timestamped_backup,
    safe_read_file,
    safe_write_file,
)
from pyelevate.utils.logger import get_logger
from pyelevate.utils.version_utils import is_newer, normalize_version
from pyelevate.exceptions import ParseError
from pyelevate.constants import LOCK_FILE_SUFFIX, UNKNOWN_VERSION

logger = get_logger("writer")


@dataclass(frozen=True)
class UpgradeResult:
    """Files touched by :func:`write_upgrade`."""

    manifest_path: Path
    backup_path: Path
    upgraded: List[str]
    lock_path: Optional[Path] = None


def render_requirement(record: PackageRecord, version: str) -> str:
    """Render ``record`` as a manifest requirement pinned around ``version``.

    Example::

        >>> render_requirement(PackageRecord("flask", constraint=GreaterEqual("2.0")), "3.0.0")
        'flask>=3.0.0'
    """
    extras = f"[{','.join(record.extras)}]" if record.extras else ""
    constraint = record.constraint

    if isinstance(constraint, GreaterEqual):
        spec = f">={version}"
    elif isinstance(constraint, Compatible):
        spec = f"~={version}"
    elif isinstance(constraint, Range):
        spec = f">={version},<{constraint.high}"
    else:
        if isinstance(constraint, Less) and not is_newer(
            normalize_version(version), normalize_version(constraint.version)
        ):
            logger.warning(
                "%s: pinning %s goes past the declared bound <%s",
                record.name,
                version,
                constraint.version,
            )
        spec = f"=={version}"

    return f"{record.name}{extras}{spec}"


def _is_upgrade_target(record: Optional[PackageRecord]) -> bool:
    return (
        record is not None
        and record.selected
        and record.is_index_source
        and record.latest_version is not None
    )


def generate_upgraded_content(
    original_content: str,
    records: Sequence[PackageRecord],
) -> str:
    """Return ``original_content`` with every upgrade target rewritten."""
    parser = ManifestParser()
    by_name: Dict[str, PackageRecord] = {record.name: record for record in records}
    output: List[str] = []

    for raw_line in original_content.splitlines(keepends=True):
        body = raw_line.rstrip("\r\n")
        ending = raw_line[len(body):]

        try:
            parsed = parser.parse_line(body)
        except ParseError:
            parsed = None

        target = by_name.get(parsed.name) if parsed is not None else None
        if parsed is None or not parsed.is_index_source or not _is_upgrade_target(target):
            output.append(raw_line)
            continue

        assert target is not None and target.latest_version is not None
        requirement = render_requirement(target, target.latest_version)
        output.append(_rewrite_line(body, requirement) + ending)

    return "".join(output)


def _rewrite_line(line: str, requirement: str) -> str:
    indent = line[: len(line) - len(line.lstrip())]
    hash_pos = line.find("#")
    if hash_pos == -1:
        return f"{indent}{requirement}"

    before = line[:hash_pos]
    gap = before[len(before.rstrip()):]
    return f"{indent}{requirement}{gap}{line[hash_pos:]}"


def render_lock_file(records: Iterable[PackageRecord]) -> str:
    """One ``name==version`` line per index record with a known version.

    Selected records lock to their latest version; the rest lock to the
    declared version unless it is unknown.
    """
    lines: List[str] = []
    for record in sorted(records, key=lambda r: r.name):
        if not record.is_index_source:
            continue

        if _is_upgrade_target(record):
            version = record.latest_version
        elif record.current_version != UNKNOWN_VERSION:
            version = record.current_version
        else:
            continue

        lines.append(f"{record.name}=={version}")

    return "\n".join(lines) + "\n" if lines else ""


def lock_file_path(manifest_path: Union[str, Path]) -> Path:
    path = Path(manifest_path)
    return path.with_name(path.name + LOCK_FILE_SUFFIX)


def write_upgrade(
    manifest_path: Union[str, Path],
    records: Sequence[PackageRecord],
    *,
    lock: bool = False,
) -> UpgradeResult:
    """Back up, rewrite and optionally lock the manifest.

    Raises:
        FileOperationError: Reading, backing up or writing failed.
    """
    path = Path(manifest_path)
    original = safe_read_file(path)

    backup_path = create_timestamped_backup(path)
    logger.info("Backup created: %s", backup_path)

    safe_write_file(path, generate_upgraded_content(original, records))
    upgraded = [record.name for record in records if _is_upgrade_target(record)]
    logger.info("Updated %d package(s) in %s", len(upgraded), path)

    written_lock: Optional[Path] = None
    if lock:
        written_lock = lock_file_path(path)
        safe_write_file(written_lock, render_lock_file(records))
        logger.info("Lock file written: %s", written_lock)

    return UpgradeResult(
        manifest_path=path,
        backup_path=backup_path,
        upgraded=upgraded,
        lock_path=written_lock,
    )
