"""
Filesystem utilities for pyelevate.

Helpers for locating and reading the manifest, and for writing the
upgraded manifest and lock file safely. Filesystem errors are normalized
to ``FileOperationError``; an unresolvable manifest path is a
``ConfigError`` because it is fatal before any processing starts.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from pyelevate.utils.logger import get_logger
from pyelevate.exceptions import ConfigError, FileOperationError
from pyelevate.constants import DEFAULT_MANIFEST, MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def resolve_manifest_path(
    provided: Optional[PathLike] = None,
    *,
    cwd: Optional[Path] = None,
) -> Path:
    """Return the manifest to operate on.

    An explicit path is used as given. Otherwise ``requirements.txt`` in
    ``cwd`` is used when it exists.

    Raises:
        ConfigError: The path does not exist or is not a file.
    """
    base = cwd or Path.cwd()

    if provided is not None:
        candidate = Path(provided)
        if not candidate.is_absolute():
            candidate = base / candidate
        if not candidate.is_file():
            raise ConfigError(
                f"Requirements path not found: {provided}",
                config_path=str(provided),
            )
        return candidate

    default = base / DEFAULT_MANIFEST
    if default.is_file():
        return default

    raise ConfigError(
        f"Requirements path not found: could not find {DEFAULT_MANIFEST}. "
        "Please specify one with --requirements <path>",
        config_path=str(default),
    )


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing missing, non-regular or oversized files."""
    path = Path(file_path)

    if not path.is_file():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )

    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> None:
    """Atomically replace ``file_path`` with ``content``.

    The text is written to a temporary file in the same directory and
    moved into place, so readers never observe a partial file.
    """
    target = Path(file_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)
        logger.debug("Wrote %d byte(s) to %s", len(content), target)

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def create_timestamped_backup(file_path: PathLike) -> Path:
    """Copy ``file_path`` to ``{stem}.{timestamp}.backup{suffix}``."""
    path = Path(file_path)

    if not path.is_file():
        raise FileOperationError(
            f"Cannot backup invalid file: {path}",
            file_path=str(path),
            operation="backup",
        )

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.parent / f"{path.stem}.{timestamp}.backup{path.suffix}"

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created backup: %s", backup_path)
    return backup_path
