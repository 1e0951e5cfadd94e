"""Manifest parser for pip-style requirements files.

Turns manifest text into a name-ordered list of
:class:`~pyelevate.models.package.PackageRecord` objects. Supported line
forms:

- Index packages with an optional extras list and version rule
  (``requests[security]>=2.25``)
- Git sources (``git+https://github.com/org/repo.git@v1.0``)
- Editable local installs (``-e ./libs/mypkg``)
- Direct URLs (``https://host/pkg-1.0.tar.gz``, ``file://...``)
- Full-line and inline ``#`` comments

Parsing is best-effort: a line that cannot be interpreted is logged and
skipped, so a malformed manifest yields fewer records instead of an error.

Typical usage::

    from pyelevate.core.parser import ManifestParser

    parser = ManifestParser()
    records = parser.parse_file("requirements.txt")

    for record in records:
        print(record.name, record.current_version, record.constraint.as_str())
"""

from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import List, Optional, Tuple, Union
from urllib.parse import urlparse

from pyelevate.models.package import (
    Compatible,
    GitSource,
    GreaterEqual,
    Less,
    LocalPathSource,
    PackageRecord,
    Pinned,
    Range,
    Unspecified,
    UrlSource,
    VersionConstraint,
)
from pyelevate.utils.filesystem import safe_read_file
from pyelevate.utils.logger import get_logger
from pyelevate.utils.version_utils import normalize_version
from pyelevate.exceptions import ParseError
from pyelevate.constants import (
    EDITABLE_PREFIX,
    GIT_SOURCE_VERSION,
    LOCAL_SOURCE_VERSION,
    UNKNOWN_VERSION,
    URL_SCHEMES,
    URL_SOURCE_VERSION,
    VCS_PREFIX,
    VERSION_OPERATORS,
)

_EDITABLE_LONG = "--editable"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?$")


class ManifestParser:
    """Stateless parser for requirements manifests.

    Duplicate package names keep the first occurrence.

    Example::

        >>> parser = ManifestParser()
        >>> [r.name for r in parser.parse_string("flask>=2.0\\nDjango==3.2\\n")]
        ['django', 'flask']
    """

    def __init__(self) -> None:
        self.logger = get_logger("parser")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_file(self, file_path: Union[str, Path]) -> List[PackageRecord]:
        """Read and parse a manifest from disk.

        Raises:
            FileOperationError: The file does not exist or cannot be read.
        """
        path = Path(file_path)
        self.logger.debug("Parsing file: %s", path)
        content = safe_read_file(path)
        records = self.parse_string(content, source_file_path=str(path))
        self.logger.debug("Parsed %d package(s) from %s", len(records), path.name)
        return records

    def parse_string(
        self,
        content: str,
        source_file_path: Optional[str] = None,
    ) -> List[PackageRecord]:
        """Parse manifest text into records sorted by name.

        Blank lines, comments and unparseable lines are skipped.
        """
        records: List[PackageRecord] = []
        seen = set()

        for line_number, line_text in enumerate(content.splitlines(), start=1):
            try:
                record = self.parse_line(line_text, line_number, source_file_path)
            except ParseError as exc:
                self.logger.debug("Skipping line %d: %s", line_number, exc)
                continue

            if record is None:
                continue

            if record.name in seen:
                self.logger.debug(
                    "Line %d: duplicate package '%s' ignored", line_number, record.name
                )
                continue

            seen.add(record.name)
            records.append(record)

        records.sort(key=lambda r: r.name)
        return records

    def parse_line(
        self,
        line_text: str,
        line_number: int = 0,
        source_file_path: Optional[str] = None,
    ) -> Optional[PackageRecord]:
        """Parse one manifest line.

        Returns:
            ``None`` for blank and comment-only lines, otherwise the record.

        Raises:
            ParseError: The line cannot be interpreted.

        Example::

            >>> ManifestParser().parse_line("django==3.2  # Web framework")
            PackageRecord(name='django', current_version='3.2.0', ...)
        """
        spec = strip_inline_comment(line_text)
        if not spec:
            return None

        try:
            if spec.startswith(VCS_PREFIX):
                return self._parse_git(spec[len(VCS_PREFIX):])

            if spec.startswith(_EDITABLE_LONG):
                return self._parse_editable(spec[len(_EDITABLE_LONG):])

            if spec.startswith(EDITABLE_PREFIX):
                return self._parse_editable(spec[len(EDITABLE_PREFIX):])

            if spec.startswith(tuple(URL_SCHEMES)):
                return self._parse_url(spec)

            if spec.startswith("-"):
                raise ValueError(f"Unsupported option: {spec.split()[0]}")

            return self._parse_index(spec)

        except ValueError as exc:
            raise ParseError(
                str(exc),
                line_number=line_number,
                line_content=line_text.strip(),
                file_path=source_file_path,
            ) from exc

    # ------------------------------------------------------------------
    # Source-specific builders (private)
    # ------------------------------------------------------------------

    def _parse_index(self, spec: str) -> PackageRecord:
        # Environment markers do not affect identity or version
        spec = spec.split(";", 1)[0].strip()

        name_part, version_spec = split_version_spec(spec)
        name, extras = split_extras(name_part)

        if not _NAME_PATTERN.match(name):
            raise ValueError(f"Invalid package name: {name!r}")

        constraint, current_version = parse_constraint(version_spec)

        return PackageRecord(
            name=name,
            current_version=current_version,
            extras=tuple(extras),
            constraint=constraint,
        )

    def _parse_git(self, rest: str) -> PackageRecord:
        url, ref = rest, None
        head, sep, tail = rest.rpartition("@")
        # "git@github.com:org/repo" has an "@" that is not a ref separator
        if sep and tail and "/" not in tail and "://" in head:
            url, ref = head, tail

        name = _strip_git_suffix(url.rstrip("/").rsplit("/", 1)[-1])
        if not name:
            name = _random_name("git")

        return PackageRecord(
            name=name,
            current_version=GIT_SOURCE_VERSION,
            source=GitSource(url=url, ref=ref),
        )

    def _parse_editable(self, rest: str) -> PackageRecord:
        path = rest.lstrip("=").strip()
        if not path:
            raise ValueError("Editable install without a path")

        name = _strip_git_suffix(Path(path.rstrip("/")).name)
        if not name or not _NAME_PATTERN.match(name):
            name = _random_name("local")

        return PackageRecord(
            name=name,
            current_version=LOCAL_SOURCE_VERSION,
            source=LocalPathSource(path=path, editable=True),
        )

    def _parse_url(self, spec: str) -> PackageRecord:
        parsed = urlparse(spec)
        if not parsed.netloc and parsed.scheme != "file":
            raise ValueError(f"Invalid URL requirement: {spec}")

        file_name = parsed.path.rstrip("/").rsplit("/", 1)[-1]
        name = re.split(r"[-.]", file_name, maxsplit=1)[0] if file_name else ""
        if not name or not _NAME_PATTERN.match(name):
            name = _random_name("url")

        return PackageRecord(
            name=name,
            current_version=URL_SOURCE_VERSION,
            source=UrlSource(url=spec),
        )


# ---------------------------------------------------------------------------
# Line-level helpers
# ---------------------------------------------------------------------------


def strip_inline_comment(line: str) -> str:
    """Drop a ``#`` comment and surrounding whitespace.

    Example::

        >>> strip_inline_comment("django==3.2  # Web framework")
        'django==3.2'
    """
    return line.split("#", 1)[0].strip()


def split_version_spec(spec: str) -> Tuple[str, str]:
    """Split ``spec`` at the first version operator, in fixed priority order.

    Example::

        >>> split_version_spec("requests[socks]==2.28.1")
        ('requests[socks]', '==2.28.1')
        >>> split_version_spec("flask")
        ('flask', '')
    """
    for operator in VERSION_OPERATORS:
        position = spec.find(operator)
        if position != -1:
            return spec[:position].strip(), spec[position:].strip()
    return spec.strip(), ""


def split_extras(name_part: str) -> Tuple[str, List[str]]:
    """Separate ``name[a, b]`` into the name and its trimmed extras."""
    bracket = name_part.find("[")
    if bracket == -1:
        return name_part.strip(), []

    name = name_part[:bracket].strip()
    inner = name_part[bracket + 1:].rstrip().rstrip("]")
    extras = [item.strip() for item in inner.split(",") if item.strip()]
    return name, extras


def parse_constraint(version_spec: str) -> Tuple[VersionConstraint, str]:
    """Map a version spec to its constraint and the version used for comparison.

    ``==``, ``>=`` and ``~=`` yield a normalized current version. ``<``,
    the remaining operators and an empty spec have no usable current
    version and fall back to ``"0.0.0"``. ``>=lo,<hi`` is a range whose
    lower bound is the current version.

    Example::

        >>> parse_constraint("==3.2")
        (Pinned(version='3.2'), '3.2.0')
        >>> parse_constraint(">=1.0,<2.0")
        (Range(low='1.0', high='2.0'), '1.0.0')
    """
    spec = version_spec.strip()
    if not spec:
        return Unspecified(), UNKNOWN_VERSION

    if spec.startswith(">="):
        low, _, upper = spec[2:].partition(",")
        low = low.strip()
        upper = upper.strip()
        if upper.startswith("<") and not upper.startswith("<="):
            return Range(low=low, high=upper[1:].strip()), normalize_version(low)
        return GreaterEqual(low), normalize_version(low)

    if spec.startswith("=="):
        version = _first_clause(spec[2:])
        return Pinned(version), normalize_version(version)

    if spec.startswith("~="):
        version = _first_clause(spec[2:])
        return Compatible(version), normalize_version(version)

    if spec.startswith("<") and not spec.startswith("<="):
        return Less(_first_clause(spec[1:])), UNKNOWN_VERSION

    return Unspecified(), UNKNOWN_VERSION


def _first_clause(text: str) -> str:
    return text.split(",", 1)[0].strip()


def _strip_git_suffix(name: str) -> str:
    return name[: -len(".git")] if name.endswith(".git") else name


def _random_name(kind: str) -> str:
    return f"{kind}-{uuid.uuid4().hex[:8]}"
