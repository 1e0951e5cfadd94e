from __future__ import annotations

from pathlib import Path

import pytest

from pyelevate.core.parser import (
    ManifestParser,
    parse_constraint,
    split_extras,
    split_version_spec,
    strip_inline_comment,
)
from pyelevate.exceptions import FileOperationError, ParseError
from pyelevate.models import (
    Compatible,
    GitSource,
    GreaterEqual,
    IndexSource,
    Less,
    LocalPathSource,
    Pinned,
    Range,
    Unspecified,
    UrlSource,
)


@pytest.fixture
def parser() -> ManifestParser:
    return ManifestParser()


@pytest.mark.unit
class TestParseLineIndex:
    """Tests for index package lines."""

    def test_pinned(self, parser: ManifestParser) -> None:
        record = parser.parse_line("requests==2.28.1")

        assert record is not None
        assert record.name == "requests"
        assert record.current_version == "2.28.1"
        assert record.constraint == Pinned("2.28.1")
        assert record.source == IndexSource()
        assert record.extras == ()

    def test_extras(self, parser: ManifestParser) -> None:
        record = parser.parse_line("requests[security, socks]>=2.25.0")

        assert record is not None
        assert record.name == "requests"
        assert record.extras == ("security", "socks")
        assert record.constraint == GreaterEqual("2.25.0")
        assert record.current_version == "2.25.0"

    def test_version_is_normalized(self, parser: ManifestParser) -> None:
        record = parser.parse_line("Django==3.2")

        assert record is not None
        assert record.name == "django"
        assert record.current_version == "3.2.0"
        assert record.constraint == Pinned("3.2")

    def test_inline_comment(self, parser: ManifestParser) -> None:
        record = parser.parse_line("flask~=2.0  # web framework")

        assert record is not None
        assert record.constraint == Compatible("2.0")
        assert record.current_version == "2.0.0"

    def test_range(self, parser: ManifestParser) -> None:
        record = parser.parse_line("numpy>=1.20,<2.0")

        assert record is not None
        assert record.constraint == Range("1.20", "2.0")
        assert record.current_version == "1.20.0"

    def test_less_has_unknown_version(self, parser: ManifestParser) -> None:
        record = parser.parse_line("urllib3<2")

        assert record is not None
        assert record.constraint == Less("2")
        assert record.current_version == "0.0.0"

    def test_bare_name(self, parser: ManifestParser) -> None:
        record = parser.parse_line("click")

        assert record is not None
        assert record.constraint == Unspecified()
        assert record.current_version == "0.0.0"

    def test_environment_marker_ignored(self, parser: ManifestParser) -> None:
        record = parser.parse_line('pywin32==305; sys_platform == "win32"')

        assert record is not None
        assert record.name == "pywin32"
        assert record.current_version == "305.0.0"

    @pytest.mark.parametrize("line", ["", "   ", "# comment only", "  # indented"])
    def test_blank_and_comment_lines(self, parser: ManifestParser, line: str) -> None:
        assert parser.parse_line(line) is None

    def test_unsupported_option_raises(self, parser: ManifestParser) -> None:
        with pytest.raises(ParseError) as exc_info:
            parser.parse_line("-r base.txt", line_number=4, source_file_path="reqs.txt")

        assert exc_info.value.line_number == 4
        assert exc_info.value.file_path == "reqs.txt"
        assert "Unsupported option" in str(exc_info.value)

    def test_invalid_name_raises(self, parser: ManifestParser) -> None:
        with pytest.raises(ParseError):
            parser.parse_line("not a package==1.0")


@pytest.mark.unit
class TestParseLineSources:
    """Tests for git, editable and URL lines."""

    def test_git_with_ref(self, parser: ManifestParser) -> None:
        record = parser.parse_line("git+https://github.com/user/repo.git@main")

        assert record is not None
        assert record.name == "repo"
        assert record.current_version == "git-source"
        assert record.source == GitSource(url="https://github.com/user/repo.git", ref="main")
        assert record.is_index_source is False

    def test_git_without_ref(self, parser: ManifestParser) -> None:
        record = parser.parse_line("git+https://github.com/org/tool")

        assert record is not None
        assert record.name == "tool"
        assert record.source == GitSource(url="https://github.com/org/tool")

    def test_git_ssh_user_is_not_a_ref(self, parser: ManifestParser) -> None:
        record = parser.parse_line("git+git@github.com:org/lib.git")

        assert record is not None
        assert record.name == "lib"
        assert record.source == GitSource(url="git@github.com:org/lib.git")

    @pytest.mark.parametrize("line", ["-e ./libs/mypkg", "--editable=./libs/mypkg"])
    def test_editable(self, parser: ManifestParser, line: str) -> None:
        record = parser.parse_line(line)

        assert record is not None
        assert record.name == "mypkg"
        assert record.current_version == "local"
        assert record.source == LocalPathSource(path="./libs/mypkg", editable=True)

    def test_editable_current_dir_gets_generated_name(self, parser: ManifestParser) -> None:
        record = parser.parse_line("-e .")

        assert record is not None
        assert record.name.startswith("local-")

    def test_editable_without_path_raises(self, parser: ManifestParser) -> None:
        with pytest.raises(ParseError):
            parser.parse_line("-e")

    def test_url(self, parser: ManifestParser) -> None:
        line = "https://files.example.com/pkg-1.0.tar.gz"
        record = parser.parse_line(line)

        assert record is not None
        assert record.name == "pkg"
        assert record.current_version == "url-source"
        assert record.source == UrlSource(url=line)

    def test_file_url(self, parser: ManifestParser) -> None:
        record = parser.parse_line("file:///tmp/wheels/mylib-2.0-py3-none-any.whl")

        assert record is not None
        assert record.name == "mylib"


@pytest.mark.unit
class TestParseString:
    """Tests for whole-manifest parsing."""

    def test_sorted_and_deduplicated(self, parser: ManifestParser) -> None:
        content = "\n".join(
            [
                "# core",
                "requests==2.28.1",
                "Django==3.2",
                "requests==2.0.0",
                "",
                "-r other.txt",
                "flask",
            ]
        )

        records = parser.parse_string(content)

        assert [r.name for r in records] == ["django", "flask", "requests"]
        requests = records[-1]
        assert requests.current_version == "2.28.1"

    def test_names_unique(self, parser: ManifestParser) -> None:
        records = parser.parse_string("a\nA\nb\na==1.0\n")

        names = [r.name for r in records]
        assert len(names) == len(set(names))

    def test_empty(self, parser: ManifestParser) -> None:
        assert parser.parse_string("") == []

    def test_parse_file(self, parser: ManifestParser, tmp_path: Path) -> None:
        path = tmp_path / "requirements.txt"
        path.write_text("flask>=2.0\nclick==8.1.3\n", encoding="utf-8")

        records = parser.parse_file(path)

        assert [r.name for r in records] == ["click", "flask"]

    def test_parse_missing_file(self, parser: ManifestParser, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            parser.parse_file(tmp_path / "missing.txt")


@pytest.mark.unit
class TestHelpers:
    """Tests for the line-level helper functions."""

    def test_strip_inline_comment(self) -> None:
        assert strip_inline_comment("django==3.2  # Web framework") == "django==3.2"
        assert strip_inline_comment("# all comment") == ""

    @pytest.mark.parametrize(
        "spec,expected",
        [
            ("requests[socks]==2.28.1", ("requests[socks]", "==2.28.1")),
            ("flask", ("flask", "")),
            ("pkg!=1.0", ("pkg", "!=1.0")),
            ("pkg >= 1.0", ("pkg", ">= 1.0")),
        ],
    )
    def test_split_version_spec(self, spec: str, expected: tuple) -> None:
        assert split_version_spec(spec) == expected

    def test_split_extras(self) -> None:
        assert split_extras("requests[ a , b ,]") == ("requests", ["a", "b"])
        assert split_extras("flask") == ("flask", [])

    @pytest.mark.parametrize(
        "spec,constraint,current",
        [
            ("", Unspecified(), "0.0.0"),
            ("==3.2", Pinned("3.2"), "3.2.0"),
            (">=1", GreaterEqual("1"), "1.0.0"),
            ("~=1.4.2", Compatible("1.4.2"), "1.4.2"),
            (">=1.0,<2.0", Range("1.0", "2.0"), "1.0.0"),
            ("<3.0", Less("3.0"), "0.0.0"),
            ("!=1.5", Unspecified(), "0.0.0"),
            ("==1.0.0rc1", Pinned("1.0.0rc1"), "1.0.0rc1"),
        ],
    )
    def test_parse_constraint(self, spec: str, constraint: object, current: str) -> None:
        assert parse_constraint(spec) == (constraint, current)
