from __future__ import annotations

import pytest

from pyelevate.models import Conflict


@pytest.fixture
def conflict() -> Conflict:
    return Conflict(
        package="flask",
        reason="Requires werkzeug but upgrade to 3.0.0 may break compatibility",
        current="2.3.0",
        required="3.0.0",
    )


@pytest.mark.unit
class TestConflict:
    """Tests for the Conflict report entity."""

    def test_display_string(self, conflict: Conflict) -> None:
        assert conflict.to_display_string() == (
            "flask: Requires werkzeug but upgrade to 3.0.0 may break compatibility"
        )
        assert str(conflict) == conflict.to_display_string()

    def test_short_string(self, conflict: Conflict) -> None:
        assert conflict.to_short_string() == "flask (2.3.0 -> 3.0.0)"

    def test_to_json(self, conflict: Conflict) -> None:
        assert conflict.to_json() == {
            "package": "flask",
            "reason": "Requires werkzeug but upgrade to 3.0.0 may break compatibility",
            "current": "2.3.0",
            "required": "3.0.0",
        }

    def test_is_hashable_and_comparable(self, conflict: Conflict) -> None:
        twin = Conflict(
            package=conflict.package,
            reason=conflict.reason,
            current=conflict.current,
            required=conflict.required,
        )

        assert conflict == twin
        assert len({conflict, twin}) == 1

    def test_is_immutable(self, conflict: Conflict) -> None:
        with pytest.raises(AttributeError):
            conflict.package = "django"  # type: ignore[misc]
