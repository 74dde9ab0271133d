"""Unit tests for loomwork.helpers.exceptions module."""

import pytest

from loomwork.helpers.exceptions import (
    GenerationFailure,
    LoomworkError,
    MarkerCorruptionError,
    PatchTargetMissingError,
    PlanNotFinalError,
    UnmappedTypeError,
)


class TestExceptionHierarchy:
    @pytest.mark.unit
    @pytest.mark.parametrize("exc_type", [GenerationFailure, PatchTargetMissingError, PlanNotFinalError])
    def test_derives_from_base(self, exc_type: type) -> None:
        assert issubclass(exc_type, LoomworkError)

    @pytest.mark.unit
    def test_unmapped_type_is_generation_failure(self) -> None:
        """An unmapped type fails the task like any other generation failure."""
        assert issubclass(UnmappedTypeError, GenerationFailure)

    @pytest.mark.unit
    def test_phase_defaults_to_none(self) -> None:
        assert GenerationFailure("boom").phase is None


class TestErrorPayloads:
    @pytest.mark.unit
    def test_unmapped_type_message(self) -> None:
        error = UnmappedTypeError("Widget", "kotlin")

        assert error.type_token == "Widget"
        assert error.target == "kotlin"
        assert str(error) == "No kotlin mapping for type 'Widget'"

    @pytest.mark.unit
    def test_marker_corruption_carries_marker_text(self) -> None:
        error = MarkerCorruptionError("lib.rs", "/* LOOMWORK:A:B */", "start marker at line 3 has no end marker")

        assert error.marker == "/* LOOMWORK:A:B */"
        assert "/* LOOMWORK:A:B */" in str(error)
        assert str(error).startswith("lib.rs: ")

    @pytest.mark.unit
    def test_patch_target_missing_names_file(self) -> None:
        with pytest.raises(PatchTargetMissingError, match="Cargo.toml"):
            raise PatchTargetMissingError("core/Cargo.toml")
