"""Unit tests for the on-disk patch engine."""

import logging
from pathlib import Path

import pytest

from loomwork.components.patching.block_registry_comp import BlockRegistry
from loomwork.components.patching.patch_engine_comp import ensure_block, remove_marker_block
from loomwork.helpers.dto.patch_dto import PATCH_INSERTED, PATCH_UNCHANGED, PATCH_UPDATED, Anchor, BlockKey
from loomwork.helpers.exceptions import MarkerCorruptionError, PatchTargetMissingError


@pytest.fixture
def lib_rs(tmp_path: Path) -> Path:
    path = tmp_path / "lib.rs"
    path.write_text("pub mod core;\n\nfn hand_written() {}\n")
    return path


class TestEnsureBlock:
    @pytest.mark.unit
    def test_idempotent(self, lib_rs: Path) -> None:
        first = ensure_block(lib_rs, "bookmarks", "commands", "rust", "fn add() {}\n")
        after_first = lib_rs.read_text()
        second = ensure_block(lib_rs, "bookmarks", "commands", "rust", "fn add() {}\n")

        assert first.status == PATCH_INSERTED
        assert second.status == PATCH_UNCHANGED
        assert not second.changed
        assert lib_rs.read_text() == after_first
        assert after_first.count("LOOMWORK:BOOKMARKS:COMMANDS") == 2

    @pytest.mark.unit
    def test_update_preserves_outside_bytes(self, lib_rs: Path) -> None:
        ensure_block(lib_rs, "bookmarks", "commands", "rust", "fn add() {}\n")
        lib_rs.write_text(lib_rs.read_text() + "// trailing edit\n")

        result = ensure_block(lib_rs, "bookmarks", "commands", "rust", "fn add() {}\nfn remove() {}\n")

        text = lib_rs.read_text()
        assert result.status == PATCH_UPDATED
        assert text.startswith("pub mod core;\n\nfn hand_written() {}\n")
        assert text.endswith("// trailing edit\n")
        assert "fn remove() {}" in text

    @pytest.mark.unit
    def test_crlf_file_keeps_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "Main.kt"
        path.write_bytes(b"package app\r\n")

        ensure_block(path, "s", "a", "kotlin", "fun x() {}")

        assert path.read_bytes() == b"package app\r\n// LOOMWORK:S:A\r\nfun x() {}\r\n// /LOOMWORK:S:A\r\n"

    @pytest.mark.unit
    def test_mixed_line_endings_kept_outside_block(self, tmp_path: Path) -> None:
        path = tmp_path / "Main.kt"
        original = b"package app\r\nimport a\nimport b\r\n"
        path.write_bytes(original)

        ensure_block(path, "s", "a", "kotlin", "fun x() {}")
        assert path.read_bytes() == original + b"// LOOMWORK:S:A\r\nfun x() {}\r\n// /LOOMWORK:S:A\r\n"

        ensure_block(path, "s", "a", "kotlin", "fun y() {}")
        assert path.read_bytes().startswith(original)

        assert remove_marker_block(path, "s", "a")
        assert path.read_bytes() == original

    @pytest.mark.unit
    def test_missing_target(self, tmp_path: Path) -> None:
        with pytest.raises(PatchTargetMissingError):
            ensure_block(tmp_path / "absent.rs", "s", "a", "rust", "x")

    @pytest.mark.unit
    def test_create(self, tmp_path: Path) -> None:
        path = tmp_path / "src" / "generated.rs"

        result = ensure_block(path, "s", "a", "rust", "x", create=True)

        assert result.status == PATCH_INSERTED
        assert path.read_text() == "/* LOOMWORK:S:A */\nx\n/* /LOOMWORK:S:A */\n"

    @pytest.mark.unit
    def test_corrupt_file_is_not_written(self, tmp_path: Path) -> None:
        path = tmp_path / "lib.rs"
        path.write_text("/* LOOMWORK:S:A */\nhalf\n")

        with pytest.raises(MarkerCorruptionError):
            ensure_block(path, "s", "b", "rust", "x")

        assert path.read_text() == "/* LOOMWORK:S:A */\nhalf\n"

    @pytest.mark.unit
    def test_anchor_fallback_warns(self, lib_rs: Path, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            ensure_block(lib_rs, "s", "a", "rust", "x", anchor=Anchor.after("mod missing;"))

        assert "Anchor 'mod missing;' not found" in caplog.text
        assert lib_rs.read_text().endswith("/* /LOOMWORK:S:A */\n")

    @pytest.mark.unit
    def test_dry_run(self, lib_rs: Path) -> None:
        before = lib_rs.read_text()

        result = ensure_block(lib_rs, "s", "a", "rust", "x", dry_run=True)

        assert result.status == PATCH_INSERTED
        assert lib_rs.read_text() == before

    @pytest.mark.unit
    def test_records_in_registry(self, lib_rs: Path, tmp_path: Path) -> None:
        registry = BlockRegistry(tmp_path)

        ensure_block(lib_rs, "s", "a", "rust", "x", registry=registry)
        ensure_block(lib_rs, "s", "a", "rust", "x", registry=registry)

        assert registry.touched(lib_rs) == {BlockKey("S", "A")}
        assert "S" in registry.active_scopes


class TestRemoveMarkerBlock:
    @pytest.mark.unit
    def test_remove(self, lib_rs: Path) -> None:
        original = lib_rs.read_text()
        ensure_block(lib_rs, "s", "a", "rust", "x")

        assert remove_marker_block(lib_rs, "s", "a") is True
        assert lib_rs.read_text() == original
        assert remove_marker_block(lib_rs, "s", "a") is False

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        assert remove_marker_block(tmp_path / "none.rs", "s", "a") is False
