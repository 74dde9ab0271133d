"""Unit tests for WeaveConfig and WeaveResult models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from loomwork.helpers.dto.weave_dto import DEFAULT_MANIFEST_PATH, TaskError, WeaveConfig, WeaveResult


class TestWeaveConfig:
    @pytest.mark.unit
    def test_defaults(self, tmp_path: Path) -> None:
        config = WeaveConfig(workspace_root=tmp_path)

        assert config.max_workers == 1
        assert config.package_filter is None
        assert config.manifest_path == DEFAULT_MANIFEST_PATH
        assert config.dry_run is False

    @pytest.mark.unit
    def test_max_workers_must_be_positive(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            WeaveConfig(workspace_root=tmp_path, max_workers=0)

    @pytest.mark.unit
    def test_resolve(self, tmp_path: Path) -> None:
        config = WeaveConfig(workspace_root=tmp_path)

        assert config.resolve("core/src/lib.rs") == tmp_path / "core" / "src" / "lib.rs"
        assert config.resolve(tmp_path / "abs") == tmp_path / "abs"


class TestWeaveResult:
    @pytest.mark.unit
    def test_ok_reflects_errors(self) -> None:
        assert WeaveResult().ok
        failed = WeaveResult(errors=[TaskError(task="t", phase="patch", error_type="X", message="m")])
        assert not failed.ok

    @pytest.mark.unit
    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValueError, match="files_generated"):
            WeaveResult(files_generated=-1)
