"""Unit tests for structured hookups."""

from pathlib import Path

import pytest

from loomwork.components.hookups.hookup_env_comp import HookupEnv, block_id_part
from loomwork.components.hookups.hookup_router_comp import apply_hookup
from loomwork.components.patching.block_registry_comp import BlockRegistry
from loomwork.components.patching.markers_comp import scan_blocks
from loomwork.helpers.dto.hookup_dto import (
    AndroidManifestHookup,
    CargoDependencyHookup,
    GradleBlockHookup,
    RustModuleHookup,
    TypeScriptExportHookup,
)

CARGO_WITH_DEPS = '[package]\nname = "core"\n\n[dependencies]\nserde = "1"\n'
CARGO_WITHOUT_DEPS = '[package]\nname = "core"\n'
ANDROID_MANIFEST = (
    '<manifest package="com.example.app">\n'
    "    <application>\n"
    "    </application>\n"
    "</manifest>\n"
)


@pytest.fixture
def env(workspace: Path) -> HookupEnv:
    return HookupEnv(workspace_root=workspace, scope="android-glue")


class TestCargoDependency:
    @pytest.mark.unit
    def test_adds_under_existing_header(self, workspace: Path, env: HookupEnv) -> None:
        (workspace / "Cargo.toml").write_text(CARGO_WITH_DEPS)

        result = apply_hookup(CargoDependencyHookup("Cargo.toml", "jni", "0.21"), env)

        text = (workspace / "Cargo.toml").read_text()
        assert result.status == "applied"
        assert result.kind == "cargo-toml"
        assert text.count("[dependencies]") == 1
        assert text.index('jni = "0.21"') < text.index('serde = "1"')

    @pytest.mark.unit
    def test_adds_header_when_missing(self, workspace: Path, env: HookupEnv) -> None:
        (workspace / "Cargo.toml").write_text(CARGO_WITHOUT_DEPS)

        apply_hookup(CargoDependencyHookup("Cargo.toml", "jni", "0.21"), env)
        second = apply_hookup(CargoDependencyHookup("Cargo.toml", "jni", "0.21"), env)

        text = (workspace / "Cargo.toml").read_text()
        assert second.status == "skipped"
        assert text.count("[dependencies]") == 1
        assert text.endswith('[dependencies]\njni = "0.21"\n# /LOOMWORK:ANDROID-GLUE:DEP_JNI\n')

    @pytest.mark.unit
    def test_inline_table_spec_kept_verbatim(self, workspace: Path, env: HookupEnv) -> None:
        (workspace / "Cargo.toml").write_text(CARGO_WITH_DEPS)

        apply_hookup(CargoDependencyHookup("Cargo.toml", "serde_json", '{ version = "1" }'), env)

        assert 'serde_json = { version = "1" }' in (workspace / "Cargo.toml").read_text()


class TestSourceHookups:
    @pytest.mark.unit
    def test_rust_module(self, workspace: Path, env: HookupEnv) -> None:
        (workspace / "lib.rs").write_text("mod core;\n")

        apply_hookup(RustModuleHookup("lib.rs", "bookmark_jni"), env)
        apply_hookup(RustModuleHookup("lib.rs", "bookmark_jni"), env)

        text = (workspace / "lib.rs").read_text()
        assert text.count("pub mod bookmark_jni;") == 1

    @pytest.mark.unit
    def test_private_rust_module(self, workspace: Path, env: HookupEnv) -> None:
        (workspace / "lib.rs").write_text("")

        apply_hookup(RustModuleHookup("lib.rs", "internal", public=False), env)

        assert "\nmod internal;\n" in (workspace / "lib.rs").read_text()

    @pytest.mark.unit
    def test_typescript_index_created(self, workspace: Path, env: HookupEnv) -> None:
        result = apply_hookup(TypeScriptExportHookup("src/index.ts", "./bookmarks"), env)

        assert result.status == "applied"
        assert "export * from './bookmarks';" in (workspace / "src" / "index.ts").read_text()


class TestManifestHookups:
    @pytest.mark.unit
    def test_android_manifest(self, workspace: Path, env: HookupEnv) -> None:
        path = workspace / "AndroidManifest.xml"
        path.write_text(ANDROID_MANIFEST)

        result = apply_hookup(
            AndroidManifestHookup(
                "AndroidManifest.xml",
                permissions=("android.permission.INTERNET",),
                services=(".BookmarkService",),
            ),
            env,
        )

        text = path.read_text()
        assert result.status == "applied"
        assert text.index("uses-permission") < text.index("<application>")
        assert text.index("<service") > text.index("<application>")
        assert text.index("<service") < text.index("</application>")
        assert len(scan_blocks(text)) == 2

    @pytest.mark.unit
    def test_empty_android_manifest_hookup_is_skipped(self, env: HookupEnv) -> None:
        result = apply_hookup(AndroidManifestHookup("AndroidManifest.xml"), env)

        assert result.status == "skipped"

    @pytest.mark.unit
    def test_gradle_block_after_anchor(self, workspace: Path, env: HookupEnv) -> None:
        path = workspace / "build.gradle.kts"
        path.write_text("plugins {\n}\ndependencies {\n}\n")

        apply_hookup(
            GradleBlockHookup("build.gradle.kts", "deps", 'implementation("x:y:1")', after="dependencies {"), env
        )

        lines = path.read_text().splitlines()
        assert lines[3] == "// LOOMWORK:ANDROID-GLUE:DEPS"
        assert lines[4] == 'implementation("x:y:1")'


class TestRouter:
    @pytest.mark.unit
    def test_unknown_spec(self, env: HookupEnv) -> None:
        with pytest.raises(TypeError, match="Unknown hookup spec"):
            apply_hookup(object(), env)

    @pytest.mark.unit
    def test_missing_target_is_error_result(self, env: HookupEnv) -> None:
        result = apply_hookup(RustModuleHookup("missing/lib.rs", "x"), env)

        assert result.status == "error"
        assert result.path == "missing/lib.rs"
        assert "does not exist" in result.message

    @pytest.mark.unit
    def test_blocks_recorded_in_registry(self, workspace: Path) -> None:
        (workspace / "lib.rs").write_text("")
        registry = BlockRegistry(workspace)
        env = HookupEnv(workspace_root=workspace, scope="glue", registry=registry)

        apply_hookup(RustModuleHookup("lib.rs", "a"), env)

        assert {str(k) for k in registry.touched(workspace / "lib.rs")} == {"GLUE:MOD_A"}

    @pytest.mark.unit
    def test_block_id_part(self) -> None:
        assert block_id_part("android.permission.INTERNET") == "ANDROID.PERMISSION.INTERNET"
        assert block_id_part("@scope/pkg") == "SCOPE_PKG"
        assert block_id_part("///") == "_"
