"""
Pytest fixtures and configuration for the test suite.

Fixtures build small architectures in memory:
- a core ring wrapped by an Android ring, plus an aggregating ring
- a BookmarkMgmt capability with the full CRUD set
- a workspace directory under tmp_path
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Add project root to path so tests can import the loomwork package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from loomwork.components.graph.capability_registry_comp import declare_capability, method, param  # noqa: E402
from loomwork.helpers.dto.capability_dto import Capability, CapabilityLink, Reach  # noqa: E402
from loomwork.helpers.dto.ring_dto import Ring, aggregate_rings, core_ring, wrap_ring  # noqa: E402
from loomwork.helpers.dto.weave_dto import WeaveConfig  # noqa: E402
from loomwork.helpers.logging_helper import clear_log_context  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace root."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def weave_config(workspace: Path) -> WeaveConfig:
    """Sequential weave config rooted at the workspace."""
    return WeaveConfig(workspace_root=workspace)


@pytest.fixture
def bookmark_capability() -> Capability:
    """BookmarkMgmt with create/read/update/delete/list plus an untagged method."""
    return declare_capability(
        "BookmarkMgmt",
        Reach.GLOBAL,
        [
            method("addBookmark", [param("url", "string"), param("title", "string", optional=True)], crud="create"),
            method("getBookmark", [param("id", "number")], returns="string", crud="read"),
            method("updateBookmark", [param("id", "number"), param("title", "string")], crud="update"),
            method("deleteBookmark", [param("id", "number")], crud="delete"),
            method("listBookmarks", returns="string", collection=True, crud="list"),
            method("countBookmarks", returns="number"),
        ],
        link=CapabilityLink("Foundframe", "bookmarks", ("option", "mutex")),
    )


@pytest.fixture
def settings_capability() -> Capability:
    """Core-only capability, never visible past the core."""
    return declare_capability(
        "SettingsMgmt",
        Reach.PRIVATE,
        [method("resetSettings")],
    )


@pytest.fixture
def core() -> Ring:
    return core_ring("core", package_name="app.core", package_dir="core")


@pytest.fixture
def android(core: Ring) -> Ring:
    return wrap_ring("android", "AndroidSpiraler", core, package_name="com.example.app", package_dir="android")


@pytest.fixture
def tauri(core: Ring) -> Ring:
    return wrap_ring("tauri", "TauriSpiraler", core, package_name="app-desktop", package_dir="desktop")


@pytest.fixture
def aggregator(android: Ring, tauri: Ring) -> Ring:
    return aggregate_rings("front", "FrontAggregator", [android, tauri])


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep per-task log context from leaking across tests."""
    clear_log_context()
    yield
    clear_log_context()


ARCHITECTURE_SOURCE = '''
from loomwork.components.graph.capability_registry_comp import declare_capability, method
from loomwork.components.graph.generator_matrix_comp import GeneratorMatrix
from loomwork.components.treadles.treadle_compiler_comp import compile_treadle, define_treadle
from loomwork.helpers.dto.ring_dto import core_ring, wrap_ring
from loomwork.helpers.dto.treadle_dto import MethodConfig, OutputSpec

CORE = core_ring("core")
ANDROID = wrap_ring("android", "AndroidSpiraler", CORE, package_dir="android")

RINGS = {"app": ANDROID}
CAPABILITIES = [
    declare_capability("BookmarkMgmt", "global", [method("listBookmarks", returns="string", collection=True)]),
]
MATRIX = GeneratorMatrix()
MATRIX.register(
    "AndroidSpiraler",
    "RustCore",
    compile_treadle(
        define_treadle(
            "android-glue",
            [("AndroidSpiraler", "RustCore")],
            MethodConfig(reach="front"),
            outputs=[OutputSpec(template="glue.kt.j2", path="{package_dir}/Glue.kt", language="kotlin")],
        )
    ),
)
TEMPLATES = {"glue.kt.j2": "{% for m in methods %}fun {{ m.name }}()\\n{% endfor %}"}
'''


@pytest.fixture
def architecture_file(tmp_path: Path) -> Path:
    """Architecture description module with one Android treadle."""
    path = tmp_path / "arch" / "demo_architecture.py"
    path.parent.mkdir()
    path.write_text(ARCHITECTURE_SOURCE)
    return path


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with no system/local config file and no LOOMWORK_* variables."""
    from loomwork.services import config_svc

    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    monkeypatch.setattr(config_svc, "SYSTEM_CONFIG_PATH", str(tmp_path / "no-system-config.yaml"))
    for name in list(os.environ):
        if name.startswith("LOOMWORK_"):
            monkeypatch.delenv(name)
    return cwd


# === PYTEST MARKERS ===


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: fast isolated test")
    config.addinivalue_line("markers", "code_smell: static code-quality check")
