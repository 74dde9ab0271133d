"""
Dispatch structured hookup specs to their handlers.

A failing hookup never raises out of apply_hookup: patch errors come back as
a HookupResult with status "error" so the caller can record them per task.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from loomwork.components.hookups.hookup_env_comp import HookupEnv
from loomwork.components.hookups.manifest_hookups_comp import (
    apply_android_manifest,
    apply_cargo_dependency,
    apply_gradle_block,
)
from loomwork.components.hookups.source_hookups_comp import apply_rust_module, apply_typescript_export
from loomwork.helpers.dto.hookup_dto import (
    AndroidManifestHookup,
    CargoDependencyHookup,
    GradleBlockHookup,
    HookupResult,
    RustModuleHookup,
    TypeScriptExportHookup,
)
from loomwork.helpers.exceptions import MarkerCorruptionError, PatchTargetMissingError

logger = logging.getLogger(__name__)

HOOKUP_HANDLERS: dict[type, tuple[str, Callable[[Any, HookupEnv], HookupResult]]] = {
    CargoDependencyHookup: ("cargo-toml", apply_cargo_dependency),
    RustModuleHookup: ("rust-module", apply_rust_module),
    TypeScriptExportHookup: ("typescript-index", apply_typescript_export),
    AndroidManifestHookup: ("android-manifest", apply_android_manifest),
    GradleBlockHookup: ("gradle", apply_gradle_block),
}


def _target_path(spec: Any) -> str:
    for attr in ("manifest", "file", "index_file", "build_file"):
        value = getattr(spec, attr, None)
        if value:
            return str(value)
    return ""


def apply_hookup(spec: Any, env: HookupEnv) -> HookupResult:
    """
    Apply one hookup spec.

    Raises:
        TypeError: spec is not a known hookup type
    """
    entry = HOOKUP_HANDLERS.get(type(spec))
    if entry is None:
        raise TypeError(f"Unknown hookup spec: {type(spec).__name__}")
    kind, handler = entry
    try:
        result = handler(spec, env)
    except (PatchTargetMissingError, MarkerCorruptionError) as e:
        logger.error(f"[hookup] {kind} failed for {_target_path(spec)}: {e}")
        return HookupResult(path=_target_path(spec), kind=kind, status="error", message=str(e))
    logger.debug(f"[hookup] {kind} {result.status}: {result.path}")
    return result
