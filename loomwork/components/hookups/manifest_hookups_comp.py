"""
Hookups into dependency manifests and build scripts: Cargo.toml, AndroidManifest.xml, Gradle.

Every hookup is expressed as one or more marker blocks so that re-running is
idempotent and dropping a hookup removes its lines on the next sweep.
"""

from __future__ import annotations

import contextlib
import logging

from loomwork.components.hookups.hookup_env_comp import HookupEnv, block_id_part, summarize
from loomwork.components.patching.markers_comp import block_content, find_block, make_key
from loomwork.components.patching.patch_engine_comp import ensure_block
from loomwork.helpers.dto.hookup_dto import (
    AndroidManifestHookup,
    CargoDependencyHookup,
    GradleBlockHookup,
    HookupResult,
)
from loomwork.helpers.dto.patch_dto import Anchor
from loomwork.helpers.files_helper import read_text

logger = logging.getLogger(__name__)

DEPENDENCIES_HEADER = "[dependencies]"


def _dependency_line(crate: str, spec: str) -> str:
    value = spec.strip()
    if not value.startswith(('"', "{")):
        value = f'"{value}"'
    return f"{crate} = {value}"


def apply_cargo_dependency(hookup: CargoDependencyHookup, env: HookupEnv) -> HookupResult:
    """Ensure ``crate = spec`` under ``[dependencies]`` in a Cargo manifest."""
    path = env.resolve(hookup.manifest)
    block_id = f"DEP_{block_id_part(hookup.crate)}"
    line = _dependency_line(hookup.crate, hookup.spec)

    # Header detection and the write hold the same file lock.
    lock = env.registry.lock_for(path) if env.registry is not None else contextlib.nullcontext()
    with lock:
        include_header = False
        if path.exists():
            text, _ = read_text(path)
            span = find_block(text, make_key(env.scope, block_id), str(path))
            if span is not None:
                include_header = block_content(text, span).startswith(DEPENDENCIES_HEADER)
            else:
                include_header = not any(raw.strip() == DEPENDENCIES_HEADER for raw in text.splitlines())

        content = f"{DEPENDENCIES_HEADER}\n{line}" if include_header else line
        anchor = Anchor.end() if include_header else Anchor.after(DEPENDENCIES_HEADER)
        result = ensure_block(
            path, env.scope, block_id, "toml", content, anchor=anchor, registry=env.registry, dry_run=env.dry_run
        )
    return summarize(hookup.manifest, "cargo-toml", [result], f"{hookup.crate} dependency")


def apply_android_manifest(hookup: AndroidManifestHookup, env: HookupEnv) -> HookupResult:
    """Ensure uses-permission and service declarations in an AndroidManifest.xml."""
    path = env.resolve(hookup.manifest)
    results = []
    for permission in hookup.permissions:
        results.append(
            ensure_block(
                path,
                env.scope,
                f"PERMISSION_{block_id_part(permission)}",
                "xml",
                f'    <uses-permission android:name="{permission}" />',
                anchor=Anchor.before("<application"),
                registry=env.registry,
                dry_run=env.dry_run,
            )
        )
    for service in hookup.services:
        results.append(
            ensure_block(
                path,
                env.scope,
                f"SERVICE_{block_id_part(service)}",
                "xml",
                f'        <service android:name="{service}" android:exported="false" />',
                anchor=Anchor.before("</application>"),
                registry=env.registry,
                dry_run=env.dry_run,
            )
        )
    if not results:
        return HookupResult(path=hookup.manifest, kind="android-manifest", status="skipped", message="nothing to declare")
    return summarize(hookup.manifest, "android-manifest", results, f"{len(results)} manifest entries")


def apply_gradle_block(hookup: GradleBlockHookup, env: HookupEnv) -> HookupResult:
    """Ensure a block in a Gradle build script, optionally after an anchor line."""
    anchor = Anchor.after(hookup.after) if hookup.after else Anchor.end()
    result = ensure_block(
        env.resolve(hookup.build_file),
        env.scope,
        block_id_part(hookup.block_id),
        "gradle",
        hookup.content,
        anchor=anchor,
        registry=env.registry,
        dry_run=env.dry_run,
    )
    return summarize(hookup.build_file, "gradle", [result], f"block {hookup.block_id}")
