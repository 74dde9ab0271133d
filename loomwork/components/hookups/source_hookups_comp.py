"""Hookups into source files: Rust module declarations and TypeScript index exports."""

from __future__ import annotations

import logging

from loomwork.components.hookups.hookup_env_comp import HookupEnv, block_id_part, summarize
from loomwork.components.patching.patch_engine_comp import ensure_block
from loomwork.helpers.dto.hookup_dto import HookupResult, RustModuleHookup, TypeScriptExportHookup

logger = logging.getLogger(__name__)


def apply_rust_module(hookup: RustModuleHookup, env: HookupEnv) -> HookupResult:
    """Ensure ``[pub] mod name;`` in a Rust source file. The file must exist."""
    visibility = "pub " if hookup.public else ""
    result = ensure_block(
        env.resolve(hookup.file),
        env.scope,
        f"MOD_{block_id_part(hookup.module)}",
        "rust",
        f"{visibility}mod {hookup.module};",
        registry=env.registry,
        dry_run=env.dry_run,
    )
    return summarize(hookup.file, "rust-module", [result], f"mod {hookup.module}")


def apply_typescript_export(hookup: TypeScriptExportHookup, env: HookupEnv) -> HookupResult:
    """Ensure ``export * from '<module>';`` in an index file, creating the index if needed."""
    result = ensure_block(
        env.resolve(hookup.index_file),
        env.scope,
        f"EXPORT_{block_id_part(hookup.module_path)}",
        "typescript",
        f"export * from '{hookup.module_path}';",
        create=True,
        registry=env.registry,
        dry_run=env.dry_run,
    )
    return summarize(hookup.index_file, "typescript-index", [result], f"export of {hookup.module_path}")
