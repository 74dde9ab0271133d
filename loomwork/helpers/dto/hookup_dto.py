"""
Hookup DTOs.

A hookup is a structured, idempotent merge into a well-known configuration
file format. Specs are plain dataclasses; results are pydantic models because
they are reported back to callers in the weave result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel

HookupStatus = Literal["applied", "skipped", "error"]


@dataclass(frozen=True)
class CargoDependencyHookup:
    """Add a dependency line to a Cargo.toml ``[dependencies]`` table."""

    manifest: str
    crate: str
    spec: str


@dataclass(frozen=True)
class RustModuleHookup:
    """Declare ``mod name;`` in a Rust source file (lib.rs, mod.rs, ...)."""

    file: str
    module: str
    public: bool = True


@dataclass(frozen=True)
class TypeScriptExportHookup:
    """Re-export a module from a TypeScript index file."""

    index_file: str
    module_path: str


@dataclass(frozen=True)
class AndroidManifestHookup:
    """Declare permissions and services in an AndroidManifest.xml."""

    manifest: str
    permissions: tuple[str, ...] = ()
    services: tuple[str, ...] = ()


@dataclass(frozen=True)
class GradleBlockHookup:
    """Ensure an arbitrary block in a Gradle build script."""

    build_file: str
    block_id: str
    content: str
    after: str | None = None


class HookupResult(BaseModel):
    """Result of applying one hookup."""

    path: str
    kind: str
    status: HookupStatus
    message: str = ""
