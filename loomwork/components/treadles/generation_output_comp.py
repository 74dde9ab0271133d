"""
Shared output plumbing for generators: data bag, path placeholders, whole-file writes.

Used by compiled treadles and by the weave workflow for direct generators, so
both kinds of generator write files the same way.
"""

from __future__ import annotations

import contextlib
import logging
import re
from pathlib import Path
from typing import Any

from loomwork.components.emission.template_renderer_comp import generated_header
from loomwork.helpers.dto.plan_dto import GenerationTask
from loomwork.helpers.dto.treadle_dto import FileWrite, GeneratedFile, GeneratorContext
from loomwork.helpers.exceptions import GenerationFailure
from loomwork.helpers.files_helper import write_if_changed

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def build_data_bag(task: GenerationTask) -> dict[str, Any]:
    """Base template data for one task; user data is merged over it."""
    outer = task.outer.ring
    return {
        "outer_type": task.outer_type,
        "inner_type": task.inner_type,
        "outer_ring": outer,
        "inner_ring": task.inner.ring,
        "export_name": task.export_name,
        "package_name": outer.package_name or "",
        "package_dir": outer.package_dir or "",
    }


def substitute_placeholders(template: str, data: dict[str, Any]) -> str:
    """
    Replace ``{name}`` tokens with data bag values.

    Raises:
        GenerationFailure: a token names a key absent from the data bag
    """

    def _lookup(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in data:
            raise GenerationFailure(f"Unknown placeholder '{{{key}}}' in '{template}'")
        return str(data[key])

    return _PLACEHOLDER.sub(_lookup, template)


def resolve_output_path(workspace_root: Path, relative: str) -> Path:
    """
    Resolve a generated path against the workspace.

    Raises:
        GenerationFailure: the path leaves the workspace
    """
    root = Path(workspace_root).resolve()
    path = (root / relative).resolve()
    if path != root and root not in path.parents:
        raise GenerationFailure(f"Output path escapes the workspace: {relative}")
    return path


def write_generated_file(context: GeneratorContext, generated: GeneratedFile) -> FileWrite:
    """
    Write one whole generated file under the file's lock.

    Returns:
        FileWrite with status created, modified or unchanged
    """
    path = resolve_output_path(context.workspace_root, generated.path)
    content = generated.content
    if generated.header and generated.language:
        prefix = generated_header(generated.language)
        if prefix and not content.startswith(prefix):
            content = prefix + content

    registry = context.registry
    lock = registry.lock_for(path) if registry is not None else contextlib.nullcontext()
    with lock:
        status = write_if_changed(path, content, dry_run=context.config.dry_run)
    logger.debug(f"[output] {status}: {generated.path}")
    return FileWrite(path=generated.path, status=status)
