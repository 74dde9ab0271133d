"""
Logging helpers: record tagging and per-task log context.

Every loomwork module logs through ``logging.getLogger(__name__)``. The filter
below turns the module name into readable identity/role tags so that one log
line shows which layer produced it, and appends any context set for the
current task (for example the task being woven by a worker thread).
"""

from __future__ import annotations

import contextvars
import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(loom_identity_tag)s %(loom_role_tag)s%(context_str)s%(message)s"

_ROLE_SUFFIXES: dict[str, str] = {
    "_svc": "[Service]",
    "_wf": "[Workflow]",
    "_comp": "[Component]",
    "_helper": "[Helper]",
    "_dto": "[DTO]",
    "_cli": "[Interface]",
}

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar("loom_log_context", default=None)


def set_log_context(**values: Any) -> None:
    """Merge values into the log context of the current thread/context."""
    current = dict(_log_context.get() or {})
    current.update(values)
    _log_context.set(current)


def clear_log_context() -> None:
    """Drop all log context for the current thread/context."""
    _log_context.set(None)


def _derive_tags(name: str) -> tuple[str, str]:
    leaf = name.rsplit(".", 1)[-1]
    for suffix, role in _ROLE_SUFFIXES.items():
        if leaf.endswith(suffix):
            stem = leaf[: -len(suffix)]
            if not stem:
                break
            identity = " ".join(part.capitalize() for part in stem.split("_") if part)
            return f"[{identity}]", role
    return name, ""


class LoomLogFilter(logging.Filter):
    """Attach ``loom_identity_tag``, ``loom_role_tag`` and ``context_str`` to records.

    Never suppresses a record and never raises.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            name = record.name if isinstance(record.name, str) else ""
            identity, role = _derive_tags(name)
            context = _log_context.get() or {}
            context_str = "[" + " ".join(f"{k}={v}" for k, v in context.items()) + "] " if context else ""
        except Exception:
            identity, role, context_str = str(getattr(record, "name", "")), "", ""
        record.loom_identity_tag = identity
        record.loom_role_tag = role
        record.context_str = context_str
        return True


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for command line use."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(LoomLogFilter())
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[handler],
        force=True,
    )
