"""
Pure method-list transforms and filters for the method pipeline.

Transforms take and return ``list[PipelineMethod]`` and never touch the file
system. Filters are ``PipelineMethod -> bool`` predicates; the pipeline runs
them only after every transform.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from loomwork.helpers.dto.method_dto import PipelineMethod, PipelineParam
from loomwork.helpers.dto.treadle_dto import MethodFilter, MethodTransform
from loomwork.helpers.naming_helper import snake_case

logger = logging.getLogger(__name__)

ID_PARAM = PipelineParam("id", "number")


# ----------------------------------------------------------------------
# Prefixing
# ----------------------------------------------------------------------


def add_capability_prefix(methods: list[PipelineMethod]) -> list[PipelineMethod]:
    """Rename each method to ``{capability prefix}_{snake name}``; original_name is kept."""
    return [replace(m, name=f"{m.prefix}_{snake_case(m.original_name)}") for m in methods]


def add_prefix(prefix: str) -> MethodTransform:
    """Build a transform that prefixes every method with a fixed snake prefix."""
    snake_prefix = snake_case(prefix)

    def _add_prefix(methods: list[PipelineMethod]) -> list[PipelineMethod]:
        return [replace(m, name=f"{snake_prefix}_{snake_case(m.original_name)}") for m in methods]

    return _add_prefix


# ----------------------------------------------------------------------
# CRUD restructuring
# ----------------------------------------------------------------------


def _field_mapping(params: Iterable[PipelineParam]) -> str:
    fields = ", ".join(f"{p.name}: data.{p.name}" for p in params)
    return f"{{ {fields} }}" if fields else "{}"


def _identifier(params: tuple[PipelineParam, ...]) -> PipelineParam:
    if not params:
        return ID_PARAM
    return PipelineParam("id", params[0].type)


def crud_interface_mapping(methods: list[PipelineMethod]) -> list[PipelineMethod]:
    """
    Rewrite CRUD-tagged methods to their canonical interface shape.

    create: all params collapse into ``data: Create{Entity}``
    update: first param becomes ``id``, the rest collapse into ``data: Update{Entity}``
    delete: only the identifier param is kept, as ``id``
    read/list: unchanged

    Each rewritten method records ``crud.operation``, ``crud.invoke_transform``
    (how the core call is rebuilt from the new params), ``crud.fields`` and
    ``crud.original_return_type``. A create gets ``crud.read_after_create`` only
    when its capability also declares a read.
    """
    reads_by_capability: dict[str, str] = {}
    for m in methods:
        if m.crud_operation == "read":
            reads_by_capability.setdefault(m.capability, m.name)

    result: list[PipelineMethod] = []
    for m in methods:
        op = m.crud_operation
        if op == "create":
            new = replace(m, params=(PipelineParam("data", f"Create{m.entity}"),))
            meta = {
                "crud.operation": op,
                "crud.invoke_transform": _field_mapping(m.params),
                "crud.fields": m.params,
                "crud.original_return_type": m.return_type,
            }
            read_name = reads_by_capability.get(m.capability)
            if read_name:
                meta["crud.read_after_create"] = read_name
            else:
                logger.warning(f"[crud] {m.capability}.{m.original_name} creates without a sibling read")
            result.append(new.with_metadata(meta))
        elif op == "update":
            rest = m.params[1:]
            new = replace(m, params=(_identifier(m.params), PipelineParam("data", f"Update{m.entity}")))
            result.append(
                new.with_metadata(
                    {
                        "crud.operation": op,
                        "crud.invoke_transform": f"id, {_field_mapping(rest)}",
                        "crud.fields": rest,
                        "crud.original_return_type": m.return_type,
                    }
                )
            )
        elif op == "delete":
            new = replace(m, params=(_identifier(m.params),))
            result.append(
                new.with_metadata(
                    {
                        "crud.operation": op,
                        "crud.invoke_transform": "id",
                        "crud.fields": (),
                        "crud.original_return_type": m.return_type,
                    }
                )
            )
        elif op in ("read", "list"):
            result.append(m.with_metadata({"crud.operation": op, "crud.original_return_type": m.return_type}))
        else:
            result.append(m)
    return result


def add_tags(*tags: str, when: MethodFilter | None = None) -> MethodTransform:
    """Build a transform adding tags to every method (or to those matching ``when``)."""

    def _add_tags(methods: list[PipelineMethod]) -> list[PipelineMethod]:
        return [replace(m, tags=m.tags | frozenset(tags)) if when is None or when(m) else m for m in methods]

    return _add_tags


# ----------------------------------------------------------------------
# Filters
# ----------------------------------------------------------------------


def tag_filter(exclude: Iterable[str]) -> MethodFilter:
    """Build a filter dropping methods whose tags intersect exclude. Untagged methods are kept."""
    excluded = frozenset(exclude)

    def _tag_filter(method: PipelineMethod) -> bool:
        if not method.tags:
            return True
        return not (method.tags & excluded)

    return _tag_filter


def crud_operation_filter(operations: Iterable[str]) -> MethodFilter:
    """Build a filter keeping only the given CRUD operations. Non-CRUD methods are kept."""
    allowed = frozenset(operations)

    def _crud_filter(method: PipelineMethod) -> bool:
        op = method.crud_operation
        return op is None or op in allowed

    return _crud_filter
