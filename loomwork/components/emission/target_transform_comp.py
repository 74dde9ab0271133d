"""
Per-target method transforms applied right before template rendering.

For every method: map types through the type table, apply the target's member
naming convention and, for targets that sit on a runtime boundary (JNI), attach
the marshal expressions needed to cross it in both directions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from loomwork.components.emission.type_mapping_comp import (
    DEFAULT_TYPE_MAPPER,
    TARGETS,
    TypeMapper,
    crud_struct_names,
    declared_types,
    split_collection,
)
from loomwork.components.pipeline.method_pipeline_comp import to_bound_method
from loomwork.helpers.dto.method_dto import EmittedMethod, EmittedParam, PipelineMethod
from loomwork.helpers.naming_helper import camel_case, pascal_case, snake_case

logger = logging.getLogger(__name__)

MEMBER_NAMING: dict[str, Callable[[str], str]] = {
    "kotlin": camel_case,
    "aidl": camel_case,
    "typescript": camel_case,
    "rust": snake_case,
    "rust_jni": snake_case,
    "jni": snake_case,
}

BOUNDARY_TARGETS = frozenset({"rust_jni", "jni"})


def type_name(name: str) -> str:
    """Type-like names are pascal case in every target."""
    return pascal_case(name)


# ----------------------------------------------------------------------
# JNI marshalling
# ----------------------------------------------------------------------


def jni_param_conversion(name: str, type_token: str, mapper: TypeMapper) -> str:
    """Rust statement converting an incoming JNI argument into the core's owned type."""
    base, collection = split_collection(type_token)
    if collection or mapper.is_struct(type_token):
        rust_type = mapper.map_type(type_token, "rust")
        return (
            f'let {name}_json: String = env.get_string(&{name}).expect("Failed to get {name}").into();\n'
            f'let {name}: {rust_type} = serde_json::from_str(&{name}_json).expect("Failed to parse {name}");'
        )
    token = base.lower()
    if token == "string":
        return f'let {name}: String = env.get_string(&{name}).expect("Failed to get {name}").into();'
    if token == "number":
        return f"let {name}: i32 = {name} as i32;"
    if token in ("boolean", "bool"):
        return f"let {name}: bool = {name} != 0;"
    # Raises UnmappedTypeError for anything the table does not know.
    rust_type = mapper.map_type(type_token, "rust")
    return f"let {name}: {rust_type} = {name}.into();"


def jni_return_conversion(type_token: str, is_collection: bool, mapper: TypeMapper) -> str | None:
    """Rust expression converting ``result`` back into a JNI return value. None for void."""
    base, array = split_collection(type_token)
    if is_collection or array or mapper.is_struct(type_token):
        return (
            'env.new_string(serde_json::to_string(&result).expect("Failed to serialize result"))'
            '.expect("Failed to create Java string").into_raw()'
        )
    token = base.lower()
    if token == "void":
        return None
    if token == "string":
        return 'env.new_string(&result).expect("Failed to create Java string").into_raw()'
    if token == "number":
        return "result as jint"
    if token in ("boolean", "bool"):
        return "result as jboolean"
    mapper.map_type(type_token, "rust_jni")
    return "result.into()"


def jni_error_value(type_token: str, is_collection: bool, mapper: TypeMapper) -> str:
    """Value returned from a JNI entry point when the core call fails."""
    base, array = split_collection(type_token)
    if is_collection or array or mapper.is_struct(type_token):
        return "std::ptr::null_mut()"
    token = base.lower()
    if token == "string":
        return "std::ptr::null_mut()"
    if token == "number":
        return "-1"
    if token in ("boolean", "bool"):
        return "0"
    if token == "void":
        return "()"
    mapper.map_type(type_token, "rust_jni")
    return "Default::default()"


# ----------------------------------------------------------------------
# Target transform
# ----------------------------------------------------------------------


def transform_for_target(
    methods: list[PipelineMethod],
    target: str,
    mapper: TypeMapper | None = None,
) -> list[EmittedMethod]:
    """
    Render pipeline methods into one target's vocabulary.

    Args:
        methods: Processed pipeline methods; types already mapped by map_types
            are mapped again from their declared tokens
        target: One of TARGETS
        mapper: Type table; defaults to the built-in one

    Returns:
        EmittedMethod per input method, in order

    Raises:
        UnmappedTypeError: a param or return type has no mapping for target
    """
    if target not in TARGETS:
        raise ValueError(f"Unknown emission target '{target}', expected one of {TARGETS}")
    methods = [declared_types(m) for m in methods]
    active = (mapper or DEFAULT_TYPE_MAPPER).with_structs(crud_struct_names(methods))
    naming = MEMBER_NAMING[target]
    boundary = target in BOUNDARY_TARGETS

    emitted: list[EmittedMethod] = []
    for m in methods:
        bound = to_bound_method(m)
        params = tuple(
            EmittedParam(
                name=naming(p.name),
                type=active.map_type(p.type, target),
                optional=p.optional,
                marshal_in=jni_param_conversion(naming(p.name), p.type, active) if boundary else None,
            )
            for p in m.params
        )
        emitted.append(
            EmittedMethod(
                name=naming(m.name),
                bind_name=bound.bind_name,
                original_name=m.original_name,
                capability=m.capability,
                params=params,
                return_type=active.map_type(m.return_type, target, m.is_collection),
                target=target,
                marshal_out=jni_return_conversion(m.return_type, m.is_collection, active) if boundary else None,
                error_value=jni_error_value(m.return_type, m.is_collection, active) if boundary else None,
                description=m.description,
                metadata={
                    **m.metadata,
                    "impl_name": bound.impl_name,
                    "js_name": bound.js_name,
                    "service_name": bound.service_name,
                    "entity": m.entity,
                    "entity_type": type_name(m.entity),
                },
            )
        )
    logger.debug(f"[emission] {len(emitted)} methods emitted for {target}")
    return emitted
