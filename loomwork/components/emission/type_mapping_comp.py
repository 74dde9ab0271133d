"""
Table-driven type mapping from the declaration vocabulary to each target.

Capability declarations use a small neutral vocabulary (``string``, ``number``,
``boolean``, ``void`` and ``T[]`` collections). Every target must map every
token it is asked for; a missing mapping raises UnmappedTypeError instead of
passing the token through.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from loomwork.helpers.dto.method_dto import PipelineMethod, PipelineParam
from loomwork.helpers.dto.treadle_dto import MethodTransform
from loomwork.helpers.exceptions import UnmappedTypeError

logger = logging.getLogger(__name__)

TARGETS = ("kotlin", "jni", "rust", "rust_jni", "aidl", "typescript")

CORE_MAPPINGS: dict[str, dict[str, str]] = {
    "string": {"kotlin": "String", "jni": "JString", "rust": "String", "rust_jni": "JString", "aidl": "String", "typescript": "string"},
    "number": {"kotlin": "Int", "jni": "jint", "rust": "i32", "rust_jni": "jint", "aidl": "int", "typescript": "number"},
    "boolean": {"kotlin": "Boolean", "jni": "jboolean", "rust": "bool", "rust_jni": "jboolean", "aidl": "boolean", "typescript": "boolean"},
    "bool": {"kotlin": "Boolean", "jni": "jboolean", "rust": "bool", "rust_jni": "jboolean", "aidl": "boolean", "typescript": "boolean"},
    "void": {"kotlin": "Unit", "jni": "()", "rust": "()", "rust_jni": "()", "aidl": "void", "typescript": "void"},
}

# Struct types cross process boundaries as JSON strings.
STRUCT_BOUNDARY_TYPES = {"jni": "JString", "rust_jni": "JString"}

COLLECTION_FORMATS = {
    "kotlin": "List<{}>",
    "rust": "Vec<{}>",
    "aidl": "List<{}>",
    "typescript": "{}[]",
    "jni": "JString",
    "rust_jni": "JString",
}


def split_collection(type_token: str) -> tuple[str, bool]:
    """``string[]`` -> (``string``, True)."""
    token = type_token.strip()
    if token.endswith("[]"):
        return token[:-2].strip(), True
    return token, False


@dataclass
class TypeMapper:
    """
    Type table for all targets plus registered struct names.

    Struct names (``CreateBookmark``, ``Bookmark``) keep their name in typed
    targets and become JSON strings at JNI boundaries.
    """

    mappings: dict[str, dict[str, str]] = field(default_factory=lambda: {k: dict(v) for k, v in CORE_MAPPINGS.items()})
    structs: set[str] = field(default_factory=set)

    def register(self, token: str, **targets: str) -> None:
        """Register or extend the mapping for a vocabulary token."""
        self.mappings.setdefault(token.lower(), {}).update(targets)

    def register_struct(self, *names: str) -> None:
        self.structs.update(names)

    def with_structs(self, names: Iterable[str]) -> TypeMapper:
        """Copy of this mapper with extra struct names."""
        return replace(self, mappings={k: dict(v) for k, v in self.mappings.items()}, structs=self.structs | set(names))

    def is_struct(self, type_token: str) -> bool:
        return split_collection(type_token)[0] in self.structs

    def map_type(self, type_token: str, target: str, is_collection: bool = False) -> str:
        """
        Map one type token to the target's native type.

        Raises:
            UnmappedTypeError: no mapping exists for the token on this target
        """
        if target not in TARGETS:
            raise UnmappedTypeError(type_token, target)
        base, array = split_collection(type_token)
        collection = is_collection or array
        if base in self.structs:
            native = STRUCT_BOUNDARY_TYPES.get(target, base)
        else:
            row = self.mappings.get(base.lower())
            if row is None or target not in row:
                raise UnmappedTypeError(type_token, target)
            native = row[target]
        if collection:
            return COLLECTION_FORMATS[target].format(native)
        return native


DEFAULT_TYPE_MAPPER = TypeMapper()


def crud_struct_names(methods: Iterable[PipelineMethod]) -> set[str]:
    """Struct names synthesized by CRUD restructuring (``CreateX`` / ``UpdateX``)."""
    names: set[str] = set()
    for m in methods:
        op = m.metadata.get("crud.operation")
        if op == "create":
            names.add(f"Create{m.entity}")
        elif op == "update":
            names.add(f"Update{m.entity}")
    return names


def declared_types(method: PipelineMethod) -> PipelineMethod:
    """
    Undo map_types: the method with its declaration-vocabulary types restored.

    Params added after map_types ran keep the type they carry.
    """
    if "types.target" not in method.metadata:
        return method
    original_params = method.metadata.get("types.original_params", {})
    params = tuple(replace(p, type=original_params.get(p.name, p.type)) for p in method.params)
    return replace(method, params=params, return_type=method.metadata.get("types.original_return", method.return_type))


def map_types(target: str, mapper: TypeMapper | None = None) -> MethodTransform:
    """
    Build a pipeline transform that rewrites param and return types into target types.

    The declared types are kept under ``types.original_params`` (param name ->
    type) and ``types.original_return`` so later emission can map them again.
    """

    def _map_types(methods: list[PipelineMethod]) -> list[PipelineMethod]:
        declared = [declared_types(m) for m in methods]
        active = (mapper or DEFAULT_TYPE_MAPPER).with_structs(crud_struct_names(declared))
        result = []
        for m in declared:
            params = tuple(PipelineParam(p.name, active.map_type(p.type, target), p.optional) for p in m.params)
            mapped = replace(m, params=params, return_type=active.map_type(m.return_type, target, m.is_collection))
            result.append(
                mapped.with_metadata(
                    {
                        "types.target": target,
                        "types.original_params": {p.name: p.type for p in m.params},
                        "types.original_return": m.return_type,
                    }
                )
            )
        return result

    return _map_types
