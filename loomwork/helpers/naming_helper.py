"""
Identifier case conversion shared by the pipeline and the emitters.

All functions accept camelCase, PascalCase, snake_case, kebab-case or
space separated input and handle runs of capitals (``HTTPServer``).
"""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-_.]+")

CAPABILITY_SUFFIX = "Mgmt"


def split_words(name: str) -> list[str]:
    """Split an identifier into lowercase words."""
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", name)
    spaced = _WORD_BOUNDARY.sub(r"\1 \2", spaced)
    return [w.lower() for w in _SEPARATORS.split(spaced) if w]


def snake_case(name: str) -> str:
    """addBookmark -> add_bookmark, HTTPServer -> http_server."""
    return "_".join(split_words(name))


def pascal_case(name: str) -> str:
    """add_bookmark -> AddBookmark."""
    return "".join(w.capitalize() for w in split_words(name))


def camel_case(name: str) -> str:
    """add_bookmark -> addBookmark."""
    pascal = pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def kebab_case(name: str) -> str:
    """AddBookmark -> add-bookmark."""
    return "-".join(split_words(name))


def entity_name(capability_name: str) -> str:
    """BookmarkMgmt -> Bookmark. Names without the suffix are returned unchanged."""
    if capability_name.endswith(CAPABILITY_SUFFIX) and len(capability_name) > len(CAPABILITY_SUFFIX):
        return capability_name[: -len(CAPABILITY_SUFFIX)]
    return capability_name
