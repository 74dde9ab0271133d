"""
Marker blocks: rendering, scanning and line-level block operations.

Marker format (always alone on its line, indentation allowed):

    <open> LOOMWORK:<SCOPE>:<BLOCKID> <close>
    ...block content...
    <open> /LOOMWORK:<SCOPE>:<BLOCKID> <close>

<open>/<close> is the comment syntax of the file's language. Scanning does not
need the language: any of the supported comment openers is recognized.

All functions here work on text as read from disk and never touch disk. Existing
lines keep their own line endings; lines written by a block operation use the
``eol`` passed in.
"""

from __future__ import annotations

import re

from loomwork.helpers.dto.patch_dto import (
    PATCH_INSERTED,
    PATCH_UNCHANGED,
    PATCH_UPDATED,
    Anchor,
    BlockKey,
    BlockSpan,
    MarkerPair,
)
from loomwork.helpers.exceptions import MarkerCorruptionError
from loomwork.helpers.files_helper import normalize_eol

MARKER_NAMESPACE = "LOOMWORK"

_SLASH = ("//", "")
_BLOCK = ("/*", "*/")
_HASH = ("#", "")
_ANGLE = ("<!--", "-->")

COMMENT_STYLES: dict[str, tuple[str, str]] = {
    "rust": _BLOCK,
    "rust_jni": _BLOCK,
    "jni": _BLOCK,
    "c": _BLOCK,
    "css": _BLOCK,
    "kotlin": _SLASH,
    "java": _SLASH,
    "aidl": _SLASH,
    "gradle": _SLASH,
    "typescript": _SLASH,
    "javascript": _SLASH,
    "swift": _SLASH,
    "xml": _ANGLE,
    "html": _ANGLE,
    "markdown": _ANGLE,
    "toml": _HASH,
    "yaml": _HASH,
    "python": _HASH,
    "shell": _HASH,
    "properties": _HASH,
}

EXTENSION_LANGUAGES: dict[str, str] = {
    ".rs": "rust",
    ".kt": "kotlin",
    ".kts": "gradle",
    ".gradle": "gradle",
    ".java": "java",
    ".aidl": "aidl",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".mjs": "javascript",
    ".swift": "swift",
    ".xml": "xml",
    ".html": "html",
    ".md": "markdown",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".py": "python",
    ".sh": "shell",
    ".properties": "properties",
    ".css": "css",
    ".c": "c",
    ".h": "c",
}

_KEY_PART = re.compile(r"^[A-Z0-9_.\-]+$")
_MARKER_LINE = re.compile(
    r"^(?P<indent>[ \t]*)(?://|#|/\*|<!--)[ \t]*(?P<end>/?)"
    + MARKER_NAMESPACE
    + r":(?P<scope>[A-Z0-9_.\-]+):(?P<block>[A-Z0-9_.\-]+)[ \t]*(?:\*/|-->)?[ \t]*$"
)


def language_for_path(path: str) -> str | None:
    """Guess a comment language from a file extension."""
    lowered = path.lower()
    for ext, language in EXTENSION_LANGUAGES.items():
        if lowered.endswith(ext):
            return language
    return None


def comment_style(language: str) -> tuple[str, str]:
    try:
        return COMMENT_STYLES[language]
    except KeyError:
        raise ValueError(f"No comment style for language '{language}'") from None


def make_key(scope: str, block_id: str) -> BlockKey:
    """Build an upper-cased key, rejecting characters markers cannot carry."""
    key = BlockKey.of(scope, block_id)
    for part in (key.scope, key.block_id):
        if not _KEY_PART.match(part):
            raise ValueError(f"Invalid marker key part '{part}': use letters, digits, '_', '-' or '.'")
    return key


def build_markers(key: BlockKey, language: str) -> MarkerPair:
    """Render the start and end marker text for a key in a language."""
    opener, closer = comment_style(language)
    tail = f" {closer}" if closer else ""
    return MarkerPair(
        start=f"{opener} {MARKER_NAMESPACE}:{key.scope}:{key.block_id}{tail}",
        end=f"{opener} /{MARKER_NAMESPACE}:{key.scope}:{key.block_id}{tail}",
    )


def _parse_marker(line: str) -> tuple[BlockKey, bool, str] | None:
    match = _MARKER_LINE.match(line.rstrip("\r\n"))
    if not match:
        return None
    return BlockKey(match["scope"], match["block"]), bool(match["end"]), match["indent"]


def scan_blocks(text: str, file_path: str = "<text>") -> list[BlockSpan]:
    """
    Find every marker block in text.

    Raises:
        MarkerCorruptionError: unmatched start or end, nested or duplicated block
    """
    spans: list[BlockSpan] = []
    seen: set[BlockKey] = set()
    open_key: BlockKey | None = None
    open_line = 0
    open_indent = ""
    open_text = ""
    for index, line in enumerate(text.splitlines()):
        parsed = _parse_marker(line)
        if parsed is None:
            continue
        key, is_end, indent = parsed
        if not is_end:
            if open_key is not None:
                raise MarkerCorruptionError(file_path, open_text, f"start marker at line {open_line + 1} has no end marker")
            if key in seen:
                raise MarkerCorruptionError(file_path, line.strip(), f"duplicate block at line {index + 1}")
            open_key, open_line, open_indent, open_text = key, index, indent, line.strip()
            continue
        if open_key != key:
            raise MarkerCorruptionError(file_path, line.strip(), f"end marker at line {index + 1} has no start marker")
        spans.append(BlockSpan(key=key, start_line=open_line, end_line=index, indent=open_indent))
        seen.add(key)
        open_key = None
    if open_key is not None:
        raise MarkerCorruptionError(file_path, open_text, f"start marker at line {open_line + 1} has no end marker")
    return spans


def find_block(text: str, key: BlockKey, file_path: str = "<text>") -> BlockSpan | None:
    for span in scan_blocks(text, file_path):
        if span.key == key:
            return span
    return None


def _content_lines(content: str, eol: str = "\n") -> list[str]:
    body = normalize_eol(content, "\n")
    body = body[:-1] if body.endswith("\n") else body
    if body == "":
        return []
    return [f"{line}{eol}" for line in body.split("\n")]


def _ends_line(line: str) -> bool:
    return line.endswith(("\n", "\r"))


def _find_anchor_line(lines: list[str], anchor: Anchor, skip: set[int]) -> int | None:
    pattern = anchor.pattern or ""
    regex = re.compile(pattern) if anchor.regex else None
    for index, line in enumerate(lines):
        if index in skip:
            continue
        stripped = line.strip()
        if (regex.search(stripped) if regex else pattern in stripped):
            return index
    return None


def insert_block(
    text: str,
    key: BlockKey,
    language: str,
    content: str,
    anchor: Anchor | None = None,
    eol: str = "\n",
) -> tuple[str, bool]:
    """
    Insert a new block at the anchor. Its lines end with eol.

    Returns:
        (new text, anchor_found). When the anchor pattern matches nothing the
        block goes to the end of the text and anchor_found is False.
    """
    anchor = anchor or Anchor.end()
    lines = text.splitlines(keepends=True)
    markers = build_markers(key, language)

    position = len(lines)
    indent = ""
    anchor_found = True
    if anchor.mode in ("after", "before"):
        # Lines inside existing blocks never anchor, so blocks are never nested.
        inside = {i for span in scan_blocks(text) for i in range(span.start_line, span.end_line + 1)}
        found = _find_anchor_line(lines, anchor, inside)
        if found is None:
            anchor_found = False
        else:
            position = found + 1 if anchor.mode == "after" else found
            reference = lines[found]
            indent = reference[: len(reference) - len(reference.lstrip(" \t"))]
    elif anchor.mode != "end":
        raise ValueError(f"Unknown anchor mode '{anchor.mode}'")

    if position > 0 and not _ends_line(lines[position - 1]):
        lines[position - 1] += eol

    block = [f"{indent}{markers.start}{eol}", *_content_lines(content, eol), f"{indent}{markers.end}{eol}"]
    lines[position:position] = block
    return "".join(lines), anchor_found


def replace_block(text: str, span: BlockSpan, content: str, eol: str = "\n") -> tuple[str, bool]:
    """Replace only the lines strictly between the span's markers. Returns (text, changed)."""
    lines = text.splitlines(keepends=True)
    new_inner = _content_lines(content, eol)
    if lines[span.start_line + 1 : span.end_line] == new_inner:
        return text, False
    lines[span.start_line + 1 : span.end_line] = new_inner
    return "".join(lines), True


def remove_block(text: str, span: BlockSpan) -> str:
    """Delete a block, marker lines included. Surrounding lines are untouched."""
    lines = text.splitlines(keepends=True)
    del lines[span.start_line : span.end_line + 1]
    return "".join(lines)


def ensure_block_text(
    text: str,
    key: BlockKey,
    language: str,
    content: str,
    anchor: Anchor | None = None,
    file_path: str = "<text>",
    eol: str = "\n",
) -> tuple[str, str, bool]:
    """
    Insert or update one block in text.

    Returns:
        (new text, status, anchor_found) where status is inserted/updated/unchanged

    Raises:
        MarkerCorruptionError: the text holds malformed markers
    """
    span = find_block(text, key, file_path)
    if span is None:
        new_text, anchor_found = insert_block(text, key, language, content, anchor, eol)
        return new_text, PATCH_INSERTED, anchor_found
    new_text, changed = replace_block(text, span, content, eol)
    return new_text, PATCH_UPDATED if changed else PATCH_UNCHANGED, True


def block_content(text: str, span: BlockSpan) -> str:
    """Text strictly between the span's markers."""
    lines = text.splitlines(keepends=True)
    return "".join(lines[span.start_line + 1 : span.end_line])
