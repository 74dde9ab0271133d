"""
Template rendering for generated files and patch blocks.

Templates are referenced by language-neutral ids such as
``android/service.kt.j2``. They are looked up first in templates registered in
memory, then in the configured template directories. A template receives the
merged data bag plus ``methods`` and returns text.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from loomwork.components.patching.markers_comp import COMMENT_STYLES
from loomwork.helpers.exceptions import GenerationFailure
from loomwork.helpers.naming_helper import camel_case, kebab_case, pascal_case, snake_case

logger = logging.getLogger(__name__)

HEADER_TEXT = "Generated by loomwork. Do not edit: changes are overwritten on the next weave."


def generated_header(language: str) -> str | None:
    """One-line generated-file header in the language's comment syntax, or None when unknown."""
    style = COMMENT_STYLES.get(language)
    if style is None:
        return None
    opener, closer = style
    return f"{opener} {HEADER_TEXT}{' ' + closer if closer else ''}\n"


class TemplateRenderer:
    """
    Jinja2-backed renderer satisfying the template contract.

    Args:
        template_dirs: Directories searched for template files, in order
        templates: In-memory templates keyed by template id
    """

    def __init__(self, template_dirs: Iterable[Path] = (), templates: Mapping[str, str] | None = None) -> None:
        self._memory: dict[str, str] = dict(templates or {})
        directories: list[str] = []
        for directory in template_dirs:
            if str(directory) not in directories:
                directories.append(str(directory))
        self.env = Environment(
            loader=ChoiceLoader([DictLoader(self._memory), FileSystemLoader(directories)]),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters.update(
            {
                "snake": snake_case,
                "camel": camel_case,
                "pascal": pascal_case,
                "kebab": kebab_case,
            }
        )

    def register(self, template_id: str, source: str) -> None:
        """Add or replace an in-memory template."""
        self._memory[template_id] = source

    def has(self, template_id: str) -> bool:
        try:
            self.env.get_template(template_id)
        except TemplateNotFound:
            return False
        return True

    def render(
        self,
        template_id: str,
        data: Mapping[str, Any],
        methods: list[Any] | None = None,
        language: str | None = None,
        header: bool = False,
    ) -> str:
        """
        Render a template.

        Raises:
            GenerationFailure: template missing or failing to render
        """
        try:
            template = self.env.get_template(template_id)
        except TemplateNotFound:
            raise GenerationFailure(f"Template not found: {template_id}") from None
        try:
            text = template.render(**{**data, "methods": list(methods or [])})
        except TemplateError as e:
            raise GenerationFailure(f"Template {template_id} failed to render: {e}") from e
        if header and language:
            prefix = generated_header(language)
            if prefix:
                text = prefix + text
        return text
