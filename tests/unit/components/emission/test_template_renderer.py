"""Unit tests for TemplateRenderer."""

from pathlib import Path

import pytest

from loomwork.components.emission.template_renderer_comp import HEADER_TEXT, TemplateRenderer, generated_header
from loomwork.helpers.exceptions import GenerationFailure


class TestGeneratedHeader:
    @pytest.mark.unit
    def test_comment_styles(self) -> None:
        assert generated_header("kotlin") == f"// {HEADER_TEXT}\n"
        assert generated_header("rust") == f"/* {HEADER_TEXT} */\n"
        assert generated_header("xml") == f"<!-- {HEADER_TEXT} -->\n"
        assert generated_header("cobol") is None


class TestTemplateRenderer:
    @pytest.mark.unit
    def test_in_memory_template(self) -> None:
        renderer = TemplateRenderer(templates={"t.kt.j2": "class {{ entity | pascal }}Service\n"})

        assert renderer.render("t.kt.j2", {"entity": "bookmark"}) == "class BookmarkService\n"

    @pytest.mark.unit
    def test_methods_are_exposed(self) -> None:
        renderer = TemplateRenderer(templates={"m.j2": "{% for m in methods %}{{ m | snake }};{% endfor %}"})

        assert renderer.render("m.j2", {}, methods=["addBookmark", "listBookmarks"]) == "add_bookmark;list_bookmarks;"

    @pytest.mark.unit
    def test_template_directories(self, tmp_path: Path) -> None:
        (tmp_path / "android").mkdir()
        (tmp_path / "android" / "service.kt.j2").write_text("package {{ package_name }}\n")

        renderer = TemplateRenderer(template_dirs=[tmp_path])

        assert renderer.has("android/service.kt.j2")
        assert renderer.render("android/service.kt.j2", {"package_name": "com.example"}) == "package com.example\n"

    @pytest.mark.unit
    def test_header_prepended(self) -> None:
        renderer = TemplateRenderer(templates={"t": "fun x() {}\n"})

        text = renderer.render("t", {}, language="kotlin", header=True)

        assert text == f"// {HEADER_TEXT}\nfun x() {{}}\n"

    @pytest.mark.unit
    def test_undefined_variable_fails(self) -> None:
        renderer = TemplateRenderer(templates={"t": "{{ missing }}"})

        with pytest.raises(GenerationFailure, match="failed to render"):
            renderer.render("t", {})

    @pytest.mark.unit
    def test_missing_template_fails(self) -> None:
        renderer = TemplateRenderer()

        assert not renderer.has("nope.j2")
        with pytest.raises(GenerationFailure, match="Template not found: nope.j2"):
            renderer.render("nope.j2", {})

    @pytest.mark.unit
    def test_register_replaces(self) -> None:
        renderer = TemplateRenderer(templates={"t": "one"})
        renderer.register("t", "two")

        assert renderer.render("t", {}) == "two"
