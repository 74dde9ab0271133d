"""Unit tests for MethodQuery."""

import pytest

from loomwork.components.pipeline.method_pipeline_comp import collect_methods
from loomwork.components.pipeline.method_query_comp import MethodQuery


class TestMethodQuery:
    @pytest.mark.unit
    def test_crud_views(self, bookmark_capability) -> None:
        query = MethodQuery(collect_methods([bookmark_capability], "front"))

        assert [m.name for m in query.creates()] == ["addBookmark"]
        assert [m.name for m in query.reads()] == ["getBookmark"]
        assert [m.name for m in query.updates()] == ["updateBookmark"]
        assert [m.name for m in query.deletes()] == ["deleteBookmark"]
        assert [m.name for m in query.lists()] == ["listBookmarks"]
        assert len(query) == 6

    @pytest.mark.unit
    def test_grouping(self, bookmark_capability, settings_capability) -> None:
        query = MethodQuery(collect_methods([settings_capability, bookmark_capability], "core"))

        assert query.capabilities() == ["SettingsMgmt", "BookmarkMgmt"]
        grouped = query.grouped_by_capability()
        assert [m.name for m in grouped["SettingsMgmt"]] == ["resetSettings"]
        assert [m.name for m in query.with_tag("crud:list")] == ["listBookmarks"]
