"""Unit tests for link enrichment."""

import pytest

from loomwork.components.graph.link_enrichment_comp import enrich_capabilities, service_access_expr
from loomwork.helpers.dto.capability_dto import CapabilityLink


class TestServiceAccess:
    @pytest.mark.unit
    def test_option_mutex(self) -> None:
        link = CapabilityLink("Foundframe", "bookmarks", ("option", "mutex"))

        assert service_access_expr(link) == (
            'let service = self.bookmarks.as_ref().ok_or("bookmarks not initialized")?'
            ".lock().map_err(|e| e.to_string())?;"
        )

    @pytest.mark.unit
    def test_arc_is_transparent(self) -> None:
        assert service_access_expr(CapabilityLink("F", "tags", ("arc",))) == "let service = self.tags;"

    @pytest.mark.unit
    def test_unknown_wrapper(self) -> None:
        with pytest.raises(ValueError, match="Unknown wrapper 'rc'"):
            service_access_expr(CapabilityLink("F", "tags", ("rc",)))


class TestEnrichCapabilities:
    @pytest.mark.unit
    def test_per_method_entries(self, bookmark_capability, settings_capability) -> None:
        enrichment = enrich_capabilities([bookmark_capability, settings_capability])

        add = enrichment[("BookmarkMgmt", "addBookmark")]
        get = enrichment[("BookmarkMgmt", "getBookmark")]
        reset = enrichment[("SettingsMgmt", "resetSettings")]
        assert add.use_result is False
        assert get.use_result is True
        assert add.field_name == "bookmarks"
        assert add.wrappers == ("option", "mutex")
        assert add.service_access.startswith("let service = self.bookmarks")
        assert reset.service_access is None
        assert len(enrichment) == 7
