"""Tests for the imported-story dedup guard."""

from unittest.mock import MagicMock

from cms_import.services.deduper import ImportedStoryGuard


class TestImportedStoryGuard:
    def test_preload_uses_marker(self):
        store = MagicMock()
        store.load_imported_article_ids.return_value = {"1", "2"}
        guard = ImportedStoryGuard()

        count = guard.preload(store, "quintype")

        store.load_imported_article_ids.assert_called_once_with("quintype")
        assert count == 2
        assert guard.seen("1")
        assert not guard.seen("3")

    def test_mark_within_run(self):
        guard = ImportedStoryGuard()

        assert not guard.seen("9")
        guard.mark("9")

        assert guard.seen("9")
        assert "9" in guard
        assert len(guard) == 1
