"""
Deduplication guard for imported stories.

Dedupe rule: a story is a duplicate when its external id already belongs to
an article carrying this import's provenance marker, or when the same id
appeared earlier in the current run.

Existing ids are loaded once at startup (scoped by provenance marker, not a
scan of every article); membership checks after that are in-memory.
"""

import logging

from cms_import.services.article_store import ArticleStore

logger = logging.getLogger(__name__)


class ImportedStoryGuard:
    """Set of external story ids already imported or queued in this run."""

    def __init__(self, ids: set[str] | None = None):
        self._ids: set[str] = set(ids or ())

    def preload(self, store: ArticleStore, import_source: str) -> int:
        existing = store.load_imported_article_ids(import_source)
        self._ids.update(existing)
        logger.info(
            f"Preloaded {len(existing)} existing article ids for source {import_source}",
            extra={"event": "dedup_preloaded", "items_processed": len(existing)},
        )
        return len(existing)

    def seen(self, story_id: str) -> bool:
        return story_id in self._ids

    def mark(self, story_id: str) -> None:
        self._ids.add(story_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, story_id: object) -> bool:
        return story_id in self._ids
