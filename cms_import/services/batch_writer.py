"""
Batch writer: decoded stories -> article rows + tag links, in as few writes as possible.

Per batch:
1. Resolve every referenced tag in one pass
2. Per story: resolve category, render content, build the article row and
   link rows (a story that fails here is logged, counted and left out)
3. One conflict-tolerant insert for articles, then one for links
4. If the write fails, every story in the write is counted as an error and
   the run moves on to the next batch
"""

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from cms_import.constants import OPINION_TEMPLATES
from cms_import.models import ArticleStatus, ArticleType
from cms_import.schemas.story import StoryRecord
from cms_import.services.article_store import ArticleStore
from cms_import.services.content_transformer import image_url, render_blocks
from cms_import.services.entity_resolver import CategoryResolver, TagResolver
from cms_import.services.progress import ErrorLog, RunProgress

logger = logging.getLogger(__name__)


def from_millis(value: int | None) -> datetime | None:
    """Unix milliseconds -> naive UTC datetime."""
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC).replace(tzinfo=None)


def article_type_for(template: str | None) -> str:
    if template in OPINION_TEMPLATES:
        return ArticleType.OPINION.value
    return ArticleType.NEWS.value


def build_article_row(
    story: StoryRecord,
    *,
    author_id: str,
    category_id: str | None,
    content: str,
    image_base_url: str,
    import_source: str,
) -> dict[str, Any]:
    """Column values for one imported article."""
    now = datetime.utcnow()
    seo = None
    if story.seo:
        seo = {
            "meta_title": story.seo.meta_title,
            "meta_description": story.seo.meta_description,
            "image_alt_text": story.hero_image_alt_text or None,
        }

    excerpt = (story.seo.meta_description if story.seo else None) or story.summary or None

    return {
        "id": story.id,
        "title": story.headline,
        "subtitle": story.subheadline or None,
        "slug": story.slug,
        "content": content,
        "excerpt": excerpt,
        "image_url": image_url(story.hero_image_s3_key, image_base_url),
        "category_id": category_id,
        "author_id": author_id,
        "article_type": article_type_for(story.story_template),
        "news_type": "regular",
        "publish_type": "instant",
        "status": ArticleStatus.PUBLISHED.value,
        "views": 0,
        "is_featured": False,
        "import_source": import_source,
        "source_metadata": {
            "type": import_source,
            "original_id": story.id,
            "message": f"Imported from {import_source} - Original ID: {story.id}",
        },
        "seo": seo,
        "published_at": from_millis(story.published_at),
        "created_at": from_millis(story.created_at) or now,
        "updated_at": from_millis(story.updated_at) or now,
    }


@dataclass
class BatchResult:
    """Outcome of one batch."""

    imported: int = 0
    skipped: int = 0
    errors: int = 0
    duration_ms: int = 0


class BatchWriter:
    """Turns batches of stories into persisted articles and tag links."""

    def __init__(
        self,
        store: ArticleStore,
        categories: CategoryResolver,
        tags: TagResolver,
        stats: RunProgress,
        error_log: ErrorLog,
        *,
        author_id: str,
        image_base_url: str,
        import_source: str,
        max_tags_per_story: int,
    ):
        self.store = store
        self.categories = categories
        self.tags = tags
        self.stats = stats
        self.error_log = error_log
        self.author_id = author_id
        self.image_base_url = image_base_url
        self.import_source = import_source
        self.max_tags_per_story = max_tags_per_story

    def _fail(self, ref: str, message: str, count: int = 1) -> None:
        self.error_log.record(ref, message)
        self.stats.errors += count

    def _prepare(self, story: StoryRecord, tag_map: dict) -> tuple[dict, list[dict]]:
        category_id = None
        section = story.primary_section
        if section is not None:
            category_id = self.categories.resolve(section)

        content = render_blocks(story.body_blocks, self.image_base_url)
        row = build_article_row(
            story,
            author_id=self.author_id,
            category_id=category_id,
            content=content,
            image_base_url=self.image_base_url,
            import_source=self.import_source,
        )

        links = []
        linked: set[str] = set()
        for tag in story.tags[:self.max_tags_per_story]:
            tag_id = tag_map.get(tag.id)
            if tag_id and tag_id not in linked:
                linked.add(tag_id)
                links.append({"article_id": story.id, "tag_id": tag_id})
        return row, links

    def write_batch(self, stories: list[StoryRecord]) -> BatchResult:
        started = time.time()
        result = BatchResult()
        if not stories:
            return result

        try:
            tag_map = self.tags.resolve_batch(
                tag for story in stories for tag in story.tags[:self.max_tags_per_story]
            )
        except Exception as e:
            logger.error(
                f"Tag resolution failed for batch of {len(stories)}: {e}",
                extra={"event": "batch_failed", "batch_size": len(stories)},
            )
            self._fail("batch", f"Tag resolution failed: {e}", count=len(stories))
            result.errors = len(stories)
            return result

        rows: list[dict] = []
        links: list[dict] = []
        for story in stories:
            try:
                row, story_links = self._prepare(story, tag_map)
            except Exception as e:
                logger.error(
                    f"Failed to transform story {story.id}: {e}",
                    extra={"event": "story_failed", "story_id": story.id},
                )
                self._fail(story.id, str(e))
                result.errors += 1
                continue
            rows.append(row)
            links.extend(story_links)

        if not rows:
            result.duration_ms = int((time.time() - started) * 1000)
            return result

        try:
            inserted = self.store.insert_articles(rows, links)
        except Exception as e:
            logger.error(
                f"Batch write failed ({len(rows)} articles): {e}",
                extra={"event": "batch_failed", "batch_size": len(rows)},
            )
            self._fail("batch", f"Batch write failed: {e}", count=len(rows))
            result.errors += len(rows)
            result.duration_ms = int((time.time() - started) * 1000)
            return result

        conflicts = [row["id"] for row in rows if row["id"] not in inserted]
        if conflicts:
            logger.warning(
                f"{len(conflicts)} articles already present (id or slug), skipped: {conflicts[:5]}",
                extra={"event": "articles_conflicted", "items_failed": len(conflicts)},
            )

        result.imported = len(inserted)
        result.skipped = len(conflicts)
        self.stats.imported += result.imported
        self.stats.skipped += result.skipped
        result.duration_ms = int((time.time() - started) * 1000)

        logger.debug(
            f"Batch written: {result.imported} imported, {result.skipped} skipped, {result.errors} errors",
            extra={
                "event": "batch_written",
                "batch_size": len(stories),
                "items_processed": result.imported,
                "items_failed": result.errors,
                "duration_ms": result.duration_ms,
            },
        )
        return result
