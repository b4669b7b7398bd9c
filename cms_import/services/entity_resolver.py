"""
Entity resolution for categories and tags.

External section/tag references are mapped to internal ids through an
in-memory cache. The cache is preloaded from the store once and then kept
current as entities are created, so resolution costs no database round trip
after the first sighting of a key.

Categories are cached under two aliases (display name and slug). Tags are
keyed by a stable slug derived from their name.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from cms_import.constants import SECTION_MAPPING, CategoryDefaults, ContentDefaults
from cms_import.schemas.story import StorySection, StoryTag
from cms_import.services.article_store import ArticleStore
from cms_import.services.progress import RunProgress

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
# Keep latin letters, digits, Arabic block and hyphens
_SLUG_DISALLOWED = re.compile(r"[^a-z0-9\u0600-\u06FF-]")


def stable_slug(text: str) -> str:
    """Deterministic slug for a tag name. May be empty for symbol-only names."""
    slug = _WHITESPACE.sub("-", text.lower())
    slug = _SLUG_DISALLOWED.sub("", slug)
    return slug[:ContentDefaults.TAG_SLUG_MAX_CHARS]


def tag_slug(tag: StoryTag) -> str:
    return stable_slug(tag.name) or f"tag-{tag.id}"


def category_attributes(section: StorySection) -> dict[str, str]:
    """Display attributes for a section, from SECTION_MAPPING or derived."""
    mapping = SECTION_MAPPING.get(section.slug)
    if mapping:
        return dict(mapping)
    return {
        "name_ar": section.name or section.slug,
        "name_en": section.slug[:1].upper() + section.slug[1:],
        "color": CategoryDefaults.COLOR,
    }


@dataclass
class EntityCache:
    """Key -> internal id maps owned by one import run."""

    categories: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)

    def preload(self, store: ArticleStore) -> None:
        category_rows = store.load_category_keys()
        for category_id, name_ar, slug in category_rows:
            if name_ar:
                self.categories[name_ar] = category_id
            if slug:
                self.categories[slug] = category_id

        tag_rows = store.load_tag_keys()
        for tag_id, slug in tag_rows:
            if slug:
                self.tags[slug] = tag_id

        logger.info(
            f"Preloaded {len(category_rows)} categories and {len(tag_rows)} tags",
            extra={"event": "cache_preloaded"},
        )


class CategoryResolver:
    """Section reference -> category id, creating each category at most once."""

    def __init__(self, store: ArticleStore, cache: EntityCache, stats: RunProgress):
        self.store = store
        self.cache = cache
        self.stats = stats

    def resolve(self, section: StorySection) -> str:
        if not section.slug:
            raise ValueError(f"Section {section.id!r} has no slug")

        attrs = category_attributes(section)

        for alias in (attrs["name_ar"], section.slug):
            cached = self.cache.categories.get(alias)
            if cached:
                return cached

        category_id = self.store.create_category(
            {
                "name_ar": attrs["name_ar"],
                "name_en": attrs["name_en"],
                "slug": section.slug,
                "color": attrs["color"],
                "status": CategoryDefaults.STATUS,
                "display_order": CategoryDefaults.DISPLAY_ORDER,
            }
        )
        self.cache.categories[attrs["name_ar"]] = category_id
        self.cache.categories[section.slug] = category_id
        self.stats.categories_created += 1

        logger.info(
            f"Created category {section.slug} ({attrs['name_en']})",
            extra={"event": "category_created"},
        )
        return category_id


class TagResolver:
    """Batch tag resolution: cached tags are free, the rest are created in one insert."""

    def __init__(self, store: ArticleStore, cache: EntityCache, stats: RunProgress):
        self.store = store
        self.cache = cache
        self.stats = stats

    def resolve_batch(self, tags: Iterable[StoryTag]) -> dict:
        """
        Resolve every tag referenced by one batch.

        When two external tags share a slug, the first one seen supplies the
        display name and both resolve to the same tag. Tags that can't be
        resolved after the insert and read-back are left out of the result.

        Returns:
            external tag id -> internal tag id
        """
        result: dict = {}
        pending: dict[str, list] = {}  # slug -> external ids waiting on it
        to_create: dict[str, dict] = {}

        for tag in tags:
            slug = tag_slug(tag)
            cached = self.cache.tags.get(slug)
            if cached:
                result[tag.id] = cached
                continue
            pending.setdefault(slug, []).append(tag.id)
            if slug not in to_create:
                name = tag.name or slug
                to_create[slug] = {"name_ar": name, "name_en": name, "slug": slug}

        if not to_create:
            return result

        inserted = self.store.insert_tags(list(to_create.values()))
        for tag_id, slug in inserted:
            self.cache.tags[slug] = tag_id
        self.stats.tags_created += len(inserted)

        # Slugs that already existed outside the cache (another run, another process)
        missing = [slug for slug in to_create if slug not in self.cache.tags]
        if missing:
            for slug, tag_id in self.store.fetch_tag_ids(missing).items():
                self.cache.tags[slug] = tag_id

        unresolved = 0
        for slug, external_ids in pending.items():
            tag_id = self.cache.tags.get(slug)
            if tag_id is None:
                unresolved += len(external_ids)
                continue
            for external_id in external_ids:
                result[external_id] = tag_id

        if unresolved:
            logger.warning(
                f"{unresolved} tag references could not be resolved and were skipped",
                extra={"event": "tags_unresolved", "items_failed": unresolved},
            )
        return result
