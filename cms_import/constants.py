"""
Centralized magic constants organized by domain.

All hardcoded numbers/strings used by the importer should be defined here
with a note explaining their purpose.
"""


class ImportDefaults:
    """Default values for an import run."""

    BATCH_SIZE = 100                    # Stories per batch write
    CHECKPOINT_EVERY = 500              # Stories read between progress snapshots
    MAX_TAGS_PER_STORY = 10             # Tags linked per story
    PROGRESS_BAR_WIDTH = 30             # Characters in the console bar


class ContentDefaults:
    """Content transformation constants."""

    EMPTY_PAYLOAD = "<p></p>"           # Never store an empty content string
    TAG_SLUG_MAX_CHARS = 100
    RELATED_READING_SUBTYPE = "also-read"
    YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}"


class CategoryDefaults:
    """Fallbacks for sections missing from SECTION_MAPPING."""

    COLOR = "#6b7280"
    STATUS = "active"
    DISPLAY_ORDER = 0


# Well-known external section slugs -> display names and colour
SECTION_MAPPING: dict[str, dict[str, str]] = {
    "saudia": {"name_ar": "محليات", "name_en": "Local", "color": "#dc2626"},
    "stations": {"name_ar": "محطات", "name_en": "Stations", "color": "#9333ea"},
    "mylife": {"name_ar": "حياتنا", "name_en": "Lifestyle", "color": "#ec4899"},
    "technology": {"name_ar": "تقنية", "name_en": "Technology", "color": "#3b82f6"},
    "business": {"name_ar": "أعمال", "name_en": "Business", "color": "#16a34a"},
    "world": {"name_ar": "العالم", "name_en": "World", "color": "#0891b2"},
    "tourism": {"name_ar": "سياحة", "name_en": "Tourism", "color": "#f59e0b"},
    "articles": {"name_ar": "مقالات", "name_en": "Articles", "color": "#8b5cf6"},
    "regions": {"name_ar": "مناطق", "name_en": "Regions", "color": "#84cc16"},
    "culture": {"name_ar": "ثقافة", "name_en": "Culture", "color": "#d946ef"},
    "community": {"name_ar": "مجتمع", "name_en": "Community", "color": "#f97316"},
    "sports": {"name_ar": "رياضة", "name_en": "Sports", "color": "#22c55e"},
    "careers": {"name_ar": "وظائف", "name_en": "Careers", "color": "#6366f1"},
    "cars": {"name_ar": "سيارات", "name_en": "Cars", "color": "#ef4444"},
}

# Story templates that map to opinion pieces; everything else is news
OPINION_TEMPLATES = frozenset({"articles"})
