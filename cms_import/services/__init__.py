"""
Import services.
"""

from cms_import.services.article_store import ArticleStore
from cms_import.services.batch_writer import BatchWriter
from cms_import.services.deduper import ImportedStoryGuard
from cms_import.services.entity_resolver import CategoryResolver, EntityCache, TagResolver
from cms_import.services.errors import (
    FallbackAuthorError,
    ImportSetupError,
    InputCorruptError,
    InputUnavailableError,
    StoryDecodeError,
)
from cms_import.services.import_runner import ImportOptions, ImportRunner, ImportSummary, RunState
from cms_import.services.line_source import LineSource
from cms_import.services.progress import ErrorLog, ProgressDisplay, ProgressTracker, RunProgress

__all__ = [
    "ArticleStore",
    "BatchWriter",
    "CategoryResolver",
    "EntityCache",
    "ErrorLog",
    "FallbackAuthorError",
    "ImportOptions",
    "ImportRunner",
    "ImportSetupError",
    "ImportSummary",
    "ImportedStoryGuard",
    "InputCorruptError",
    "InputUnavailableError",
    "LineSource",
    "ProgressDisplay",
    "ProgressTracker",
    "RunProgress",
    "RunState",
    "StoryDecodeError",
    "TagResolver",
]
