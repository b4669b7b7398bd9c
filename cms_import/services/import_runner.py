"""
Import runner: one resumable pass over a story export.

States:
    INITIALIZING -> COUNTING (optional) -> STREAMING -> DRAINING -> FINALIZING -> COMPLETED | FAILED

- Initializing: open check, fallback author, cache + dedup preload, resume cursor
- Counting: full pass for a progress denominator (skippable; bytes are used instead)
- Streaming: decode, skip resumed/duplicate lines, batch, write, snapshot, redraw progress
- Draining: write the final partial batch
- Finalizing: unconditional snapshot and summary

Only setup problems fail the run. Bad lines, bad stories and failed batch
writes are counted as errors and the pass continues.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TextIO

from cms_import.config import Settings
from cms_import.logging_config import log_stage, run_id_var
from cms_import.schemas.story import StoryRecord
from cms_import.services.article_store import ArticleStore
from cms_import.services.batch_writer import BatchWriter
from cms_import.services.deduper import ImportedStoryGuard
from cms_import.services.entity_resolver import CategoryResolver, EntityCache, TagResolver
from cms_import.services.errors import FallbackAuthorError, ImportSetupError, StoryDecodeError
from cms_import.services.line_source import LineSource
from cms_import.services.progress import ErrorLog, ProgressDisplay, ProgressTracker
from cms_import.services.story_decoder import decode_line
from cms_import.storage.base import CheckpointStore

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    INITIALIZING = "initializing"
    COUNTING = "counting"
    STREAMING = "streaming"
    DRAINING = "draining"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ImportOptions:
    """Per-invocation options (CLI flags)."""

    file: str
    batch_size: int = 100
    resume: bool = False
    dry_run: bool = False
    count_lines: bool = True
    show_progress: bool = True


@dataclass
class ImportSummary:
    """Final numbers for one run."""

    state: str
    total: int
    imported: int
    skipped: int
    errors: int
    categories_created: int
    tags_created: int
    last_processed_line: int
    duration_seconds: float
    articles_per_second: float
    dry_run: bool = False
    error_log_path: str | None = None
    progress_location: str | None = None
    resumed_from_line: int = 0
    extra: dict = field(default_factory=dict)


class ImportRunner:
    """
    Wires line source, decoder, caches, batch writer and progress tracking
    into a single pass.

    Usage:
        runner = ImportRunner(store, checkpoint_store, settings, ImportOptions(file=path))
        summary = runner.run()
    """

    def __init__(
        self,
        store: ArticleStore,
        checkpoint_store: CheckpointStore,
        settings: Settings,
        options: ImportOptions,
        progress_stream: TextIO | None = None,
    ):
        self.store = store
        self.settings = settings
        self.options = options
        self.progress_stream = progress_stream

        self.run_id = str(uuid.uuid4())
        self.state = RunState.INITIALIZING

        # Run-owned state, handed to collaborators explicitly
        self.cache = EntityCache()
        self.guard = ImportedStoryGuard()
        self.tracker = ProgressTracker(
            checkpoint_store,
            key=settings.IMPORT_PROGRESS_KEY,
            interval=settings.IMPORT_CHECKPOINT_EVERY,
            persist=not options.dry_run,
        )
        self.error_log = ErrorLog(settings.IMPORT_ERROR_LOG)
        self.source = LineSource(options.file)

        self.author_id: str | None = None
        self.resume_cursor = 0
        self.total_lines: int | None = None
        self._writer: BatchWriter | None = None
        self._display: ProgressDisplay | None = None
        self._total_at_start = 0

    @property
    def stats(self):
        return self.tracker.stats

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _initialize(self) -> None:
        self.source.check()

        self.author_id = self.store.find_fallback_author(self.settings.IMPORT_AUTHOR_ID)
        if not self.author_id:
            raise FallbackAuthorError("No users found in database; cannot assign an author to imported articles")
        logger.info(f"Using author {self.author_id}", extra={"event": "author_resolved"})

        self.cache.preload(self.store)
        self.guard.preload(self.store, self.settings.IMPORT_SOURCE_MARKER)

        if self.options.resume:
            self.resume_cursor = self.tracker.resume()
        self._total_at_start = self.stats.total

        self._writer = BatchWriter(
            self.store,
            CategoryResolver(self.store, self.cache, self.stats),
            TagResolver(self.store, self.cache, self.stats),
            self.stats,
            self.error_log,
            author_id=self.author_id,
            image_base_url=self.settings.IMPORT_IMAGE_BASE_URL,
            import_source=self.settings.IMPORT_SOURCE_MARKER,
            max_tags_per_story=self.settings.IMPORT_MAX_TAGS_PER_STORY,
        )

    def _render_progress(self, line_number: int, done: bool = False) -> None:
        if self._display is None:
            return
        if self.total_lines:
            self._display.update(line_number, total=self.total_lines)
        else:
            size = self.source.size_bytes
            fraction = 1.0 if done else (self.source.bytes_read / size if size else 0.0)
            self._display.update(line_number, fraction=fraction)

    def _flush(self, batch: list[StoryRecord]) -> None:
        self._writer.write_batch(batch)
        batch.clear()

    def _checkpoint(self, line_number: int) -> None:
        """Everything up to line_number is handled; move the cursor and maybe snapshot."""
        self.tracker.record_batch(line_number)
        self.tracker.maybe_snapshot()

    def _stream(self) -> int:
        batch_size = self.options.batch_size
        batch: list[StoryRecord] = []
        line_number = 0

        for line in self.source:
            line_number += 1
            if line_number <= self.resume_cursor:
                continue

            try:
                story = decode_line(line, line_number)
            except StoryDecodeError as e:
                logger.warning(
                    f"Skipping line {line_number}: {e.message}",
                    extra={"event": "decode_failed", "line_number": line_number},
                )
                self.error_log.record(f"line-{line_number}", e.message)
                self.stats.errors += 1
                story = None
            else:
                if story is not None:
                    self.stats.total += 1
                    if self.guard.seen(story.id):
                        self.stats.skipped += 1
                    else:
                        self.guard.mark(story.id)
                        batch.append(story)

            if len(batch) >= batch_size:
                self._flush(batch)
                self._checkpoint(line_number)
                self._render_progress(line_number)
            elif not batch:
                # Nothing pending: the cursor can safely move past this line
                self._checkpoint(line_number)
                if line_number % batch_size == 0:
                    self._render_progress(line_number)

        self.state = RunState.DRAINING
        if batch:
            self._flush(batch)
        if line_number > self.resume_cursor:
            self.tracker.record_batch(line_number)
        self._render_progress(line_number, done=True)
        return line_number

    def _summary(self) -> ImportSummary:
        elapsed = time.time() - self.tracker.run_started_at
        processed = self.stats.total - self._total_at_start
        return ImportSummary(
            state=self.state.value,
            total=self.stats.total,
            imported=self.stats.imported,
            skipped=self.stats.skipped,
            errors=self.stats.errors,
            categories_created=self.stats.categories_created,
            tags_created=self.stats.tags_created,
            last_processed_line=self.stats.last_processed_line,
            duration_seconds=round(elapsed, 2),
            articles_per_second=round(processed / elapsed, 1) if elapsed > 0 else 0.0,
            dry_run=self.options.dry_run,
            error_log_path=str(self.error_log.path) if self.stats.errors else None,
            progress_location=self.tracker.location() if not self.options.dry_run else None,
            resumed_from_line=self.resume_cursor,
        )

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def run(self) -> ImportSummary:
        """
        Execute the import.

        Raises:
            ImportSetupError: input unopenable or no fallback author (nothing is
                written), or input corrupt mid-pass (progress up to the last
                completed batch is saved for --resume)
        """
        run_id_var.set(self.run_id)

        self.state = RunState.INITIALIZING
        try:
            with log_stage(RunState.INITIALIZING.value, run_id=self.run_id):
                self._initialize()
        except ImportSetupError:
            self.state = RunState.FAILED
            raise

        try:
            if self.options.count_lines:
                self.state = RunState.COUNTING
                with log_stage(RunState.COUNTING.value):
                    self.total_lines = self.source.count_lines()

            if self.options.show_progress:
                self._display = ProgressDisplay(
                    self.stats, stream=self.progress_stream, start_line=self.resume_cursor
                )

            self.state = RunState.STREAMING
            with log_stage(RunState.STREAMING.value):
                self._stream()
        except Exception:
            self.state = RunState.FAILED
            self.tracker.snapshot(committed_only=True)
            raise

        self.state = RunState.FINALIZING
        if self._display is not None:
            self._display.finish()
        self.tracker.snapshot()

        self.state = RunState.COMPLETED
        summary = self._summary()
        logger.info(
            f"Import finished: {summary.imported} imported, {summary.skipped} skipped, {summary.errors} errors",
            extra={
                "event": "import_complete",
                "items_processed": summary.total,
                "items_failed": summary.errors,
                "duration_ms": int(summary.duration_seconds * 1000),
            },
        )
        return summary
