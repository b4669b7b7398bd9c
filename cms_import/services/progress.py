"""
Run progress: counters, resume cursor, snapshots, error log, console display.

A snapshot is always a full overwrite of every RunProgress field taken at a
batch boundary, so the counters and the cursor describe the same point in
the input. Snapshot failures are logged and never stop the run.
"""

import logging
import sys
import time
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from cms_import.constants import ImportDefaults
from cms_import.storage.base import CheckpointStore

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """1h 2m 3s / 2m 3s / 3s"""
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


@dataclass
class RunProgress:
    """Counters and resume cursor for one import (possibly spread over resumed runs)."""

    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    categories_created: int = 0
    tags_created: int = 0
    last_processed_line: int = 0
    start_time: float = field(default_factory=time.time)
    last_update_time: float = field(default_factory=time.time)
    articles_per_second: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunProgress":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class ProgressTracker:
    """
    Owns RunProgress and persists it through a CheckpointStore.

    Usage:
        tracker = ProgressTracker(store, key="cms_import/progress.json", interval=500)
        cursor = tracker.resume()
        ...
        tracker.record_batch(line_number)
        tracker.maybe_snapshot()
        ...
        tracker.snapshot()
    """

    def __init__(
        self,
        store: CheckpointStore,
        key: str,
        interval: int = ImportDefaults.CHECKPOINT_EVERY,
        persist: bool = True,
    ):
        self.store = store
        self.key = key
        self.interval = interval
        self.persist = persist
        self.stats = RunProgress()
        self.run_started_at = time.time()
        self._total_at_last_snapshot = 0
        # Counters as of the last cursor move; the only state safe to persist mid-batch
        self._committed = replace(self.stats)

    def resume(self) -> int:
        """
        Load the prior snapshot, continuing its counters.

        Returns:
            Resume cursor (0 when there is nothing to resume)
        """
        try:
            data = self.store.load(self.key)
        except Exception as e:
            logger.warning(
                f"Could not load progress snapshot {self.key}: {e}",
                extra={"event": "snapshot_load_failed", "key": self.key},
            )
            return 0
        if not data:
            return 0

        self.stats = RunProgress.from_dict(data)
        self._total_at_last_snapshot = self.stats.total
        self._committed = replace(self.stats)
        logger.info(
            f"Resuming after line {self.stats.last_processed_line}",
            extra={"event": "resume", "line_number": self.stats.last_processed_line},
        )
        return self.stats.last_processed_line

    def record_batch(self, line_number: int) -> None:
        """Move the cursor after a batch has been fully handled."""
        self.stats.last_processed_line = line_number
        self._committed = replace(self.stats)

    def maybe_snapshot(self) -> bool:
        """Snapshot when `total` has crossed an interval boundary since the last one."""
        if self.stats.total // self.interval > self._total_at_last_snapshot // self.interval:
            return self.snapshot()
        return False

    def snapshot(self, committed_only: bool = False) -> bool:
        """
        Persist a full snapshot. Returns False (and logs) on failure.

        committed_only saves the counters as of the last cursor move instead
        of the live ones, for runs that stop with a batch still pending.
        """
        stats = self._committed if committed_only else self.stats
        now = time.time()
        elapsed = now - self.run_started_at
        stats.articles_per_second = round(stats.total / elapsed, 2) if elapsed > 0 else 0.0
        stats.last_update_time = now
        self._total_at_last_snapshot = stats.total

        if not self.persist:
            return False

        try:
            self.store.save(self.key, stats.to_dict())
        except Exception as e:
            logger.warning(
                f"Failed to save progress snapshot {self.key}: {e}",
                extra={"event": "snapshot_failed", "key": self.key},
            )
            return False

        logger.debug(
            f"Progress snapshot saved at line {stats.last_processed_line}",
            extra={"event": "snapshot_saved", "line_number": stats.last_processed_line},
        )
        return True

    def location(self) -> str:
        return self.store.describe(self.key)


class ErrorLog:
    """Append-only error log, one line per failure: [timestamp] id: message"""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.count = 0

    def record(self, ref: str, message: str) -> None:
        self.count += 1
        message = " ".join(str(message).split())
        timestamp = datetime.utcnow().isoformat() + "Z"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"[{timestamp}] {ref}: {message}\n")
        except OSError as e:
            logger.warning(f"Could not write to error log {self.path}: {e}")


class ProgressDisplay:
    """
    Single-line console progress bar, redrawn in place.

    Uses line counts when a total is known, else the fraction of input bytes
    consumed.
    """

    def __init__(
        self,
        stats: RunProgress,
        stream: TextIO | None = None,
        width: int = ImportDefaults.PROGRESS_BAR_WIDTH,
        start_line: int = 0,
    ):
        self.stats = stats
        self.stream = stream or sys.stdout
        self.width = width
        self.start_line = start_line  # lines skipped on resume don't count towards the rate
        self.started_at = time.time()

    def render(self, current: int, total: int | None = None, fraction: float | None = None) -> str:
        if fraction is None:
            fraction = current / total if total else 0.0
        fraction = min(max(fraction, 0.0), 1.0)

        elapsed = time.time() - self.started_at
        rate = (current - self.start_line) / elapsed if elapsed > 0 else 0.0
        if total:
            remaining = (total - current) / rate if rate > 0 else 0
            position = f"{current:,}/{total:,}"
        else:
            remaining = elapsed * (1 - fraction) / fraction if fraction > 0 else 0
            position = f"{current:,}"

        filled = int(fraction * self.width)
        bar = "█" * filled + "░" * (self.width - filled)
        return (
            f"[{bar}] {int(fraction * 100)}% | {position} | "
            f"{rate:.1f}/s | ETA: {format_duration(remaining)} | "
            f"Imported: {self.stats.imported:,} | Skipped: {self.stats.skipped:,} | Errors: {self.stats.errors}"
        )

    def update(self, current: int, total: int | None = None, fraction: float | None = None) -> None:
        self.stream.write("\r" + self.render(current, total=total, fraction=fraction))
        self.stream.flush()

    def finish(self) -> None:
        self.stream.write("\n")
        self.stream.flush()
