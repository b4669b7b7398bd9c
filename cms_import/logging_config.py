"""
Structured logging for import runs.

Provides single-line JSON logging with a run ID for correlating every log
line of one import, plus a context manager that times each run stage.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import TextIO

# Context variables for run correlation
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
stage_var: ContextVar[str | None] = ContextVar("stage", default=None)

# Extra fields copied from log records into JSON output
EXTRA_FIELDS = (
    "event",
    "duration_ms",
    "items_processed",
    "items_failed",
    "line_number",
    "story_id",
    "batch_size",
    "key",
    "path",
)


# -----------------------------------------------------------------------------
# JSON Formatter
# -----------------------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Output format:
    {"timestamp": "...", "level": "INFO", "message": "...", "run_id": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = run_id_var.get()
        if run_id:
            log_data["run_id"] = run_id

        stage = stage_var.get()
        if stage:
            log_data["stage"] = stage

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, ensure_ascii=False)


def configure_logging(json_format: bool = True, level: str = "INFO", stream: TextIO | None = None) -> None:
    """
    Configure root logging.

    Args:
        json_format: If True, use JSON format. If False, use human-readable format.
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream (default stderr, so stdout stays free for the progress line)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Context Managers
# -----------------------------------------------------------------------------


@contextmanager
def log_stage(stage: str, run_id: str | None = None):
    """
    Context manager for stage-level logging.

    Logs stage start and end with duration.

    Usage:
        with log_stage("streaming", run_id=runner.run_id):
            # ... stage logic ...
    """
    if run_id:
        run_id_var.set(run_id)
    stage_var.set(stage)

    start_time = time.time()
    logger = logging.getLogger("cms_import.stage")

    logger.info(f"Stage {stage} started", extra={"event": "stage_start"})

    try:
        yield
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Stage {stage} completed",
            extra={"event": "stage_complete", "duration_ms": duration_ms},
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Stage {stage} failed: {e}",
            extra={"event": "stage_failed", "duration_ms": duration_ms},
        )
        raise
    finally:
        stage_var.set(None)
