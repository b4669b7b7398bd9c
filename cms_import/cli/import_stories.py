# cms_import/cli/import_stories.py
"""
Bulk import of a CMS story export (line-delimited JSON, optionally gzipped).

Usage:
    python -m cms_import.cli.import_stories --file /data/export.jsonl.gz
    python -m cms_import.cli.import_stories --file /data/export.jsonl --resume
    python -m cms_import.cli.import_stories --dry-run --skip-count
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()


def build_checkpoint_store(settings):
    """Checkpoint store for progress snapshots, per STORAGE_PROVIDER (local or s3)."""
    provider = settings.STORAGE_PROVIDER.lower().strip()
    if provider == "s3":
        from cms_import.storage.s3_provider import S3CheckpointStore

        return S3CheckpointStore(
            bucket=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region=settings.S3_REGION,
        )
    if provider == "local":
        from cms_import.storage.local_provider import LocalCheckpointStore

        return LocalCheckpointStore(base_path=settings.LOCAL_STORAGE_PATH)
    raise ValueError(f"Unknown storage provider: {provider}. Available: local, s3")


def print_header(options, settings):
    print("\n=== CMS Story Import ===\n")
    print(f"File: {options.file}")
    print(f"Batch size: {options.batch_size}")
    print(f"Snapshot every: {settings.IMPORT_CHECKPOINT_EVERY} stories")
    print(f"Mode: {'DRY RUN' if options.dry_run else 'LIVE'}")
    print(f"Resume: {'yes' if options.resume else 'no'}")
    print(f"Counting pass: {'yes' if options.count_lines else 'no (byte estimate)'}")
    print()


def print_summary(summary):
    from cms_import.services.progress import format_duration

    print(f"\n=== Import {'Preview' if summary.dry_run else 'Complete'} ===\n")
    if summary.resumed_from_line:
        print(f"Resumed after line: {summary.resumed_from_line:,}")
    print(f"Total stories: {summary.total:,}")
    print(f"Imported: {summary.imported:,}")
    print(f"Skipped: {summary.skipped:,}")
    print(f"Errors: {summary.errors:,}")
    print(f"Categories created: {summary.categories_created}")
    print(f"Tags created: {summary.tags_created}")
    print(f"Duration: {format_duration(summary.duration_seconds)}")
    print(f"Rate: {summary.articles_per_second:.1f} articles/s")

    if summary.errors:
        print(f"\nError log: {summary.error_log_path}")
        if summary.progress_location:
            print(f"Progress snapshot: {summary.progress_location}")
    print()


def run(args) -> int:
    """Run one import. Returns the process exit code."""
    from cms_import.config import get_settings
    from cms_import.database import get_session_factory
    from cms_import.logging_config import configure_logging
    from cms_import.services.article_store import ArticleStore
    from cms_import.services.errors import ImportSetupError
    from cms_import.services.import_runner import ImportOptions, ImportRunner

    settings = get_settings()
    configure_logging(
        json_format=args.json_logs or settings.LOG_JSON,
        level=args.log_level or settings.LOG_LEVEL,
    )

    options = ImportOptions(
        file=args.file or settings.IMPORT_FILE,
        batch_size=args.batch_size or settings.IMPORT_BATCH_SIZE,
        resume=args.resume,
        dry_run=args.dry_run,
        count_lines=not args.skip_count,
    )
    print_header(options, settings)

    store = ArticleStore(get_session_factory(), dry_run=options.dry_run)
    runner = ImportRunner(store, build_checkpoint_store(settings), settings, options)

    try:
        summary = runner.run()
    except ImportSetupError as e:
        print(f"Error: {e}")
        return 1

    print_summary(summary)
    return 0


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import a CMS story export into the article store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full import
  python -m cms_import.cli.import_stories --file /data/export.jsonl.gz

  # Continue an interrupted import
  python -m cms_import.cli.import_stories --file /data/export.jsonl.gz --resume

  # Preview without writing anything
  python -m cms_import.cli.import_stories --dry-run
        """,
    )
    parser.add_argument("--file", help="Input file (default: IMPORT_FILE)")
    parser.add_argument("--batch-size", type=positive_int, help="Stories per batch write (default: IMPORT_BATCH_SIZE)")
    parser.add_argument("--resume", action="store_true", help="Continue after the last snapshot")
    parser.add_argument("--dry-run", action="store_true", help="Run everything except persistence")
    parser.add_argument("--skip-count", action="store_true", help="Skip the line-counting pass")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
