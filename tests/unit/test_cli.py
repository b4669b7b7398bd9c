"""
Tests for the import CLI: argument parsing, wiring and exit codes.
"""

import os
from unittest.mock import patch

import pytest

from cms_import.cli import import_stories


@pytest.fixture
def cli_env(settings, session_factory):
    """Route the CLI at the test database and settings."""
    with (
        patch("cms_import.config.get_settings", return_value=settings),
        patch("cms_import.database.get_session_factory", return_value=session_factory),
        patch("cms_import.logging_config.configure_logging") as configure_logging,
    ):
        yield configure_logging


class TestParser:
    def test_defaults(self):
        args = import_stories.build_parser().parse_args([])

        assert args.file is None
        assert args.batch_size is None
        assert not args.resume
        assert not args.dry_run
        assert not args.skip_count

    def test_rejects_non_positive_batch_size(self):
        with pytest.raises(SystemExit):
            import_stories.build_parser().parse_args(["--batch-size", "0"])


class TestMain:
    def test_successful_import_exits_zero(
        self, cli_env, admin_user, tmp_path, story_factory, export_writer, capsys
    ):
        path = export_writer(tmp_path / "export.jsonl", [story_factory(1), story_factory(2)])

        with pytest.raises(SystemExit) as exc_info:
            import_stories.main(["--file", str(path), "--skip-count", "--log-level", "WARNING"])

        assert exc_info.value.code == 0
        output = capsys.readouterr().out
        assert "Imported: 2" in output
        assert "Categories created: 1" in output
        cli_env.assert_called_once_with(json_format=False, level="WARNING")

    def test_errors_print_log_location(
        self, cli_env, admin_user, settings, tmp_path, story_factory, export_writer, capsys
    ):
        path = export_writer(tmp_path / "export.jsonl", [story_factory(1), "not json"])

        with pytest.raises(SystemExit) as exc_info:
            import_stories.main(["--file", str(path)])

        assert exc_info.value.code == 0
        output = capsys.readouterr().out
        assert f"Error log: {settings.IMPORT_ERROR_LOG}" in output
        assert "Progress snapshot:" in output

    def test_missing_file_exits_one(self, cli_env, admin_user, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            import_stories.main(["--file", str(tmp_path / "missing.jsonl")])

        assert exc_info.value.code == 1
        assert "Cannot open input file" in capsys.readouterr().out

    def test_no_users_exits_one(self, cli_env, tmp_path, story_factory, export_writer):
        path = export_writer(tmp_path / "export.jsonl", [story_factory(1)])

        with pytest.raises(SystemExit) as exc_info:
            import_stories.main(["--file", str(path)])

        assert exc_info.value.code == 1

    def test_non_gzip_input_exits_one(self, cli_env, admin_user, tmp_path, capsys):
        path = tmp_path / "export.jsonl.gz"
        path.write_bytes(b"this is not gzip\n")

        with pytest.raises(SystemExit) as exc_info:
            import_stories.main(["--file", str(path)])

        assert exc_info.value.code == 1
        assert "Cannot read input file" in capsys.readouterr().out


class TestBuildCheckpointStore:
    def test_local(self, settings):
        store = import_stories.build_checkpoint_store(settings)

        assert store.name == "local"
        assert store.describe("progress.json").startswith(os.path.realpath(settings.LOCAL_STORAGE_PATH))

    def test_s3(self, settings):
        settings = settings.model_copy(update={"STORAGE_PROVIDER": "s3", "S3_BUCKET": "imports"})

        with patch("cms_import.storage.s3_provider.boto3") as boto3:
            store = import_stories.build_checkpoint_store(settings)

        assert store.name == "s3"
        assert store.bucket == "imports"
        assert boto3.client.call_args.kwargs["region_name"] == settings.S3_REGION

    def test_unknown_provider(self, settings):
        settings = settings.model_copy(update={"STORAGE_PROVIDER": "ftp"})

        with pytest.raises(ValueError, match="Unknown storage provider"):
            import_stories.build_checkpoint_store(settings)
