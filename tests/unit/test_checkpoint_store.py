"""Tests for the local and S3 checkpoint stores."""

import os
import tempfile
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cms_import.storage.base import encode_snapshot
from cms_import.storage.local_provider import LocalCheckpointStore
from cms_import.storage.s3_provider import S3CheckpointStore


class TestPathTraversal:
    """Verify _get_path rejects path traversal attempts."""

    def setup_method(self):
        self.tmpdir = os.path.realpath(tempfile.mkdtemp())
        self.store = LocalCheckpointStore(base_path=self.tmpdir)

    def test_traversal_with_dotdot(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("../../../etc/passwd")

    def test_traversal_with_absolute(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("/etc/passwd")

    def test_normal_key_succeeds(self):
        path = self.store._get_path("cms_import/progress.json")
        assert str(path).startswith(self.tmpdir)


class TestLocalCheckpointStore:
    def test_save_then_load(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))

        store.save("run/progress.json", {"total": 3, "last_processed_line": 4})

        assert store.load("run/progress.json") == {"total": 3, "last_processed_line": 4}

    def test_load_missing_is_none(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))

        assert store.load("nothing.json") is None

    def test_save_overwrites_and_leaves_no_temp_files(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))

        store.save("progress.json", {"total": 1})
        store.save("progress.json", {"total": 2})

        assert store.load("progress.json") == {"total": 2}
        assert sorted(p.name for p in tmp_path.iterdir()) == ["progress.json"]

    def test_delete(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))
        store.save("progress.json", {"total": 1})

        assert store.delete("progress.json") is True
        assert store.delete("progress.json") is False

    def test_corrupt_snapshot_raises(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))
        (tmp_path / "progress.json").write_text("[1, 2]")

        with pytest.raises(ValueError):
            store.load("progress.json")

    def test_describe_is_path(self, tmp_path):
        store = LocalCheckpointStore(base_path=str(tmp_path))

        assert store.describe("progress.json").endswith("progress.json")


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


class TestS3CheckpointStore:
    def test_requires_bucket(self, monkeypatch):
        monkeypatch.delenv("S3_BUCKET", raising=False)

        with pytest.raises(ValueError, match="S3 bucket required"):
            S3CheckpointStore(client=MagicMock())

    def test_save_puts_json(self):
        client = MagicMock()
        store = S3CheckpointStore(bucket="imports", client=client)

        store.save("progress.json", {"total": 5})

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "imports"
        assert kwargs["Key"] == "progress.json"
        assert kwargs["Body"] == encode_snapshot({"total": 5})

    def test_load_reads_body(self):
        client = MagicMock()
        client.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=b'{"total": 9}'))}
        store = S3CheckpointStore(bucket="imports", client=client)

        assert store.load("progress.json") == {"total": 9}

    def test_load_missing_is_none(self):
        client = MagicMock()
        client.get_object.side_effect = _client_error("NoSuchKey")
        store = S3CheckpointStore(bucket="imports", client=client)

        assert store.load("progress.json") is None

    def test_load_other_errors_propagate(self):
        client = MagicMock()
        client.get_object.side_effect = _client_error("AccessDenied")
        store = S3CheckpointStore(bucket="imports", client=client)

        with pytest.raises(ClientError):
            store.load("progress.json")

    def test_delete_missing(self):
        client = MagicMock()
        client.head_object.side_effect = _client_error("404")
        store = S3CheckpointStore(bucket="imports", client=client)

        assert store.delete("progress.json") is False
        client.delete_object.assert_not_called()

    def test_describe(self):
        store = S3CheckpointStore(bucket="imports", client=MagicMock())

        assert store.describe("a/b.json") == "s3://imports/a/b.json"

