"""Tests for streaming export lines from plain and gzipped files."""

import gzip

import pytest

from cms_import.services.errors import InputCorruptError, InputUnavailableError
from cms_import.services.line_source import LineSource, is_gzipped


class TestLineSource:
    def test_plain_file(self, tmp_path, export_writer):
        path = export_writer(tmp_path / "export.jsonl", ['{"a": 1}', "", '{"b": 2}'])

        assert list(LineSource(path)) == ['{"a": 1}', "", '{"b": 2}']

    def test_gzip_file(self, tmp_path, export_writer):
        path = export_writer(tmp_path / "export.jsonl.gz", ['{"a": 1}', '{"b": 2}'], compress=True)
        source = LineSource(path)

        assert source.compressed is True
        assert list(source) == ['{"a": 1}', '{"b": 2}']

    def test_crlf_stripped(self, tmp_path):
        path = tmp_path / "export.jsonl"
        path.write_bytes(b'{"a": 1}\r\n{"b": 2}\r\n')

        assert list(LineSource(path)) == ['{"a": 1}', '{"b": 2}']

    def test_invalid_utf8_replaced(self, tmp_path):
        path = tmp_path / "export.jsonl"
        path.write_bytes(b'{"a": "\xff"}\n')

        (line,) = list(LineSource(path))
        assert "\ufffd" in line

    def test_count_lines(self, tmp_path, export_writer):
        path = export_writer(tmp_path / "export.jsonl.gz", ["x"] * 25, compress=True)

        assert LineSource(path).count_lines() == 25

    def test_iterations_are_independent(self, tmp_path, export_writer):
        path = export_writer(tmp_path / "export.jsonl", ["1", "2", "3"])
        source = LineSource(path)

        assert source.count_lines() == 3
        assert list(source) == ["1", "2", "3"]

    def test_bytes_read_advances(self, tmp_path, export_writer):
        path = export_writer(tmp_path / "export.jsonl", ["x" * 100] * 10)
        source = LineSource(path)

        assert source.bytes_read == 0
        iterator = iter(source)
        next(iterator)
        assert 0 < source.bytes_read <= source.size_bytes
        iterator.close()
        assert source.bytes_read == 0

    def test_missing_file(self, tmp_path):
        source = LineSource(tmp_path / "missing.jsonl")

        with pytest.raises(InputUnavailableError):
            source.check()
        with pytest.raises(InputUnavailableError):
            list(source)

    def test_non_gzip_content_fails_check(self, tmp_path):
        path = tmp_path / "export.jsonl.gz"
        path.write_bytes(b"this is not gzip\n")

        with pytest.raises(InputCorruptError):
            LineSource(path).check()

    def test_truncated_gzip_raises_corrupt(self, tmp_path):
        path = tmp_path / "export.jsonl.gz"
        data = b"".join(b'{"n": %d}\n' % i for i in range(2000))
        path.write_bytes(gzip.compress(data)[:-40])
        source = LineSource(path)

        with pytest.raises(InputCorruptError):
            list(source)
        assert source.bytes_read == 0


class TestIsGzipped:
    @pytest.mark.parametrize("name,expected", [
        ("data.jsonl.gz", True),
        ("DATA.JSONL.GZ", True),
        ("data.gzip", True),
        ("data.jsonl", False),
    ])
    def test_suffix(self, name, expected):
        assert is_gzipped(name) is expected
