"""
Tests for Phase 5: Sample Spill File.

Tests verify:
1. Samples are stored as 8-byte big-endian unsigned integers
2. Batched reads return every complete sample
3. Spill files are created with the configured prefix and removed cleanly
"""

import struct

import pytest

from latscan.formats.spill import (
    SAMPLE_FORMAT,
    SAMPLE_SIZE,
    SpillReader,
    SpillWriter,
)
from latscan.heap import U64_MAX


class TestSpillFormat:
    """Test the on-disk layout."""

    def test_sample_size(self):
        assert SAMPLE_SIZE == 8
        assert struct.calcsize(SAMPLE_FORMAT) == 8

    def test_big_endian_layout(self, tmp_path):
        path = tmp_path / "s.bin"
        with SpillWriter(path=path) as writer:
            writer.write(1)
            writer.write(0x0102030405060708)

        data = path.read_bytes()
        assert data == b'\x00' * 7 + b'\x01' + bytes(range(1, 9))
        assert writer.count == 2

    def test_out_of_range_raises(self, tmp_path):
        with SpillWriter(path=tmp_path / "s.bin") as writer:
            with pytest.raises(struct.error):
                writer.write(U64_MAX + 1)
            with pytest.raises(struct.error):
                writer.write(-1)
        assert writer.count == 0


class TestSpillWriter:
    """Test temporary file handling."""

    def test_temp_file_prefix(self, tmp_path):
        with SpillWriter(directory=tmp_path, prefix='tmp') as writer:
            writer.write(3)

        assert writer.path.parent == tmp_path
        assert writer.path.name.startswith('tmp')
        assert SpillReader.count(writer.path) == 1

    def test_remove(self, tmp_path):
        with SpillWriter(directory=tmp_path) as writer:
            writer.write(3)

        SpillReader.remove(writer.path)
        assert not writer.path.exists()
        # Removing twice is harmless
        SpillReader.remove(writer.path)


class TestSpillReader:
    """Test reading samples back."""

    @pytest.mark.parametrize("batch_size", [1, 3, 512])
    def test_read_batches(self, tmp_path, batch_size):
        values = [0, 1, U64_MAX, 42] + list(range(1000, 1600))
        with SpillWriter(directory=tmp_path) as writer:
            for v in values:
                writer.write(v)

        assert list(SpillReader.read(writer.path, batch_size)) == values

    def test_trailing_partial_record_ignored(self, tmp_path):
        path = tmp_path / "s.bin"
        path.write_bytes(struct.pack('>QQ', 7, 9) + b'\x01\x02\x03')

        assert list(SpillReader.read(path, batch_size=1)) == [7, 9]
        assert SpillReader.count(path) == 2

    def test_empty_file(self, tmp_path):
        path = tmp_path / "s.bin"
        path.write_bytes(b'')
        assert list(SpillReader.read(path)) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(SpillReader.read(tmp_path / "missing.bin"))

    def test_invalid_batch_size(self, tmp_path):
        with pytest.raises(ValueError, match="batch_size"):
            list(SpillReader.read(tmp_path / "s.bin", batch_size=0))
