"""Tests for loading binary write-count traces."""

import struct

import numpy as np
import pytest

from config import ConfigurationError, WriteSetFormatError
from write_set import WriteSet, load_write_set, load_write_sets, save_write_set


def test_load_little_endian_counters(tmp_path):
    path = tmp_path / "trace.bin"
    path.write_bytes(struct.pack('<3Q', 1, 4, 2))

    write_set = load_write_set(str(path), 10)

    assert write_set.counts.tolist() == [1, 4, 2]
    assert write_set.counts.dtype == np.uint64
    assert write_set.page_count == 3
    assert write_set.time_unit == 10.0
    assert write_set.max_page_writes == 4
    assert write_set.total_writes == 7
    assert write_set.source == str(path)


def test_large_counts_are_unsigned(tmp_path):
    path = tmp_path / "trace.bin"
    path.write_bytes(struct.pack('<Q', 2**64 - 1))
    assert load_write_set(str(path), 1).max_page_writes == 2**64 - 1


def test_saved_trace_matches_loader(tmp_path):
    path = tmp_path / "trace.bin"
    save_write_set(str(path), [7, 0, 3, 9])
    assert path.stat().st_size == 32
    assert load_write_set(str(path), 1).counts.tolist() == [7, 0, 3, 9]


def test_empty_file_is_an_empty_write_set(tmp_path):
    path = tmp_path / "empty.bin"
    path.write_bytes(b'')
    write_set = load_write_set(str(path), 1)
    assert write_set.page_count == 0
    assert write_set.max_page_writes == 0


def test_size_not_multiple_of_counter_width(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(b'\x00' * 12)
    with pytest.raises(WriteSetFormatError, match="multiple of 8"):
        load_write_set(str(path), 1)


def test_missing_file(tmp_path):
    with pytest.raises(WriteSetFormatError, match="could not open"):
        load_write_set(str(tmp_path / "missing.bin"), 1)


def test_write_set_is_read_only():
    write_set = WriteSet.from_counts([1, 2], 1)
    with pytest.raises(ValueError):
        write_set.counts[0] = 5


def test_load_many_in_order(tmp_path):
    paths = []
    for i, counts in enumerate([[1], [2, 2], [3, 3, 3]]):
        path = tmp_path / f"trace{i}.bin"
        save_write_set(str(path), counts)
        paths.append(str(path))

    write_sets = load_write_sets(paths, [1, 2, 3])

    assert [w.page_count for w in write_sets] == [1, 2, 3]
    assert [w.time_unit for w in write_sets] == [1.0, 2.0, 3.0]


def test_load_many_count_mismatch(tmp_path):
    with pytest.raises(ConfigurationError):
        load_write_sets([str(tmp_path / "a.bin")], [1, 2])
