## @file
## @brief Loading of recorded write-count histograms ("write sets").
## @details A trace file is a flat array of unsigned 64-bit write counts, one
## per logical page, in file order. This module turns such files into
## read-only WriteSet objects that the simulation applies over and over.

import os
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

import config
from config import ConfigurationError, WriteSetFormatError


@dataclass(frozen=True, eq=False)
class WriteSet:
    ##
    # @brief One recorded workload: per-page write counts plus the time it covers.
    ##

    counts: np.ndarray # Read-only uint64 write count per logical page
    time_unit: float # Instructions, cycles or seconds per application of the trace
    source: str = '<memory>'

    @classmethod
    def from_counts(cls, counts: Sequence[int], time_unit: float, source: str = '<memory>') -> 'WriteSet':
        ##
        # @brief Build a write set from in-memory counts.
        #
        # @param counts Per-page write counts
        # @param time_unit Time represented by one application of the counts
        # @param source Label used in error messages and reports
        # @return WriteSet New immutable write set
        ##
        array = np.array(counts, dtype=np.uint64).reshape(-1)
        array.setflags(write=False)
        return cls(array, float(time_unit), source)

    @property
    def page_count(self) -> int:
        return int(self.counts.size)

    @property
    def max_page_writes(self) -> int:
        return int(self.counts.max()) if self.counts.size else 0

    @property
    def total_writes(self) -> int:
        return int(self.counts.sum(dtype=np.uint64)) if self.counts.size else 0


def load_write_set(path: str, time_unit: float) -> WriteSet:
    ##
    # @brief Read a single binary trace file.
    #
    # @param path Trace file path
    # @param time_unit Time units covered by the trace
    # @return WriteSet The loaded write set
    # @throws WriteSetFormatError If the file cannot be read or is not a whole number of counters
    ##
    try:
        file_size = os.path.getsize(path)
        if file_size % config.COUNTER_WIDTH_BYTES != 0:
            raise WriteSetFormatError(
                f"malformed input file {path}; its size should be a multiple of {config.COUNTER_WIDTH_BYTES}")
        counts = np.fromfile(path, dtype=config.COUNTER_DTYPE).astype(np.uint64, copy=False)
    except OSError as e:
        raise WriteSetFormatError(f"could not open input file {path}: {e}") from e

    counts.setflags(write=False)
    return WriteSet(counts, float(time_unit), str(path))


def load_write_sets(paths: Sequence[str], time_units: Sequence[float]) -> List[WriteSet]:
    ##
    # @brief Load every trace in order, pairing each with its time unit.
    ##
    if len(paths) != len(time_units):
        raise ConfigurationError(
            "must specify an identical number of input files (-i) and input time units (-t)")
    return [load_write_set(path, unit) for path, unit in zip(paths, time_units)]


def save_write_set(path: str, counts: Sequence[int]) -> None:
    # Same layout load_write_set expects
    np.asarray(counts, dtype=np.uint64).astype(config.COUNTER_DTYPE).tofile(path)
