## @file memory_model.py
## @brief Model of a write-endurance-limited memory and its page wear counters.
## @details This module implements the memory side of the simulation: how big
## each node's memory is, the per-page wear counters, and the translation of a
## logical page to the physical page it currently lands on.
##
## Each node memory is sized to the next power of two that holds the largest
## write set, so every node in a cluster has the same number of pages no matter
## how different the individual traces are.

from typing import Dict, Sequence, Union

import numpy as np

from config import ConfigurationError
from write_set import WriteSet

PageIndex = Union[int, np.ndarray]


def next_power_of_two(n: int) -> int:
    ##
    # @brief Smallest power of two >= n; exact powers of two are returned unchanged.
    ##
    if n <= 0:
        raise ValueError(f"page count must be positive, got {n}")
    return 1 << (n - 1).bit_length()


def size_memory(write_sets: Sequence[WriteSet]) -> int:
    ##
    # @brief Determine the common page count for all node memories.
    #
    # @param write_sets Every write set that will be simulated
    # @return int Number of pages in each node memory (a power of two)
    # @throws ConfigurationError If there is nothing to size the memory for
    ##
    if not write_sets:
        raise ConfigurationError("at least one write set is required to size the memory")

    max_page_count = max(write_set.page_count for write_set in write_sets)
    if max_page_count == 0:
        raise ConfigurationError("all write sets are empty; cannot size the memory")
    return next_power_of_two(max_page_count)


def physical_index(logical_page: PageIndex, offset: int, memory_page_count: int) -> PageIndex:
    # Circular shift: a new offset moves every logical page to a different physical page
    return (logical_page + offset) % memory_page_count


class NodeMemory:
    ##
    # @brief The memory of one simulated node.
    #
    # Page counters are kept as two contiguous uint64 arrays indexed by
    # physical page number, one entry per page.
    ##
    def __init__(self, memory_page_count: int) -> None:
        self.memory_page_count = memory_page_count
        self.period_writes = np.zeros(memory_page_count, dtype=np.uint64)
        self.total_writes = np.zeros(memory_page_count, dtype=np.uint64)
        # Logical page numbers 0..N-1, shared by every write set that fits
        self._logical_pages = np.arange(memory_page_count, dtype=np.int64)

    def __len__(self) -> int:
        return self.memory_page_count

    def apply_writes(self, write_set: WriteSet, offset: int) -> np.ndarray:
        ##
        # @brief Apply one pass of a write set through the given offset.
        #
        # @param write_set Write counts to add, indexed by logical page
        # @param offset Current intra-node offset
        # @return np.ndarray Physical indices that received writes
        ##
        logical_pages = self._logical_pages[:write_set.page_count]
        # write sets never exceed the memory, so the translated indices are unique
        touched = physical_index(logical_pages, offset, self.memory_page_count)
        self.period_writes[touched] += write_set.counts
        self.total_writes[touched] += write_set.counts
        return touched

    def bump_for_remap(self, extra_writes: int) -> None:
        ##
        # @brief Charge the remap overhead to every page and start a new period.
        ##
        self.total_writes += np.uint64(extra_writes)
        self.period_writes[:] = 0

    def max_total_writes(self) -> int:
        return int(self.total_writes.max())

    def wear_summary(self) -> Dict[str, float]:
        return {
            'min_total_writes': int(self.total_writes.min()),
            'max_total_writes': int(self.total_writes.max()),
            'mean_total_writes': float(self.total_writes.mean()),
        }
