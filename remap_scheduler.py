## @file remap_scheduler.py
## @brief Remap triggering policy and remap execution.
## @details A remap spreads wear by moving every node's logical pages to new
## physical pages (a fresh random intra-node offset) and rotating the write
## sets one position around the cluster. Three triggering modes exist:
## - write: remap once any page has taken remap_period writes since the last remap
## - time: remap once remap_period time units have elapsed since the last remap
## - lifetime: never remap (used for the no-wear-leveling estimate)

import random
from enum import Enum
from typing import List, Optional

import config
from config import RemapError
from memory_model import NodeMemory
from translation import AddressTranslator


class SimulationMode(Enum):
    ##
    # @brief The remap triggering mode of a run
    ##
    WRITE = config.MODE_WRITE
    TIME = config.MODE_TIME
    LIFETIME = config.MODE_LIFETIME


class RemapScheduler:
    ##
    # @brief Decides when a remap is due and performs it.
    #
    # The offset generator is seeded once at construction and consumed in
    # ascending node order, so identical inputs always produce identical remaps.
    ##
    def __init__(self, memories: List[NodeMemory], translator: AddressTranslator,
                 mode: SimulationMode, remap_period: Optional[float] = None,
                 seed: int = config.RAND_SEED,
                 extra_writes_per_remap: int = config.EXTRA_WRITES_PER_REMAP) -> None:
        ##
        # @brief Initialize the scheduler.
        #
        # @param memories One memory per node, all the same size
        # @param translator Offsets and cluster rotation to update on a remap
        # @param mode Triggering mode
        # @param remap_period Write-count or time threshold (unused in lifetime mode)
        # @param seed Seed for the offset generator
        # @param extra_writes_per_remap Writes charged to each page per remap
        ##
        self.memories = memories
        self.translator = translator
        self.mode = mode
        self.remap_period = remap_period
        self.extra_writes_per_remap = extra_writes_per_remap
        self.rng = random.Random(seed)
        self.remaps = 0
        self.remap_timer = 0.0 # Time elapsed since the last remap (time mode only)

    def is_write_threshold_reached(self, period_writes: int) -> bool:
        ##
        # @brief Check a page's writes-since-remap against the period.
        #
        # @param period_writes Largest period_writes among the pages just written
        # @return bool True if a write-triggered remap is due
        ##
        if self.mode is not SimulationMode.WRITE:
            return False
        return period_writes >= self.remap_period

    def advance_timer(self, elapsed: float) -> bool:
        ##
        # @brief Add elapsed time to the remap timer.
        #
        # @param elapsed Time units that passed during the last iteration
        # @return bool True if a time-triggered remap is due
        ##
        if self.mode is not SimulationMode.TIME:
            return False
        self.remap_timer += elapsed
        return self.remap_timer >= self.remap_period

    def remap(self) -> None:
        ##
        # @brief Perform one remap across the whole cluster.
        #
        # 1. Every page of every node takes the remap overhead and starts a new period
        # 2. Every node draws a new intra-node offset, in node order
        # 3. Write sets rotate one node around the cluster
        ##
        if self.mode is SimulationMode.LIFETIME:
            raise RemapError("lifetime mode never remaps")

        for memory in self.memories:
            memory.bump_for_remap(self.extra_writes_per_remap)

        offsets = self.translator.intra_node_offsets
        for node in range(self.translator.node_count):
            offsets[node] = self.rng.randrange(self.translator.memory_page_count)

        self.translator.cluster.rotate()
        self.remap_timer = 0.0
        self.remaps += 1
