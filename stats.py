## @file stats.py
## @brief Derived statistics and the final report.
## @details Raw engine counters depend on how big the simulated memory was.
## To compare runs over traces of different sizes, everything is rescaled to
## a reference capacity of 1 GiB: a memory of M pages of P bytes fits
## 2^30 / (M * P) times into 1 GiB, and each of those copies would have gone
## through the same iterations and elapsed time.

from dataclasses import dataclass, field
from typing import List, Optional

import config
from remap_scheduler import SimulationMode


@dataclass
class SimulationStats:
    ##
    # @brief Final, capacity-normalized results of one run.
    ##
    mode: SimulationMode
    page_size: int
    memory_page_count: int
    wss_pages: List[int] = field(default_factory=list) # Working set size per trace, in pages
    wss_bytes: List[int] = field(default_factory=list)
    wss_gib: List[float] = field(default_factory=list)
    mems_per_gib: float = 0.0
    remaps: int = 0
    iterations: int = 0
    iterations_per_gib: float = 0.0
    time_unscaled: float = 0.0 # Instructions, cycles or seconds
    time_per_gib: Optional[float] = None # Not defined in lifetime mode


class StatsComputer:
    ##
    # @brief Turns a finished engine's counters into SimulationStats.
    #
    # The result is computed once; later calls return the cached object.
    ##
    def __init__(self, engine, page_size: int) -> None:
        self.engine = engine
        self.page_size = page_size
        self._stats: Optional[SimulationStats] = None

    def compute(self) -> SimulationStats:
        if self._stats is not None:
            return self._stats

        engine = self.engine
        stats = SimulationStats(engine.mode, self.page_size, engine.memory_page_count)

        for write_set in engine.write_sets:
            wss_bytes = write_set.page_count * self.page_size
            stats.wss_pages.append(write_set.page_count)
            stats.wss_bytes.append(wss_bytes)
            stats.wss_gib.append(wss_bytes / config.GIB)

        stats.mems_per_gib = config.GIB / (engine.memory_page_count * self.page_size)

        if engine.mode is SimulationMode.LIFETIME:
            # No iterations to normalize; the estimate is for a single memory
            stats.time_unscaled = engine.time_unscaled
        else:
            stats.remaps = engine.remaps
            stats.iterations = engine.iterations
            stats.iterations_per_gib = engine.iterations * stats.mems_per_gib
            # Nodes whose write sets cost different time drift apart; report the least time covered
            stats.time_unscaled = min(engine.runtimes)
            stats.time_per_gib = stats.time_unscaled * stats.mems_per_gib

        self._stats = stats
        return stats


def format_report(stats: SimulationStats) -> str:
    ##
    # @brief Render the human-readable report.
    #
    # @param stats Results from StatsComputer.compute()
    # @return str Multi-line report text
    ##
    lines = ["WSS stats:"]
    for i, (pages, wss_bytes, wss_gib) in enumerate(zip(stats.wss_pages, stats.wss_bytes, stats.wss_gib)):
        lines.append(f"WSS {i}: {pages} pages ({wss_bytes} bytes; {wss_gib:f} GiB)")

    lines.append(f"mems. per GiB: {stats.mems_per_gib:f}")

    if stats.mode is SimulationMode.LIFETIME:
        lines.append(f"time (in instructions, cycles, or s): {stats.time_unscaled:f}")
    else:
        lines.append(f"n. remaps: {stats.remaps}")
        lines.append(f"n. iterations: {stats.iterations}")
        lines.append(f"n. iterations per GiB: {stats.iterations_per_gib:f}")
        lines.append(f"time (in instructions, cycles, or s) per GiB: {stats.time_per_gib:f}")
    return "\n".join(lines)
