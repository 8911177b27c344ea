## @file simulation.py
## @brief Main simulation engine and command line entry point.
## @details This module orchestrates the entire simulation process:
## 1. Loads the write sets and sizes one memory per node
## 2. Applies the write sets pass after pass, remapping when the mode says so
## 3. Stops as soon as any page of any node reaches the cell write endurance
## 4. Prints capacity-normalized results and optionally plots the wear
##
## Key Components:
## - SimulationEngine: the iteration/remap/termination state machine
## - main(): Entry point that parses arguments, runs the engine and reports

import argparse
import math
import sys
from typing import List, Optional, Sequence, Tuple

import config
from config import ConfigurationError, EndurerError, SimulationConfig, SimulationError
from memory_model import NodeMemory, size_memory
from remap_scheduler import RemapScheduler, SimulationMode
from stats import StatsComputer, format_report
from translation import AddressTranslator
from write_set import WriteSet, load_write_sets


class SimulationEngine:
    ##
    # @brief Drives the simulation of one cluster until it wears out.
    #
    # Node n runs write set (n + node_shift) mod node_count, so there are as
    # many nodes as write sets. All node memories share one power-of-two size.
    ##
    def __init__(self, write_sets: Sequence[WriteSet], mode: SimulationMode,
                 cell_write_endurance: int, remap_period: Optional[float] = None,
                 seed: int = config.RAND_SEED, max_iterations: Optional[int] = None,
                 progress_interval: Optional[int] = config.PROGRESS_INTERVAL) -> None:
        ##
        # @brief Set up node memories, translation state and the remap scheduler.
        #
        # @param write_sets One write set per node
        # @param mode Remap triggering mode
        # @param cell_write_endurance Writes a page tolerates before the run ends
        # @param remap_period Write or time threshold; required unless mode is lifetime
        # @param seed Seed for the remap offset generator
        # @param max_iterations Optional cap on the number of iterations
        # @param progress_interval Print progress every N iterations (None disables)
        # @throws ConfigurationError If the inputs cannot produce a run
        ##
        if not isinstance(mode, SimulationMode):
            try:
                mode = SimulationMode(str(mode).lower())
            except ValueError as e:
                raise ConfigurationError(f"unknown simulation mode: {mode!r}") from e
        if mode is not SimulationMode.LIFETIME and remap_period is None:
            raise ConfigurationError(f"{mode.value} mode requires a remap period")

        self.write_sets = list(write_sets)
        if mode is SimulationMode.TIME and any(write_set.time_unit <= 0 for write_set in self.write_sets):
            # The cluster timer advances by the smallest time unit, so it would never move
            raise ConfigurationError("time mode requires positive input time units")
        self.mode = mode
        self.cell_write_endurance = cell_write_endurance
        self.remap_period = remap_period
        self.max_iterations = max_iterations
        self.progress_interval = progress_interval

        self.memory_page_count = size_memory(self.write_sets)
        self.memories = [NodeMemory(self.memory_page_count) for _ in self.write_sets]
        self.translator = AddressTranslator(len(self.write_sets), self.memory_page_count)
        self.scheduler = RemapScheduler(self.memories, self.translator, mode, remap_period, seed=seed)

        self.runtimes = [0.0] * len(self.write_sets)
        self.iterations = 0
        self.history: List[Tuple[int, int, int]] = [] # (iterations, remaps, max total writes) per pass
        self.terminated = False

        # Lifetime mode results
        self.lifetime_estimates: List[float] = []
        self.time_unscaled: Optional[float] = None

        # Dispatch the mode once, not on every pass
        self._simulate = {
            SimulationMode.WRITE: self.simulate_write,
            SimulationMode.TIME: self.simulate_time,
            SimulationMode.LIFETIME: self.simulate_lifetime,
        }[mode]

    @classmethod
    def from_config(cls, sim_config: SimulationConfig, write_sets: Sequence[WriteSet]) -> 'SimulationEngine':
        return cls(write_sets, SimulationMode(sim_config.mode), sim_config.cell_write_endurance,
                   remap_period=sim_config.remap_period, max_iterations=sim_config.max_iterations)

    @property
    def node_count(self) -> int:
        return len(self.memories)

    @property
    def remaps(self) -> int:
        return self.scheduler.remaps

    def run(self) -> 'SimulationEngine':
        ##
        # @brief Run the configured mode to completion.
        #
        # @return SimulationEngine self, with final counters in place
        ##
        if self.terminated:
            return self
        self._simulate()
        self.terminated = True
        return self

    def apply_pass(self) -> Tuple[bool, bool, float]:
        ##
        # @brief Apply every node's assigned write set once.
        #
        # Nodes are processed in ascending order. The pass stops at the first
        # node where a page reaches the endurance; later nodes are not written.
        #
        # @return Tuple[bool, bool, float] (worn out, write-triggered remap due, elapsed time)
        ##
        remap_due = False
        elapsed = math.inf
        for node, memory in enumerate(self.memories):
            write_set = self.write_sets[self.translator.write_set_for(node)]
            touched = memory.apply_writes(write_set, self.translator.intra_node_offsets[node])
            self.runtimes[node] += write_set.time_unit
            elapsed = min(elapsed, write_set.time_unit)

            if touched.size == 0:
                continue
            if self.scheduler.is_write_threshold_reached(int(memory.period_writes[touched].max())):
                remap_due = True
            if int(memory.total_writes[touched].max()) >= self.cell_write_endurance:
                return True, remap_due, elapsed
        return False, remap_due, elapsed

    def simulate_write(self) -> None:
        ##
        # @brief Write-triggered mode: remap whenever a page takes remap_period writes.
        ##
        self._check_can_wear_out()
        while True:
            worn_out, remap_due, _ = self.apply_pass()
            if worn_out:
                break
            if remap_due:
                self.scheduler.remap()
            if self._complete_iteration():
                break

    def simulate_time(self) -> None:
        ##
        # @brief Time-triggered mode: remap every remap_period time units.
        #
        # The remap timer is cluster-wide and advances by the shortest time any
        # node spent in the pass, matching the minimum-runtime report.
        ##
        self._check_can_wear_out()
        while True:
            worn_out, _, elapsed = self.apply_pass()
            if worn_out:
                break
            if self.scheduler.advance_timer(elapsed):
                self.scheduler.remap()
            if self._complete_iteration():
                break

    def simulate_lifetime(self) -> None:
        ##
        # @brief Estimate lifetime with no wear leveling at all.
        #
        # The hottest page of each write set wears out after
        # endurance / max_page_writes applications of the trace. The cluster
        # lasts as long as its shortest-lived write set.
        ##
        self.lifetime_estimates = []
        for write_set in self.write_sets:
            max_n_writes = write_set.max_page_writes
            print(f"most-written page in {write_set.source} had this many writes: {max_n_writes}")
            print(f"total number of writes in {write_set.source} (sum): {write_set.total_writes}")

            if max_n_writes == 0:
                self.lifetime_estimates.append(math.inf)
                continue
            multiple_of_input_time = self.cell_write_endurance / max_n_writes
            self.lifetime_estimates.append(multiple_of_input_time * write_set.time_unit)

        self.time_unscaled = min(self.lifetime_estimates)

    def _complete_iteration(self) -> bool:
        ##
        # @brief Count a finished pass, record it and report progress.
        #
        # @return bool True if remap overhead alone wore a page out
        ##
        self.iterations += 1
        max_wear = self.max_total_writes()
        self.history.append((self.iterations, self.remaps, max_wear))

        if self.progress_interval and self.iterations % self.progress_interval == 0:
            avg_runtime = sum(self.runtimes) / len(self.runtimes)
            print(f"At {self.iterations} iterations: {self.remaps} remaps; avg. runtime {avg_runtime:f}")

        # Pages not written this pass can still cross the endurance through remaps
        if max_wear >= self.cell_write_endurance:
            return True
        if self.max_iterations is not None and self.iterations >= self.max_iterations:
            raise SimulationError(
                f"no page reached the cell write endurance within {self.max_iterations} iterations")
        return False

    def _check_can_wear_out(self) -> None:
        # Remaps are the only writes once the traces are all zero
        if any(write_set.total_writes for write_set in self.write_sets):
            return
        if self.mode is SimulationMode.WRITE and self.remap_period > 0:
            raise ConfigurationError("write sets contain no writes; the memory would never wear out")

    def max_total_writes(self) -> int:
        return max(memory.max_total_writes() for memory in self.memories)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='endurer-sim',
        description='Offline page-level wear-leveling simulation over recorded write histograms.')
    parser.add_argument('-m', '--mode', required=True,
                        help="simulation mode: 'write', 'time', or 'lifetime'")
    parser.add_argument('-p', '--page-size', type=int, help='page size in bytes')
    parser.add_argument('-c', '--cell-write-endurance', type=int,
                        help='writes a cell tolerates before wearing out')
    parser.add_argument('-r', '--remap-period', type=float,
                        help='remap period (in time units or write units, depending on mode)')
    parser.add_argument('-i', '--input', dest='input_filepaths', action='append', default=[],
                        help='input write set file; repeat for more nodes')
    parser.add_argument('-t', '--time-units', dest='input_time_units', type=float, action='append', default=[],
                        help='instructions/cycles/seconds covered by the matching input file')
    parser.add_argument('--plot', dest='plot_path', help='save a wear plot to this file')
    parser.add_argument('--max-iterations', type=int, help='give up after this many iterations')
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> SimulationConfig:
    args = build_arg_parser().parse_args(argv)
    return SimulationConfig(
        mode=args.mode,
        page_size=args.page_size,
        cell_write_endurance=args.cell_write_endurance,
        remap_period=args.remap_period,
        input_filepaths=args.input_filepaths,
        input_time_units=args.input_time_units,
        plot_path=args.plot_path,
        max_iterations=args.max_iterations,
    ).validate()


def main(argv: Optional[Sequence[str]] = None) -> int:
    ##
    # @brief Main simulation entry point.
    # Parses and validates arguments, loads the traces, runs the selected mode
    # and prints the report. Configuration and input errors abort before any
    # simulation is done.
    #
    # @return int Process exit status
    ##
    try:
        sim_config = parse_config(argv)
        write_sets = load_write_sets(sim_config.input_filepaths, sim_config.input_time_units)
        engine = SimulationEngine.from_config(sim_config, write_sets)
    except EndurerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Starting {engine.mode.value}-mode simulation over {engine.node_count} node(s)...")
    try:
        engine.run()
    except SimulationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    stats = StatsComputer(engine, sim_config.page_size).compute()
    print(format_report(stats))

    if sim_config.plot_path:
        from plotting import plot_results
        plot_results(engine, sim_config.plot_path)
        print(f"\nWear plot has been saved to '{sim_config.plot_path}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
