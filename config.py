## @file
## @brief Configuration parameters for the wear-leveling simulation.
## @details This module contains the constant values used throughout the
## simulation, plus the validated run configuration assembled by the command
## line front end. The constants can be adjusted to experiment with different
## remap overheads and reporting behavior.

from dataclasses import dataclass, field
from typing import List, Optional

# REMAPPING #
EXTRA_WRITES_PER_REMAP = 1 # Writes charged to every page each time the memory is remapped
RAND_SEED = 8 # Seed for the remap offset generator (fixed so runs are reproducible)

# INPUT TRACES #
COUNTER_WIDTH_BYTES = 8 # Each page's write count is an unsigned 64-bit integer
COUNTER_DTYPE = '<u8'

# REPORTING #
GIB = 1024 * 1024 * 1024 # Reference capacity all results are normalized to
PROGRESS_INTERVAL = 5 # Print progress every N iterations

# SIMULATION MODES #
MODE_WRITE = 'write'
MODE_TIME = 'time'
MODE_LIFETIME = 'lifetime'
VALID_MODES = (MODE_WRITE, MODE_TIME, MODE_LIFETIME)


class EndurerError(Exception):
    ##
    # @brief Base class for all simulator errors.
    ##
    pass

class ConfigurationError(EndurerError):
    ##
    # @brief Exception raised for missing or invalid settings.
    ##
    pass

class WriteSetFormatError(EndurerError):
    ##
    # @brief Exception raised for unreadable or malformed trace files.
    ##
    pass

class SimulationError(EndurerError):
    ##
    # @brief Exception raised when a run exceeds its iteration cap.
    ##
    pass

class RemapError(EndurerError):
    ##
    # @brief Exception raised when a remap is requested in a mode that never remaps.
    ##
    pass


@dataclass
class SimulationConfig:
    ##
    # @brief Settings for one simulation run.
    #
    # The command line layer fills this in; validate() must pass before any
    # trace is loaded or simulated.
    ##
    mode: str = ''
    page_size: Optional[int] = None # Bytes per page
    cell_write_endurance: Optional[int] = None # Writes a cell tolerates before wearing out
    remap_period: Optional[float] = None # Writes or time units, depending on mode
    input_filepaths: List[str] = field(default_factory=list)
    input_time_units: List[float] = field(default_factory=list) # Instructions, cycles or seconds per trace
    plot_path: Optional[str] = None
    max_iterations: Optional[int] = None

    def validate(self) -> 'SimulationConfig':
        ##
        # @brief Check every setting, normalizing the mode name.
        #
        # @return SimulationConfig self, for chaining
        # @throws ConfigurationError On the first invalid setting found
        ##
        self.mode = (self.mode or '').lower()
        if self.mode not in VALID_MODES:
            raise ConfigurationError("mode must be either 'time', 'write', or 'lifetime': <-m MODE>")
        if self.page_size is None or self.page_size <= 0:
            raise ConfigurationError("must supply a positive page size: <-p PAGE_SIZE>")
        if self.cell_write_endurance is None or self.cell_write_endurance <= 0:
            raise ConfigurationError("must supply a positive cell write endurance: <-c ENDU>")
        if self.mode != MODE_LIFETIME and self.remap_period is None:
            raise ConfigurationError(
                "must supply remap period (in time units or write units, depending on mode): <-r PERIOD>")
        if not self.input_filepaths:
            raise ConfigurationError("must supply input file(s): <-i INPUT_FILE> [-i INPUT_FILE]...")
        if not self.input_time_units:
            raise ConfigurationError(
                "must supply input time units (in instructions/cycles/seconds): <-t TIME_UNITS> [-t TIME_UNITS]...")
        if len(self.input_filepaths) != len(self.input_time_units):
            raise ConfigurationError(
                "must specify an identical number of input files (-i) and input time units (-t)")
        if self.mode == MODE_TIME and any(unit <= 0 for unit in self.input_time_units):
            raise ConfigurationError("time mode requires positive input time units: <-t TIME_UNITS>")
        if self.max_iterations is not None and self.max_iterations <= 0:
            raise ConfigurationError("max iterations must be positive")
        return self

    @property
    def node_count(self) -> int:
        # One node per input trace
        return len(self.input_filepaths)
