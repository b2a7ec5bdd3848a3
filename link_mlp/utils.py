"""Timing, random-draw, range-mapping and logging helpers."""

import logging
import time
from typing import Optional, Union

import numpy as np

from link_mlp.config import LOG_FORMAT
from link_mlp.errors import DegenerateMappingError

# Seconds per unit accepted by Timer.elapsed
_TIME_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'min': 60.0,
    'h': 3600.0,
}


class Timer:
    """Measures elapsed wall time on a monotonic clock.

    The clock starts on construction and can be reset with restart().
    """

    def __init__(self):
        self._start = time.perf_counter()

    def restart(self):
        self._start = time.perf_counter()

    def elapsed(self, unit: str = 's') -> float:
        """Return the time since construction or the last restart.

        Args:
            unit: One of 'ns', 'us', 'ms', 's', 'min', 'h'.
        """
        if unit not in _TIME_UNITS:
            raise ValueError(f"Unknown time unit '{unit}'. Available units: {list(_TIME_UNITS.keys())}")
        return (time.perf_counter() - self._start) / _TIME_UNITS[unit]


def rand_range(lo: float, hi: float, size=None, rng=None) -> Union[float, np.ndarray]:
    """Draw uniformly from [lo, hi).

    An empty range (lo == hi) is clamped and yields lo. `rng` may be a
    numpy Generator; the global numpy random state is used otherwise.

    Raises:
        ValueError: If lo > hi.
    """
    if lo > hi:
        raise ValueError(f"Invalid random range: lower bound {lo} is greater than upper bound {hi}")
    if lo == hi:
        return float(lo) if size is None else np.full(size, float(lo))
    source = rng if rng is not None else np.random
    value = source.uniform(lo, hi, size)
    return float(value) if size is None else value


def map_range(value: float, input_min: float, input_max: float,
              output_min: float, output_max: float) -> float:
    """Linearly remap `value` from [input_min, input_max] onto [output_min, output_max].

    Raises:
        DegenerateMappingError: If input_min == input_max.
    """
    if input_max == input_min:
        raise DegenerateMappingError(
            f"Cannot map from an empty input range [{input_min}, {input_max}]"
        )
    return output_min + ((output_max - output_min) / (input_max - input_min)) * (value - input_min)


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """Route log records to the console and, optionally, a log file."""
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
