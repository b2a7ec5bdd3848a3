import numpy as np
from typing import Tuple
import logging

from link_mlp.utils import rand_range


class LinkGap:
    """
    The links between layer `index` and layer `index + 1`, stored as one flat array.

    The weight from source `k` to destination `j` sits at `k * dest_width + j`,
    so `matrix()` exposes the same storage as a (source_size, dest_width)
    row-major view where row `k` holds every outgoing weight of source `k`.
    """

    def __init__(self, source_size: int, dest_width: int,
                 weight_range: Tuple[float, float], rng=None, index: int = 0):
        self.source_size = source_size
        self.dest_width = dest_width
        self.index = index

        lo, hi = weight_range
        self.weights = np.asarray(rand_range(lo, hi, size=source_size * dest_width, rng=rng), dtype=float)
        logging.debug(f"Gap #{index} links created: {source_size} x {dest_width} "
                      f"= {self.weights.size} weights drawn from [{lo}, {hi}]")

    def __len__(self) -> int:
        return self.weights.size

    def offset(self, source: int, destination: int) -> int:
        return source * self.dest_width + destination

    def matrix(self) -> np.ndarray:
        """Writable (source_size, dest_width) view over the flat weights."""
        return self.weights.reshape(self.source_size, self.dest_width)

    def __repr__(self):
        return (f"LinkGap(index={self.index}, source_size={self.source_size}, "
                f"dest_width={self.dest_width})")
