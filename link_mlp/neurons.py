import numpy as np
from typing import NamedTuple, Sequence
import logging

from link_mlp.activations import Activation


class Neuron(NamedTuple):
    """Snapshot of a single neuron record."""
    value: float
    raw: float
    error: float


class NeuronLayer:
    """
    The neuron records of one layer, stored column-wise.

    Key Attributes:
        values (np.ndarray): Current output of every slot. Shape: (size,).
        raw (np.ndarray): Pre-activation weighted sum of every slot, kept for
                          derivative evaluation. Unused for input and bias slots.
        errors (np.ndarray): Error signal written by the last training call.
        activation (Activation): Nonlinearity applied to the non-bias slots.

    When `has_bias` is set the layer holds `width + 1` slots and the last one
    is the bias neuron, whose value stays at 1.
    """

    def __init__(self, width: int, has_bias: bool, activation: Activation, index: int = 0):
        self.width = width
        self.has_bias = has_bias
        self.activation = activation
        self.index = index

        size = width + int(has_bias)
        self.values = np.zeros(size, dtype=float)
        self.raw = np.zeros(size, dtype=float)
        self.errors = np.zeros(size, dtype=float)
        if has_bias:
            self.values[width] = 1.0

        logging.debug(f"Layer #{index} neurons created: width={width}, bias={has_bias}, "
                      f"activation={activation.__class__.__name__}")

    @property
    def size(self) -> int:
        return len(self.values)

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, j: int) -> Neuron:
        return Neuron(float(self.values[j]), float(self.raw[j]), float(self.errors[j]))

    def __iter__(self):
        for j in range(self.size):
            yield self[j]

    def set_inputs(self, inputs: Sequence[float]):
        """Copy raw inputs into the non-bias slots; the bias slot keeps its constant value."""
        self.values[:self.width] = inputs

    def activate(self, start: int, stop: int, sums: np.ndarray):
        """Store the weighted sums of slots [start, stop) and their activated values."""
        self.raw[start:stop] = sums
        self.values[start:stop] = self.activation.forward(sums)

    def drop(self, mask: np.ndarray):
        """Zero the value and raw sum of every non-bias slot selected by `mask`."""
        self.values[:self.width][mask] = 0.0
        self.raw[:self.width][mask] = 0.0

    def __repr__(self):
        return (f"NeuronLayer(index={self.index}, width={self.width}, has_bias={self.has_bias}, "
                f"activation={self.activation.__class__.__name__})")
