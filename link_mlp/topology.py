import numbers
from typing import Sequence, Tuple
import logging

from link_mlp.errors import ConstructionError


class Topology:
    """
    The fixed layer widths of a network plus its bias flag.

    `structure` is `(inputs, hidden_0, ..., hidden_{H-1}, outputs)` and never
    changes after construction. Every layer except the output layer carries
    one extra bias slot when `use_bias` is set; the bias slot is always the
    last slot of its layer.

    Link addressing: in gap `i` (from layer `i` to layer `i + 1`) the weight
    from source `k` to destination `j` lives at flat offset
    `k * structure[i + 1] + j`.
    """

    def __init__(self, inputs: int, hidden: Sequence[int], outputs: int, use_bias: bool = True):
        if isinstance(hidden, (str, bytes)):
            raise ConstructionError(f"Hidden layer widths must be a sequence of integers, got {hidden!r}")
        try:
            structure = (inputs, *hidden, outputs)
        except TypeError as e:
            raise ConstructionError(
                f"Hidden layer widths must be a sequence of integers, got {hidden!r}"
            ) from e
        for i, width in enumerate(structure):
            # bool is an int subclass but never a meaningful width
            if isinstance(width, bool) or not isinstance(width, numbers.Integral):
                raise ConstructionError(f"Layer {i} width must be an integer, got {width!r}")
            if width <= 0:
                raise ConstructionError(f"Layer {i} width must be positive, got {width}")

        self._structure: Tuple[int, ...] = tuple(int(w) for w in structure)
        self._use_bias = bool(use_bias)
        logging.debug(f"Topology created: structure={self._structure}, use_bias={self._use_bias}")

    @property
    def structure(self) -> Tuple[int, ...]:
        return self._structure

    @property
    def use_bias(self) -> bool:
        return self._use_bias

    @property
    def inputs(self) -> int:
        return self._structure[0]

    @property
    def outputs(self) -> int:
        return self._structure[-1]

    @property
    def hidden(self) -> Tuple[int, ...]:
        return self._structure[1:-1]

    @property
    def num_layers(self) -> int:
        return len(self._structure)

    @property
    def num_gaps(self) -> int:
        return len(self._structure) - 1

    @property
    def bias(self) -> int:
        """The bias flag as a slot count (0 or 1)."""
        return int(self._use_bias)

    def has_bias_slot(self, layer: int) -> bool:
        return self._use_bias and layer < self.num_layers - 1

    def layer_size(self, layer: int) -> int:
        """Number of neuron slots in `layer`, bias slot included."""
        return self._structure[layer] + int(self.has_bias_slot(layer))

    def link_count(self, gap: int) -> int:
        return (self._structure[gap] + self.bias) * self._structure[gap + 1]

    def total_links(self) -> int:
        return sum(self.link_count(i) for i in range(self.num_gaps))

    def link_index(self, gap: int, source: int, destination: int) -> int:
        """Flat offset of the link from `source` in layer `gap` to `destination` in layer `gap + 1`."""
        if not 0 <= source < self.layer_size(gap):
            raise IndexError(f"Source neuron {source} out of range for layer {gap}")
        if not 0 <= destination < self._structure[gap + 1]:
            raise IndexError(f"Destination neuron {destination} out of range for layer {gap + 1}")
        return source * self._structure[gap + 1] + destination

    def __eq__(self, other):
        if not isinstance(other, Topology):
            return NotImplemented
        return self._structure == other._structure and self._use_bias == other._use_bias

    def __hash__(self):
        return hash((self._structure, self._use_bias))

    def __repr__(self):
        return (f"Topology(inputs={self.inputs}, hidden={list(self.hidden)}, "
                f"outputs={self.outputs}, use_bias={self._use_bias})")
