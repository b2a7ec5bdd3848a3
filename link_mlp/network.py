import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

from link_mlp.activations import Activation, Linear, resolve_activation
from link_mlp.config import DEFAULT_ACTIVATION, DEFAULT_WEIGHT_RANGE, PARALLEL_MIN_WIDTH
from link_mlp.errors import ConstructionError
from link_mlp.links import LinkGap
from link_mlp.neurons import NeuronLayer
from link_mlp.parallel import ParallelLoop
from link_mlp.serialization import load_network, read_header, save_network
from link_mlp.topology import Topology
from link_mlp.utils import Timer, rand_range


class Network:
    """
    A fully-connected feed-forward network trained by backpropagation.

    The network keeps one NeuronLayer per layer and one LinkGap per pair of
    adjacent layers. All records are allocated once at construction and
    mutated in place; the topology never changes.

    Training works on one input/target pair per call. A single instance is
    not safe for concurrent calls from independent threads; the caller must
    serialize calculate/train/save/load.
    """

    def __init__(
        self,
        inputs: int,
        hidden: Sequence[int],
        outputs: int,
        activation: Union[str, Activation, None] = DEFAULT_ACTIVATION,
        use_bias: bool = True,
        weight_range: Tuple[float, float] = DEFAULT_WEIGHT_RANGE,
        rng: Optional[np.random.Generator] = None,
        max_workers: Optional[int] = None,
        parallel_min_width: int = PARALLEL_MIN_WIDTH,
    ):
        """
        Initializes the network.

        Args:
            inputs: Number of input neurons.
            hidden: Width of each hidden layer, in order. May be empty.
            outputs: Number of output neurons.
            activation: Activation name (e.g. 'sigmoid', 'tanh') or Activation instance,
                        shared by every hidden and output neuron. Input neurons always
                        use the identity.
            use_bias: Whether every layer but the output layer gets a bias neuron.
            weight_range: (lo, hi) range the initial weights are drawn from uniformly.
            rng: Optional numpy Generator used for weight initialization, dropout and
                 shuffling. The global numpy random state is used when omitted.
            max_workers: Threads used when a call runs its layers in parallel.
            parallel_min_width: Layers narrower than this always run sequentially.

        Raises:
            ConstructionError: On a non-positive layer width, an inverted weight
                               range or an unknown activation.
        """
        self.topology = Topology(inputs, hidden, outputs, use_bias)

        try:
            lo, hi = (float(v) for v in weight_range)
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"Invalid weight range {weight_range!r}") from e
        if not (np.isfinite(lo) and np.isfinite(hi)) or lo > hi:
            raise ConstructionError(f"Invalid weight range [{lo}, {hi}]")
        self.weight_range = (lo, hi)

        self.activation = resolve_activation(activation)
        self.rng = rng

        structure = self.topology.structure
        self.neurons: List[NeuronLayer] = [
            NeuronLayer(structure[0], self.topology.has_bias_slot(0), Linear(), index=0)
        ]
        for i in range(1, self.topology.num_layers):
            self.neurons.append(
                NeuronLayer(structure[i], self.topology.has_bias_slot(i), self.activation, index=i)
            )

        self.links: List[LinkGap] = [
            LinkGap(self.topology.layer_size(i), structure[i + 1], self.weight_range, rng=rng, index=i)
            for i in range(self.topology.num_gaps)
        ]

        self._loop = ParallelLoop(max_workers=max_workers, min_width=parallel_min_width)

        # Training history tracking
        self.training_history: Dict[str, List] = {
            'epoch': [],
            'error': [],
            'learning_rate': [],
            'time_per_epoch': []
        }

        logging.info(f"Created neural network with structure: {list(structure)}, bias={self.use_bias}")
        logging.info(f"Activation: {self.activation.__class__.__name__}")

    @property
    def structure(self) -> Tuple[int, ...]:
        return self.topology.structure

    @property
    def use_bias(self) -> bool:
        return self.topology.use_bias

    # --- Forward pass ---

    def calculate(self, inputs: Sequence[float], parallel: bool = True) -> np.ndarray:
        """
        Runs the inputs through every layer and returns the output layer values.

        Args:
            inputs: Exactly `structure[0]` values.
            parallel: Whether wide layers may spread their neurons over worker threads.

        Returns:
            A copy of the output layer values, shape (outputs,).
        """
        inputs = np.asarray(inputs, dtype=float)
        if inputs.shape != (self.topology.inputs,):
            raise ValueError(f"Expected {self.topology.inputs} inputs, got shape {inputs.shape}")

        self.neurons[0].set_inputs(inputs)
        for i in range(1, self.topology.num_layers):
            self._forward_layer(i, parallel)
            logging.debug(f"Forward pass - Layer {i} computed ({self.neurons[i].width} neurons)")

        outputs = self.neurons[-1].values.copy()
        if not np.all(np.isfinite(outputs)):
            logging.warning("NaN or Inf detected in network output. Check weights/activations.")
        return outputs

    def _forward_layer(self, i: int, parallel: bool):
        source = self.neurons[i - 1].values
        weights = self.links[i - 1].matrix()
        layer = self.neurons[i]

        def compute(start: int, stop: int):
            # raw_j = sum_k weight(k, j) * value_k, bias slot included
            layer.activate(start, stop, source @ weights[:, start:stop])

        self._loop.run(layer.width, compute, parallel)

    # --- Backward pass ---

    def train(
        self,
        inputs: Sequence[float],
        targets: Sequence[float],
        learning_rate: float,
        dropout: float = 0.0,
        parallel: bool = True,
    ) -> float:
        """
        Adjusts the link weights towards producing `targets` for `inputs`.

        Steps:
            1. Forward pass.
            2. Dropout: each hidden neuron is zeroed (value and raw) with probability `dropout`.
            3. Output error = target - output.
            4. Every earlier neuron's error = sum of its outgoing weights times the
               downstream errors. No derivative is applied at this stage.
            5. Every weight += f'(raw_dest) * error_dest * value_source * learning_rate,
               with the derivative taken from the stored (post-dropout) raw sum.

        Args:
            inputs: Exactly `structure[0]` values.
            targets: Exactly `structure[-1]` expected outputs.
            learning_rate: Multiplier applied to every weight update.
            dropout: Probability in [0, 1] of dropping each hidden neuron for this call.
            parallel: Whether wide layers may spread their neurons over worker threads.

        Returns:
            The mean absolute output error of the forward pass.
        """
        targets = np.asarray(targets, dtype=float)
        if targets.shape != (self.topology.outputs,):
            raise ValueError(f"Expected {self.topology.outputs} targets, got shape {targets.shape}")
        if not 0.0 <= dropout <= 1.0:
            raise ValueError(f"dropout must be between 0.0 and 1.0, got {dropout}")

        guess = self.calculate(inputs, parallel)

        if dropout > 0:
            self._apply_dropout(dropout)

        output = self.neurons[-1]
        output.errors[:] = targets - guess

        for i in range(self.topology.num_layers - 2, -1, -1):
            self._propagate_error(i, parallel)

        # All errors are computed from the pre-update weights
        for i in range(self.topology.num_gaps):
            self._update_gap(i, learning_rate, parallel)

        return float(np.sum(np.abs(output.errors)) / self.topology.outputs)

    def _apply_dropout(self, dropout: float):
        for layer in self.neurons[1:-1]:
            mask = rand_range(0.0, 1.0, size=layer.width, rng=self.rng) < dropout
            layer.drop(mask)
            logging.debug(f"Dropout - Layer {layer.index}: {int(mask.sum())}/{layer.width} neurons dropped")

    def _propagate_error(self, i: int, parallel: bool):
        layer = self.neurons[i]
        downstream = self.neurons[i + 1]
        weights = self.links[i].matrix()
        next_errors = downstream.errors[:downstream.width]

        def compute(start: int, stop: int):
            layer.errors[start:stop] = weights[start:stop] @ next_errors

        self._loop.run(layer.size, compute, parallel)

    def _update_gap(self, i: int, learning_rate: float, parallel: bool):
        source = self.neurons[i]
        dest = self.neurons[i + 1]
        weights = self.links[i].matrix()

        dadz = dest.activation.backward(dest.raw[:dest.width])
        step = dadz * dest.errors[:dest.width] * learning_rate

        if np.any(np.isnan(step)) or np.any(np.isinf(step)):
            logging.warning(f"NaN or Inf detected in weight update for gap {i}")

        def compute(start: int, stop: int):
            weights[start:stop] += np.outer(source.values[start:stop], step)

        self._loop.run(source.size, compute, parallel)

    # --- Training loop ---

    def fit(
        self,
        samples: np.ndarray,
        targets: np.ndarray,
        epochs: int = 100,
        learning_rate: float = 0.1,
        dropout: float = 0.0,
        shuffle: bool = True,
        verbose: bool = False,
        log_every: int = 10,
        parallel: bool = False,
    ) -> Dict[str, List]:
        """
        Trains the network for a number of epochs, one sample per `train` call.

        Args:
            samples: Training inputs (num_samples, inputs).
            targets: Training targets (num_samples, outputs).
            epochs: Number of passes over the samples.
            learning_rate: Learning rate passed to every `train` call.
            dropout: Dropout probability passed to every `train` call.
            shuffle: Whether to visit the samples in a new random order each epoch.
            verbose: Whether to log progress.
            log_every: Log progress every `log_every` epochs.
            parallel: Whether wide layers may run on worker threads.

        Returns:
            The training history: epoch index, mean absolute error, learning rate
            and duration of every epoch.
        """
        samples = np.asarray(samples, dtype=float)
        targets = np.asarray(targets, dtype=float)
        if samples.ndim != 2 or targets.ndim != 2:
            raise ValueError("samples and targets must be 2D arrays")
        num_samples = samples.shape[0]
        if targets.shape[0] != num_samples:
            raise ValueError("Number of samples and targets must match.")
        if num_samples == 0:
            raise ValueError("Cannot fit on an empty dataset.")

        source = self.rng if self.rng is not None else np.random
        timer = Timer()
        start_epoch = len(self.training_history['epoch'])

        for epoch in range(epochs):
            timer.restart()
            order = source.permutation(num_samples) if shuffle else np.arange(num_samples)

            epoch_error = 0.0
            for idx in order:
                epoch_error += self.train(samples[idx], targets[idx], learning_rate,
                                          dropout=dropout, parallel=parallel)
            epoch_error /= num_samples
            epoch_time = timer.elapsed()

            self.training_history['epoch'].append(start_epoch + epoch)
            self.training_history['error'].append(epoch_error)
            self.training_history['learning_rate'].append(learning_rate)
            self.training_history['time_per_epoch'].append(epoch_time)

            if verbose and (epoch % log_every == 0 or epoch == epochs - 1):
                logging.info(f"Epoch {epoch + 1}/{epochs} - error: {epoch_error:.5f} - time: {epoch_time:.4f}s")

        logging.info("Training finished.")
        return self.training_history

    # --- Weight access ---

    def weight(self, gap: int, source: int, destination: int) -> float:
        """Weight of the link from `source` in layer `gap` to `destination` in layer `gap + 1`."""
        return float(self.links[gap].weights[self.topology.link_index(gap, source, destination)])

    def set_weight(self, gap: int, source: int, destination: int, value: float):
        self.links[gap].weights[self.topology.link_index(gap, source, destination)] = value

    def set_weights(self, gap: int, values: Sequence[float]):
        """Overwrite every weight of `gap` in flat link order."""
        values = np.asarray(values, dtype=float).ravel()
        if values.size != len(self.links[gap]):
            raise ValueError(f"Gap {gap} holds {len(self.links[gap])} weights, got {values.size}")
        self.links[gap].weights[:] = values

    def get_weights(self) -> List[np.ndarray]:
        """Returns a copy of every gap's flat weight array."""
        return [gap.weights.copy() for gap in self.links]

    # --- Persistence ---

    def save_weights(self, filename: str):
        """
        Saves the topology header and every weight to a text file.

        Raises:
            NetworkIOError: If the file cannot be written.
        """
        save_network(self, filename)

    def load_weights(self, filename: str):
        """
        Replaces every weight with the ones stored in `filename`.

        The stored topology must match this network exactly; on any mismatch
        or malformed file the existing weights are left untouched.

        Raises:
            NetworkIOError: If the file cannot be read.
            StructureMismatchError: If the stored topology differs, naming the field.
            PersistenceFormatError: If the file is truncated or malformed.
        """
        load_network(self, filename)

    @classmethod
    def from_file(cls, filename: str, activation: Union[str, Activation, None] = DEFAULT_ACTIVATION,
                  **kwargs) -> 'Network':
        """
        Creates a network with the topology stored in `filename` and loads its weights.

        The activation is not part of the file and must be supplied.
        """
        topology = read_header(filename)
        network = cls(
            topology.inputs,
            topology.hidden,
            topology.outputs,
            activation=activation,
            use_bias=topology.use_bias,
            **kwargs
        )
        network.load_weights(filename)
        return network

    def summary(self) -> str:
        """
        Generates a text summary of the network structure and parameters.

        Returns:
            A string containing the network summary.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Neural Network Summary\n"
        summary_str += "="*50 + "\n"
        for layer in self.neurons:
            summary_str += f"Layer {layer.index}: {layer.width} neurons"
            summary_str += " + bias\n" if layer.has_bias else "\n"
            summary_str += f"  Activation: {layer.activation.__class__.__name__}\n"
            if layer.index < self.topology.num_gaps:
                summary_str += f"  Outgoing links: {self.topology.link_count(layer.index)}\n"
            summary_str += "-"*50 + "\n"

        summary_str += f"Total Links: {self.topology.total_links()}\n"
        summary_str += "="*50 + "\n"
        return summary_str

    def close(self):
        """Releases the worker threads used by parallel calls."""
        self._loop.close()

    def __enter__(self) -> 'Network':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return (f"Network(structure={list(self.structure)}, use_bias={self.use_bias}, "
                f"activation={self.activation.__class__.__name__})")
