import numpy as np
from typing import Union
import logging

from link_mlp.errors import ConstructionError


class Activation:
    """Base class for all activation functions.

    An activation is stateless, so one instance is shared by every hidden and
    output neuron of a network.
    """

    name = 'activation'

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the activation function value.

        Args:
            x: Pre-activation sum (scalar or numpy array).

        Returns:
            Activated output.
        """
        raise NotImplementedError

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the derivative of the activation function with respect to its input 'x'.
           Note: 'x' is always the stored *raw* sum of a neuron, never its activated value.

        Args:
            x: Pre-activation sum where the derivative is evaluated (scalar or numpy array).

        Returns:
            Derivative of the activation function evaluated at x.
        """
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class Linear(Activation):
    """Linear activation function (identity).

    Used by every input neuron so raw inputs pass through unmodified.

    Mathematical form:
        forward: f(x) = x
        backward: f'(x) = 1
    """

    name = 'linear'

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return x

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.ones_like(x, dtype=float)


class ReLU(Activation):
    """Rectified Linear Unit activation function.

    Mathematical form:
        forward: f(x) = max(0, x)
        backward: f'(x) = 1 if x > 0 else 0
    """

    name = 'relu'

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.maximum(0.0, x)

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.where(np.asarray(x) > 0, 1.0, 0.0)


class Tanh(Activation):
    """Hyperbolic tangent activation function.

    Mathematical form:
        forward: f(x) = tanh(x) = (e^x - e^-x)/(e^x + e^-x)
        backward: f'(x) = 1 - tanh^2(x)
    """

    name = 'tanh'

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.tanh(x)

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return 1.0 - np.tanh(x) ** 2


class Sigmoid(Activation):
    """Sigmoid activation function.

    Mathematical form:
        forward: f(x) = 1 / (1 + e^-x)
        backward: f'(x) = f(x) * (1 - f(x))
    """

    name = 'sigmoid'

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid activation with clipping for numerical stability."""
        # Clip input to avoid overflow in exp(-x) for large negative x
        clipped_x = np.clip(x, -500, 500)
        return 1.0 / (1.0 + np.exp(-clipped_x))

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid derivative, recomputing the output from the raw sum 'x'."""
        sig = self.forward(x)
        return sig * (1.0 - sig)


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'linear': Linear,
    'identity': Linear,
    'none': Linear,
    'relu': ReLU,
    'tanh': Tanh,
    'sigmoid': Sigmoid,
}


def get_activation(name: str) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).

    Returns:
        An instance of the requested Activation class.

    Raises:
        ConstructionError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ConstructionError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    logging.debug(f"Resolved activation '{name}' to {ACTIVATION_FUNCTIONS[name_lower].__name__}")
    return ACTIVATION_FUNCTIONS[name_lower]()


def resolve_activation(activation: Union[str, Activation, None]) -> Activation:
    """Accept an activation name, an Activation instance or None (linear)."""
    if isinstance(activation, str):
        return get_activation(activation)
    if isinstance(activation, Activation):
        return activation
    if activation is None:
        return Linear()
    raise ConstructionError(f"Invalid activation type '{type(activation).__name__}'")
