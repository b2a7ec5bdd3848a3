import matplotlib

# Headless backend for the chart tests; must be set before pyplot is imported
matplotlib.use("Agg")

import numpy as np
import pytest

from link_mlp import Network


@pytest.fixture
def and_dataset():
    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([[0], [0], [0], [1]], dtype=float)
    return X, y


@pytest.fixture
def small_network():
    """2 inputs, hidden layers of 3 and 4, 1 output, bias, seeded weights."""
    return Network(2, [3, 4], 1, activation="sigmoid", use_bias=True, rng=np.random.default_rng(7))
