import os
import logging
import numpy as np
import matplotlib.pyplot as plt
from sklearn.datasets import make_moons # Using this for the second example

from link_mlp import Graph, Network, StructureMismatchError
from link_mlp.utils import Timer, configure_logging

# --- Plotting Function ---

def plot_decision_boundary(X: np.ndarray, y_raw: np.ndarray, model: Network):
    """Plots the decision boundary of a trained single-output model.

    Args:
        X: Input features used for training, shape (n_samples, 2).
        y_raw: True integer class labels, shape (n_samples,).
        model: Trained Network instance.
    """
    h = 0.05 # Step size in the mesh

    x_min, x_max = X[:, 0].min() - 0.5, X[:, 0].max() + 0.5
    y_min, y_max = X[:, 1].min() - 0.5, X[:, 1].max() + 0.5
    xx, yy = np.meshgrid(np.arange(x_min, x_max, h),
                         np.arange(y_min, y_max, h))

    # The network evaluates one sample per call
    mesh_points = np.c_[xx.ravel(), yy.ravel()]
    Z = np.array([model.calculate(p, parallel=False)[0] for p in mesh_points])
    Z = (Z >= 0.5).astype(int).reshape(xx.shape)

    plt.figure(figsize=(10, 8))
    cmap = plt.cm.Spectral
    plt.contourf(xx, yy, Z, cmap=cmap, alpha=0.8)
    plt.scatter(X[:, 0], X[:, 1], c=y_raw, cmap=cmap, edgecolor='k', s=35)
    plt.xlabel("Feature 1 (Normalized)")
    plt.ylabel("Feature 2 (Normalized)")
    plt.title("Decision Boundary")
    plt.xlim(xx.min(), xx.max())
    plt.ylim(yy.min(), yy.max())
    plt.grid(True, alpha=0.2)


# --- XOR Example ---

def xor_example():
    """Trains on XOR one row per call and charts the rolling error."""
    logger = logging.getLogger("XORExample")

    logger.info("--- Running XOR Example ---")
    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([[0], [1], [1], [0]], dtype=float)

    network = Network(2, [4], 1, activation='sigmoid', use_bias=True, weight_range=(-1.0, 1.0))
    logger.info(f"XOR Network Summary:\n{network.summary()}")

    iterations = 20000
    graph = Graph("xor_error", range=((0, 500), (0, 1)), step=1)
    timer = Timer()
    rolling = []
    for it in range(iterations):
        row = it % len(X)
        rolling.append(network.train(X[row], y[row], learning_rate=0.5))
        # One chart point per 40 iterations
        if len(rolling) == 40:
            graph.add_data(float(np.mean(rolling)))
            rolling.clear()
    logger.info(f"XOR training finished in {timer.elapsed('ms'):.1f} ms")

    correct = 0
    for inputs, target in zip(X, y):
        pred = network.calculate(inputs)[0]
        is_correct = int(pred >= 0.5) == int(target[0])
        correct += is_correct
        logger.info(f"Input: {inputs}, Target: {target[0]}, Prediction: {pred:.4f} "
                    f"{'(Correct)' if is_correct else '(Incorrect)'}")
    logger.info(f"XOR Accuracy: {correct / len(X):.2%}")

    # --- Saving and reloading ---
    model_filename = os.path.join(".", "xor_weights.txt")
    network.save_weights(model_filename)
    restored = Network.from_file(model_filename, activation='sigmoid')
    logger.info(f"Reloaded prediction for [1, 0]: {restored.calculate([1, 0])[0]:.4f}")

    try:
        Network(2, [3], 1).load_weights(model_filename)
    except StructureMismatchError as e:
        logger.info(f"Mismatched network rejected the file: {e}")

    plt.figure("XOR Training Error", figsize=(8, 5))
    ax = plt.gca()
    graph.set_size((500, 1))
    graph.draw(ax)
    ax.set_xlabel('Sample (x40 iterations)')
    ax.set_ylabel('Mean absolute error')
    ax.set_title('XOR Training Error')


# --- Make Moons Example ---

def make_moons_example():
    """Demonstrates training on the 'make_moons' dataset."""
    logger = logging.getLogger("MakeMoonsExample")

    logger.info("Generating make_moons dataset...")
    X_original, y_raw = make_moons(n_samples=300, noise=0.1, random_state=42)

    # Normalize features
    X = (X_original - X_original.mean(axis=0)) / (X_original.std(axis=0) + 1e-8)
    y_train = y_raw.reshape(-1, 1).astype(float)
    logger.info(f"Data shapes - X: {X.shape}, y_train: {y_train.shape}")

    network = Network(2, [16, 16], 1, activation='tanh', weight_range=(-0.5, 0.5),
                      rng=np.random.default_rng(42))
    print(network.summary())

    history = network.fit(X, y_train, epochs=200, learning_rate=0.05, dropout=0.0,
                          shuffle=True, verbose=True, log_every=20)

    plt.figure("Make Moons Training History", figsize=(12, 5))
    plt.subplot(1, 2, 1)
    plt.plot(history['epoch'], history['error'], label='Training Error')
    plt.xlabel('Epoch')
    plt.ylabel('Mean absolute error')
    plt.title('Training Error')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)

    plt.subplot(1, 2, 2)
    plt.plot(history['epoch'], history['time_per_epoch'], label='Time per Epoch (s)')
    plt.xlabel('Epoch')
    plt.ylabel('Time (seconds)')
    plt.title('Epoch Training Time')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)
    plt.tight_layout()

    plot_decision_boundary(X, y_raw, network)


# --- Script Execution ---

if __name__ == "__main__":
    configure_logging(logging.INFO)

    print("\n" + "="*40)
    print("--- Running XOR Example ---")
    print("="*40)
    xor_example()

    print("\n" + "="*40)
    print("--- Running Make Moons Example ---")
    print("="*40)
    make_moons_example()

    print("\nDisplaying plots. Close plot windows to exit.")
    plt.show()
