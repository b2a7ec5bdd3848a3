"""
Line-oriented text persistence for network weights.

File layout, one value per line:

    bias flag (0 or 1)
    input width
    output width
    hidden layer count H
    H lines: width of each hidden layer
    every link weight, gap by gap, in flat link order

Weights are written with Python's shortest round-trip float repr, so a
save followed by a load reproduces every weight exactly.
"""

import logging
from typing import List, Tuple

import numpy as np

from link_mlp.errors import (
    ConstructionError,
    NetworkIOError,
    PersistenceFormatError,
    StructureMismatchError,
)
from link_mlp.topology import Topology


def format_weight(weight: float) -> str:
    return repr(float(weight))


def save_network(network, path: str):
    """
    Writes the topology header and every link weight of `network` to `path`.

    Raises:
        NetworkIOError: If the file cannot be written.
    """
    topology = network.topology
    lines = [
        str(topology.bias),
        str(topology.inputs),
        str(topology.outputs),
        str(len(topology.hidden)),
    ]
    lines.extend(str(width) for width in topology.hidden)
    for gap in network.links:
        lines.extend(format_weight(w) for w in gap.weights)

    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(lines) + '\n')
    except OSError as e:
        logging.error(f"Error saving weights to {path}: {e}")
        raise NetworkIOError(f"Could not write weights to {path}: {e}") from e

    logging.info(f"Network weights saved to {path} ({topology.total_links()} links)")


def _read_lines(path: str) -> List[str]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            lines = [line.strip() for line in f]
    except OSError as e:
        logging.error(f"Error reading weight file {path}: {e}")
        raise NetworkIOError(f"Could not read weights from {path}: {e}") from e
    except UnicodeDecodeError as e:
        logging.error(f"Weight file {path} is not valid UTF-8 text: {e}")
        raise PersistenceFormatError(f"Weight file {path} is not valid UTF-8 text: {e}") from e

    while lines and not lines[-1]:
        lines.pop()
    return lines


def _parse_int(lines: List[str], index: int, field: str) -> int:
    if index >= len(lines):
        raise PersistenceFormatError(f"Weight file ends before {field} (line {index + 1})")
    try:
        return int(lines[index])
    except ValueError as e:
        raise PersistenceFormatError(
            f"Invalid {field} on line {index + 1}: {lines[index]!r}"
        ) from e


def _parse_header(lines: List[str]) -> Tuple[int, int, int, List[int]]:
    """Returns (bias, inputs, outputs, hidden widths) as stored, without validating widths."""
    bias = _parse_int(lines, 0, 'bias flag')
    if bias not in (0, 1):
        raise PersistenceFormatError(f"Invalid bias flag on line 1: {lines[0]!r}")
    inputs = _parse_int(lines, 1, 'input width')
    outputs = _parse_int(lines, 2, 'output width')
    hidden_count = _parse_int(lines, 3, 'hidden layer count')
    if hidden_count < 0:
        raise PersistenceFormatError(f"Invalid hidden layer count on line 4: {hidden_count}")
    hidden = [_parse_int(lines, 4 + i, f'hidden layer {i} width') for i in range(hidden_count)]
    return bias, inputs, outputs, hidden


def _check_structure(topology: Topology, lines: List[str]) -> int:
    """
    Compares the stored header with `topology` field by field.

    Returns the index of the first weight line.

    Raises:
        StructureMismatchError: On the first field that disagrees.
    """
    expected = [
        ('bias', topology.bias),
        ('inputs', topology.inputs),
        ('outputs', topology.outputs),
        ('hidden_count', len(topology.hidden)),
    ]
    for index, (field, value) in enumerate(expected):
        found = _parse_int(lines, index, field)
        if found != value:
            raise StructureMismatchError(field, value, found)

    for i, width in enumerate(topology.hidden):
        found = _parse_int(lines, 4 + i, f'hidden layer {i} width')
        if found != width:
            raise StructureMismatchError(f'hidden[{i}]', width, found)

    return 4 + len(topology.hidden)


def _parse_weights(lines: List[str], start: int, count: int) -> np.ndarray:
    stored = len(lines) - start
    if stored != count:
        raise PersistenceFormatError(f"Expected {count} weights, found {stored}")

    weights = np.empty(count, dtype=float)
    for i, line in enumerate(lines[start:]):
        try:
            weights[i] = float(line)
        except ValueError as e:
            raise PersistenceFormatError(f"Invalid weight on line {start + i + 1}: {line!r}") from e
    return weights


def read_header(path: str) -> Topology:
    """
    Reads only the topology stored at `path`.

    Raises:
        NetworkIOError: If the file cannot be read.
        PersistenceFormatError: If the header is malformed or describes an invalid topology.
    """
    bias, inputs, outputs, hidden = _parse_header(_read_lines(path))
    try:
        return Topology(inputs, hidden, outputs, use_bias=bool(bias))
    except ConstructionError as e:
        raise PersistenceFormatError(f"Weight file {path} describes an invalid topology: {e}") from e


def load_network(network, path: str):
    """
    Overwrites every link weight of `network` with the weights stored at `path`.

    The whole file is read and checked before any weight is touched: a
    structure mismatch or a malformed file leaves the network unchanged.

    Raises:
        NetworkIOError: If the file cannot be read.
        StructureMismatchError: If the stored topology differs from the network's.
        PersistenceFormatError: If the file is truncated or holds invalid values.
    """
    logging.info(f"Loading network weights from {path}...")
    lines = _read_lines(path)
    topology = network.topology

    try:
        start = _check_structure(topology, lines)
        weights = _parse_weights(lines, start, topology.total_links())
    except (StructureMismatchError, PersistenceFormatError) as e:
        logging.error(f"Failed to load {path}: {e}")
        raise

    offset = 0
    for gap in network.links:
        gap.weights[:] = weights[offset:offset + len(gap)]
        offset += len(gap)

    logging.info(f"Network weights loaded from {path}")
