"""Exceptions raised by the network, its persistence layer and helpers."""


class NetworkError(Exception):
    """Base class for all link_mlp errors."""


class ConstructionError(NetworkError, ValueError):
    """Raised when a network cannot be built from the given configuration."""


class StructureMismatchError(NetworkError, ValueError):
    """
    Raised when a saved network does not match the live network's topology.

    Attributes:
        field: Name of the header field that disagreed (e.g. 'hidden_count').
        expected: Value held by the live network.
        found: Value read from the file.
    """

    def __init__(self, field: str, expected, found):
        self.field = field
        self.expected = expected
        self.found = found
        super().__init__(
            f"Network structure does not match: {field} is {found} in file, "
            f"expected {expected}"
        )


class PersistenceFormatError(NetworkError, ValueError):
    """Raised when a weight file is truncated or holds unparsable values."""


class NetworkIOError(NetworkError, OSError):
    """Raised when a weight file cannot be read or written."""


class DegenerateMappingError(NetworkError, ValueError):
    """Raised when a range mapping is requested over an empty input range."""
