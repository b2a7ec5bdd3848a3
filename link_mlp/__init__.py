from link_mlp.activations import Activation, Linear, ReLU, Sigmoid, Tanh, get_activation
from link_mlp.errors import (
    ConstructionError,
    DegenerateMappingError,
    NetworkError,
    NetworkIOError,
    PersistenceFormatError,
    StructureMismatchError,
)
from link_mlp.graph import Graph
from link_mlp.network import Network
from link_mlp.topology import Topology

__version__ = '0.1.0'
