import pytest

from link_mlp.errors import ConstructionError
from link_mlp.topology import Topology


def test_structure_and_counts_with_bias():
    topo = Topology(2, [3, 4], 1, use_bias=True)
    assert topo.structure == (2, 3, 4, 1)
    assert topo.hidden == (3, 4)
    assert topo.num_layers == 4
    assert topo.num_gaps == 3
    assert [topo.layer_size(i) for i in range(4)] == [3, 4, 5, 1]
    assert [topo.link_count(i) for i in range(3)] == [9, 16, 5]
    assert topo.total_links() == 30


def test_counts_without_bias():
    topo = Topology(2, [3], 2, use_bias=False)
    assert [topo.layer_size(i) for i in range(3)] == [2, 3, 2]
    assert [topo.link_count(i) for i in range(2)] == [6, 6]


def test_no_hidden_layers():
    topo = Topology(3, [], 2)
    assert topo.structure == (3, 2)
    assert topo.link_count(0) == (3 + 1) * 2


def test_link_index_is_source_major():
    topo = Topology(2, [3], 1)
    assert topo.link_index(0, 0, 0) == 0
    assert topo.link_index(0, 0, 2) == 2
    assert topo.link_index(0, 1, 0) == 3
    # bias is the last source slot
    assert topo.link_index(0, 2, 2) == 8


def test_link_index_out_of_range():
    topo = Topology(2, [3], 1, use_bias=False)
    with pytest.raises(IndexError):
        topo.link_index(0, 2, 0)
    with pytest.raises(IndexError):
        topo.link_index(0, 0, 3)


@pytest.mark.parametrize("inputs, hidden, outputs", [
    (0, [2], 1),
    (2, [0], 1),
    (2, [2], 0),
    (2, [-1], 1),
    (2, [2.5], 1),
    (True, [2], 1),
])
def test_invalid_widths_rejected(inputs, hidden, outputs):
    with pytest.raises(ConstructionError):
        Topology(inputs, hidden, outputs)


def test_hidden_must_be_a_sequence():
    with pytest.raises(ConstructionError, match="sequence of integers"):
        Topology(2, 3, 1)


def test_equality():
    assert Topology(2, [3], 1) == Topology(2, (3,), 1)
    assert Topology(2, [3], 1) != Topology(2, [3], 1, use_bias=False)
    assert Topology(2, [3], 1) != Topology(2, [4], 1)
