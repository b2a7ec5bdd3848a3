import matplotlib.pyplot as plt
import pytest

from link_mlp import DegenerateMappingError, Graph


def test_add_data_scrolls_past_range():
    graph = Graph(range=((0, 10), (0, 1)), step=1)
    for v in range(12):
        graph.add_data(v)
    assert len(graph) == 11
    assert graph.values == [float(v) for v in range(1, 12)]


def test_step_controls_capacity():
    graph = Graph(range=((0, 10), (0, 1)), step=2.5)
    for v in range(10):
        graph.add_data(v)
    # (n - 1) * 2.5 <= 10 holds for at most 5 values
    assert len(graph) == 5


def test_segments_are_mapped_to_widget():
    graph = Graph(range=((0, 10), (0, 1)), step=1)
    graph.set_size((100, 50))
    graph.set_position((5, 5))
    graph.add_data(0.0)
    graph.add_data(1.0)
    graph.add_data(0.5)

    segments = graph.segments()
    assert len(segments) == 2
    (x1, y1), (x2, y2) = segments[0]
    assert (x1, y1) == pytest.approx((5, 5))
    assert (x2, y2) == pytest.approx((15, 55))
    assert segments[1][1] == pytest.approx((25, 30))


def test_single_value_has_no_segments():
    graph = Graph()
    graph.add_data(3.0)
    assert graph.segments() == []


def test_degenerate_range():
    graph = Graph(range=((0, 10), (1, 1)))
    graph.add_data(0.2)
    graph.add_data(0.4)
    with pytest.raises(DegenerateMappingError):
        graph.segments()


def test_draw_on_axes():
    graph = Graph("errors", range=((0, 100), (0, 1)), step=1)
    for v in (0.9, 0.7, 0.4, 0.2):
        graph.add_data(v)

    fig, ax = plt.subplots()
    try:
        returned = graph.draw(ax)
        assert returned is ax
        assert len(ax.collections) == 1
        assert len(ax.collections[0].get_segments()) == 3
        assert ax.get_xlim() == pytest.approx((0, 100))
    finally:
        plt.close(fig)


def test_clear():
    graph = Graph()
    graph.add_data(1.0)
    graph.clear()
    assert len(graph) == 0
