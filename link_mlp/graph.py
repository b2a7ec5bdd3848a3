import logging
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.patches import Rectangle

from link_mlp.utils import map_range

Point = Tuple[float, float]
Range = Tuple[Tuple[float, float], Tuple[float, float]]


class Graph:
    """
    A line chart over a running series of scalar values, e.g. training errors.

    Values are placed `step` apart on the x axis starting at 0. Once the
    series no longer fits within the x range, the oldest value is dropped
    on every add, so the chart scrolls.

    Attributes:
        range: ((x_min, x_max), (y_min, y_max)) of the data shown.
        step: Horizontal distance between successive values.
        position: Lower-left corner of the widget in axes coordinates.
        size: (width, height) of the widget in axes coordinates.
    """

    def __init__(self, id: str = '', range: Range = ((0.0, 100.0), (0.0, 100.0)), step: float = 1.0):
        self.id = id
        self.range = range
        self.step = step
        self.position: Point = (0.0, 0.0)
        self.size: Point = (100.0, 100.0)
        self.values: List[float] = []

    def set_position(self, position: Point):
        self.position = position

    def set_size(self, size: Point):
        self.size = size

    def set_range(self, range: Range):
        self.range = range

    def set_step(self, step: float):
        self.step = step

    def add_data(self, value: float):
        self.values.append(float(value))

        if (len(self.values) - 1) * self.step > self.range[0][1]:
            self.values.pop(0)

    def clear(self):
        self.values.clear()

    def segments(self) -> List[Tuple[Point, Point]]:
        """
        Maps every pair of consecutive values to a line segment in widget coordinates.

        Raises:
            DegenerateMappingError: If either axis range is empty.
        """
        (x_min, x_max), (y_min, y_max) = self.range
        width, height = self.size
        px, py = self.position

        points = [
            (map_range(i * self.step, x_min, x_max, 0.0, width) + px,
             map_range(value, y_min, y_max, 0.0, height) + py)
            for i, value in enumerate(self.values)
        ]
        return list(zip(points[:-1], points[1:]))

    def draw(self, ax: Optional[plt.Axes] = None, color: str = 'black', linewidth: float = 2.0) -> plt.Axes:
        """
        Renders the background and the line segments onto a matplotlib axes.

        Args:
            ax: Axes to draw on. The current axes are used when omitted.
            color: Line color.
            linewidth: Line width in points.

        Returns:
            The axes drawn on.
        """
        if ax is None:
            ax = plt.gca()

        background = Rectangle(self.position, self.size[0], self.size[1],
                               facecolor='white', edgecolor='lightgray')
        ax.add_patch(background)

        segments = self.segments()
        if segments:
            ax.add_collection(LineCollection(segments, colors=color, linewidths=linewidth))
        logging.debug(f"Graph '{self.id}' drew {len(segments)} segments")

        ax.set_xlim(self.position[0], self.position[0] + self.size[0])
        ax.set_ylim(self.position[1], self.position[1] + self.size[1])
        return ax

    def __len__(self) -> int:
        return len(self.values)
