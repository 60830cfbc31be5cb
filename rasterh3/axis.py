from enum import Enum
from typing import Any, Tuple


class AxisOrder(Enum):
    """The order of the axis in the two-dimensional array."""

    # axis 0 is x
    XY = "xy"

    # axis 0 is y; the order of rasterio/GDAL band arrays
    YX = "yx"

    @property
    def x_axis(self) -> int:
        return 0 if self is AxisOrder.XY else 1

    @property
    def y_axis(self) -> int:
        return 1 if self is AxisOrder.XY else 0

    def index(self, x: Any, y: Any) -> Tuple[Any, Any]:
        """Order an (x, y) pair of indexes or slices the way the array expects it."""
        return (x, y) if self is AxisOrder.XY else (y, x)

    def extent(self, shape: Tuple[int, ...]) -> Tuple[int, int]:
        """(x size, y size) of an array shape."""
        return shape[self.x_axis], shape[self.y_axis]
