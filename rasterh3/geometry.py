import math
from dataclasses import dataclass
from typing import Tuple

import h3
from affine import Affine
from shapely.geometry import Polygon, box

from .errors import InvalidGeometry


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle. Used with integer array indexes and with lng/lat degrees."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_corners(cls, c1: Tuple[float, float], c2: Tuple[float, float]) -> "Rect":
        return cls(
            min(c1[0], c2[0]),
            min(c1[1], c2[1]),
            max(c1[0], c2[0]),
            max(c1[1], c2[1]),
        )

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0

    def transformed(self, transform: Affine) -> "Rect":
        """Bounding box of the four corners after applying `transform`."""
        corners = [
            transform @ (x, y)
            for x in (self.min_x, self.max_x)
            for y in (self.min_y, self.max_y)
        ]
        xs = [c[0] for c in corners]
        ys = [c[1] for c in corners]
        return Rect(min(xs), min(ys), max(xs), max(ys))

    def to_polygon(self) -> Polygon:
        return box(self.min_x, self.min_y, self.max_x, self.max_y)


def rect_to_h3shape(rect: Rect) -> h3.LatLngPoly:
    """Polygon in h3 (lat, lng) order for a rectangle in lng/lat degrees."""
    if not all(math.isfinite(v) for v in (rect.min_x, rect.min_y, rect.max_x, rect.max_y)):
        raise InvalidGeometry(f"rectangle with non-finite coordinates: {rect}")
    if rect.width <= 0 or rect.height <= 0:
        raise InvalidGeometry(f"degenerated rectangle: {rect}")

    lat0 = max(-90.0, rect.min_y)
    lat1 = min(90.0, rect.max_y)
    if lat0 >= lat1:
        raise InvalidGeometry(f"rectangle outside of the valid latitude range: {rect}")
    return h3.LatLngPoly([
        (lat0, rect.min_x),
        (lat0, rect.max_x),
        (lat1, rect.max_x),
        (lat1, rect.min_x),
    ])
