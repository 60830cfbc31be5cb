"""
Approximate areas of geometries in wgs84 coordinates on a sphere.

Chamberlain, R. and W. Duquette. "Some algorithms for polygons on a sphere." (2007).
The result is good enough to compare the size of a pixel with the size of an
H3 cell, it is not a geodesic measurement.
"""
import math

from shapely.geometry import LinearRing, LineString, Polygon

from .geometry import Rect

# earth radius at the equator in meters
EARTH_RADIUS_EQUATOR = 6_378_137.0


def _ring_area(ring: LineString) -> float:
    coords = list(ring.coords)
    if len(coords) < 2 or coords[0] != coords[-1]:
        return 0.0
    total = 0.0
    for (x0, y0), (x1, y1) in zip(coords[:-1], coords[1:]):
        total += math.radians(x1 - x0) * (
            2.0 + math.sin(math.radians(y0)) + math.sin(math.radians(y1))
        )
    return abs(total) * EARTH_RADIUS_EQUATOR ** 2 / 2.0


def area_on_sphere(geometry) -> float:
    """Area in square meters of a closed ring, a polygon or a `Rect`."""
    if isinstance(geometry, Rect):
        geometry = geometry.to_polygon()

    if isinstance(geometry, Polygon):
        area = _ring_area(geometry.exterior)
        for hole in geometry.interiors:
            area -= _ring_area(hole)
        return max(area, 0.0)

    if isinstance(geometry, (LinearRing, LineString)):
        return _ring_area(geometry)

    raise TypeError(f"can not compute the area of {type(geometry).__name__}")
