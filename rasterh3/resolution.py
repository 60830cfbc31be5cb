import math
import numbers
from enum import Enum
from typing import Sequence

import h3
from affine import Affine

from .antimeridian import normalize_longitude
from .axis import AxisOrder
from .errors import EmptyArray, InvalidLatLng, InvalidResolution
from .geometry import Rect
from .sphere import area_on_sphere

MIN_RESOLUTION = 0
MAX_RESOLUTION = 15


def validate_resolution(resolution: int) -> int:
    if isinstance(resolution, bool) or not isinstance(resolution, numbers.Integral):
        raise InvalidResolution(f"resolution must be an integer, got {resolution!r}")
    if not MIN_RESOLUTION <= resolution <= MAX_RESOLUTION:
        raise InvalidResolution(f"resolution must be between 0 and 15, got {resolution}")
    return int(resolution)


class ResolutionSearchMode(Enum):
    # the resolution where the difference in the area of a pixel and
    # the cell is as small as possible
    MIN_DIFF = "min_diff"

    # the coarsest resolution where the area of the cell is smaller than the area of a pixel
    SMALLER_THAN_PIXEL = "smaller_than_pixel"

    def nearest_h3_resolution(
        self,
        shape: Sequence[int],
        transform: Affine,
        axis_order: AxisOrder,
    ) -> int:
        return select_resolution(shape, transform, axis_order, self)


def select_resolution(
    shape: Sequence[int],
    transform: Affine,
    axis_order: AxisOrder,
    mode: ResolutionSearchMode,
) -> int:
    """Find the H3 resolution closest to the size of a pixel of an array
    with the given shape and transform.

    MIN_DIFF stops at the first local minimum of the area difference. When the
    scan runs through all resolutions without a decision, 15 is returned.
    """
    if shape[0] == 0 or shape[1] == 0:
        raise EmptyArray()

    x_size, y_size = axis_order.extent(shape)
    bbox = Rect(0.0, 0.0, float(x_size - 1), float(y_size - 1)).transformed(transform)
    area_pixel = area_on_sphere(bbox) / (x_size * y_size)

    lng, lat = bbox.center
    if not (math.isfinite(lat) and math.isfinite(lng) and -90.0 <= lat <= 90.0):
        raise InvalidLatLng(f"invalid center of the array: lat={lat}, lng={lng}")
    # rasters in the 0..360 convention
    lng = normalize_longitude(lng)

    area_difference = None
    for res in range(MIN_RESOLUTION, MAX_RESOLUTION + 1):
        area_cell = h3.cell_area(h3.latlng_to_cell(lat, lng, res), unit="m^2")

        if mode is ResolutionSearchMode.SMALLER_THAN_PIXEL:
            if area_cell <= area_pixel:
                return res
        else:
            new_area_difference = abs(area_cell - area_pixel)
            if area_difference is not None and area_difference < new_area_difference:
                return max(res - 1, MIN_RESOLUTION)
            area_difference = new_area_difference

    return MAX_RESOLUTION
