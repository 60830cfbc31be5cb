"""
Construction of the affine transform mapping array (col, row) coordinates
to geographic (lng, lat) coordinates.
"""
from typing import Sequence

from affine import Affine, TransformNotInvertibleError

from .errors import TransformNotInvertible


def from_gdal(coefficients: Sequence[float]) -> Affine:
    """From the ordering of GDAL's GetGeoTransform:
    [origin x, pixel width, row rotation, origin y, column rotation, pixel height]
    """
    if len(coefficients) != 6:
        raise ValueError("a geotransform has exactly 6 coefficients")
    return Affine.from_gdal(*coefficients)


def from_rasterio(coefficients: Sequence[float]) -> Affine:
    """From the [a, b, c, d, e, f] ordering used by rasterio's `dataset.transform`."""
    if len(coefficients) < 6:
        raise ValueError("an affine transform needs 6 coefficients")
    return Affine(*coefficients[:6])


def invert(transform: Affine) -> Affine:
    try:
        return ~transform
    except TransformNotInvertibleError as e:
        raise TransformNotInvertible() from e
