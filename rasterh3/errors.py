"""Errors raised by the raster to H3 conversion."""


class RasterH3Error(Exception):
    """Base class of all errors raised by rasterh3."""


class TransformNotInvertible(RasterH3Error):
    def __init__(self, message: str = "Transform is not invertible"):
        super().__init__(message)


class EmptyArray(RasterH3Error):
    def __init__(self, message: str = "Empty array"):
        super().__init__(message)


class InvalidLatLng(RasterH3Error, ValueError):
    """A computed point lies outside the valid latitude/longitude range."""


class InvalidGeometry(RasterH3Error, ValueError):
    """A rectangle could not be turned into a polygon H3 is able to tile."""


class InvalidResolution(RasterH3Error, ValueError):
    """A resolution outside of 0..15."""


class CompactionError(RasterH3Error):
    """H3 rejected a cell set during compaction."""
