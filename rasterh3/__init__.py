"""Convert raster data to H3 cells."""
from .axis import AxisOrder
from .config import ConverterConfig
from .converter import H3Converter, SequentialExecutor, find_boxes_containing_data
from .coverage import CellCoverage
from .errors import (
    CompactionError,
    EmptyArray,
    InvalidGeometry,
    InvalidLatLng,
    InvalidResolution,
    RasterH3Error,
    TransformNotInvertible,
)
from .resolution import ResolutionSearchMode, select_resolution
from .values import FloatBits

__version__ = "0.10.0"

__all__ = [
    "AxisOrder",
    "CellCoverage",
    "CompactionError",
    "ConverterConfig",
    "EmptyArray",
    "FloatBits",
    "H3Converter",
    "InvalidGeometry",
    "InvalidLatLng",
    "InvalidResolution",
    "RasterH3Error",
    "ResolutionSearchMode",
    "SequentialExecutor",
    "TransformNotInvertible",
    "find_boxes_containing_data",
    "select_resolution",
]
