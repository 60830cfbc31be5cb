import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

import h3
import numpy as np
from affine import Affine

from .antimeridian import SplitRect, normalize_longitude, slice_by_longitude, split_rect_at_antimeridian
from .axis import AxisOrder
from .config import ConverterConfig
from .coverage import CellCoverage
from .errors import InvalidGeometry
from .geometry import Rect, rect_to_h3shape
from .resolution import ResolutionSearchMode, select_resolution, validate_resolution
from .transform import invert
from .values import identity_scalar, identity_view, public_key

logger = logging.getLogger(__name__)


def find_continuous_chunks_along_axis(a: np.ndarray, axis: int, nodata_value: Any) -> List[Tuple[int, int]]:
    """Inclusive index ranges along `axis` where the slices contain
    at least one value other than `nodata_value`."""
    occupied = np.flatnonzero(np.any(a != nodata_value, axis=1 - axis))
    if occupied.size == 0:
        return []
    breaks = np.flatnonzero(np.diff(occupied) > 1)
    starts = np.concatenate(([occupied[0]], occupied[breaks + 1]))
    ends = np.concatenate((occupied[breaks], [occupied[-1]]))
    return [(int(s), int(e)) for s, e in zip(starts, ends)]


def _boxes_containing_data(a: np.ndarray, nodata_value: Any, axis_order: AxisOrder) -> List[Rect]:
    boxes = []
    for x0, x1 in find_continuous_chunks_along_axis(a, axis_order.x_axis, nodata_value):
        sv = a[axis_order.index(slice(x0, x1 + 1), slice(None))]
        for y0, y1 in find_continuous_chunks_along_axis(sv, axis_order.y_axis, nodata_value):
            sv2 = sv[axis_order.index(slice(None), slice(y0, y1 + 1))]

            # one more pass along x to get the specific range for that y range
            for cx0, cx1 in find_continuous_chunks_along_axis(sv2, axis_order.x_axis, nodata_value):
                boxes.append(Rect(x0 + cx0, y0, x0 + cx1, y1))
    return boxes


def find_boxes_containing_data(array: np.ndarray, nodata_value: Any, axis_order: AxisOrder) -> List[Rect]:
    """
    Find boxes in the array where there are any values except the `nodata_value`.

    The boxes use inclusive array indexes. This is based on completely empty
    rows and columns only, so multiple smaller clusters are often reported as
    one box. It is sufficient to skip most of the work for fragmented or
    sparse datasets.
    """
    array = np.asarray(array)
    return _boxes_containing_data(
        identity_view(array),
        identity_scalar(nodata_value, array.dtype),
        axis_order,
    )


class SequentialExecutor:
    """Converts all chunks in the calling thread. Has the `map` of `concurrent.futures.Executor`."""

    def map(self, fn, *iterables):
        return map(fn, *iterables)


class H3Converter:
    """
    Converts a two-dimensional array to H3 cells.

    The array is only read, never copied or modified, and it is shared by all
    chunks of a conversion. Regions with only nodata values are skipped.
    """

    def __init__(
        self,
        array: np.ndarray,
        nodata_value: Optional[Any],
        transform: Affine,
        axis_order: AxisOrder = AxisOrder.YX,
        config: Optional[ConverterConfig] = None,
    ):
        array = np.asarray(array)
        if array.ndim != 2:
            raise ValueError(f"expected a two-dimensional array, got {array.ndim} dimensions")
        self.array = array
        self.nodata_value = nodata_value
        self.transform = transform
        self.axis_order = axis_order
        self.config = config if config is not None else ConverterConfig.from_env()

        self._keys = identity_view(array)
        self._nodata_key = None if nodata_value is None else identity_scalar(nodata_value, array.dtype)

    def nearest_h3_resolution(self, search_mode: ResolutionSearchMode = ResolutionSearchMode.SMALLER_THAN_PIXEL) -> int:
        """Find the H3 resolution closest to the size of a pixel of the array."""
        return select_resolution(self.array.shape, self.transform, self.axis_order, search_mode)

    def _rects_with_data_without_nodata(self, rect_size: int) -> List[Rect]:
        # tiles covering the complete array
        x_size, y_size = self.axis_order.extent(self.array.shape)
        return [
            Rect(x0, y0, min(x_size, x0 + rect_size), min(y_size, y0 + rect_size))
            for x0 in range(0, x_size, rect_size)
            for y0 in range(0, y_size, rect_size)
        ]

    def _rects_with_data_with_nodata(self, rect_size: int) -> List[Rect]:
        x_size, _ = self.axis_order.extent(self.array.shape)
        rects = []
        for x_start in range(0, x_size, rect_size):
            strip = self._keys[self.axis_order.index(slice(x_start, x_start + rect_size), slice(None))]
            for box in _boxes_containing_data(strip, self._nodata_key, self.axis_order):
                x0 = x_start + box.min_x
                # pixel edges, the max is exclusive
                x1 = x_start + box.max_x + 1
                for y0 in range(box.min_y, box.max_y + 1, rect_size):
                    rects.append(Rect(x0, y0, x1, min(y0 + rect_size, box.max_y + 1)))
        return rects

    def rects_with_data(self, rect_size: int) -> List[Rect]:
        """Windows of the array to convert, as half-open ranges of pixel edges."""
        if self._nodata_key is None:
            return self._rects_with_data_without_nodata(rect_size)
        return self._rects_with_data_with_nodata(rect_size)

    @contextmanager
    def _executor(self, executor):
        if executor is not None:
            yield executor
        elif self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                yield pool
        else:
            yield SequentialExecutor()

    def to_h3(self, resolution: int, compact: bool = False, executor=None) -> Dict[Hashable, CellCoverage]:
        """
        Convert to a dict mapping raster values to their `CellCoverage`.

        While H3 cells are hexagons and pentagons, only the raster value under
        the centroid of a cell is taken into account.

        `executor` may be any object with the `map` method of
        `concurrent.futures.Executor`. The result does not depend on it.
        """
        resolution = validate_resolution(resolution)
        inverse_transform = invert(self.transform)

        x_size, _ = self.axis_order.extent(self.array.shape)
        rects = self.rects_with_data(self.config.chunk_size(x_size))
        n_rects = len(rects)
        logger.debug("to_h3: found %d rects containing non-nodata values", n_rects)

        def convert(item):
            window_i, window = item
            logger.debug(
                "to_h3: rect %d/%d with size %d x %d",
                window_i, n_rects, window.width, window.height,
            )
            return self._convert_window(window, inverse_transform, resolution, compact)

        with self._executor(executor) as ex:
            chunk_maps = list(ex.map(convert, enumerate(rects)))

        # combine the results from all chunks
        h3_map: Dict[Hashable, CellCoverage] = {}
        for chunk_map in chunk_maps:
            for key, coverage in chunk_map.items():
                h3_map.setdefault(key, CellCoverage()).append(coverage)

        for coverage in h3_map.values():
            coverage.finalize(compact)

        return {public_key(key, self.array.dtype): coverage for key, coverage in h3_map.items()}

    def _convert_window(
        self,
        window: Rect,
        inverse_transform: Affine,
        resolution: int,
        compact: bool,
    ) -> Dict[Hashable, CellCoverage]:
        chunk_map: Dict[Hashable, CellCoverage] = {}

        # the window in geographical coordinates
        window_box = window.transformed(self.transform)

        for piece in split_rect_at_antimeridian(window_box):
            piece = _wrap_longitudes(piece)
            if piece.rect.width <= 0 or piece.rect.height <= 0:
                continue
            for part in slice_by_longitude(piece):
                try:
                    cells = h3.h3shape_to_cells(rect_to_h3shape(part.rect), resolution)
                except h3.H3BaseException as e:
                    raise InvalidGeometry(f"tiling {part.rect} failed: {e}") from e
                if cells:
                    self._insert_cells(chunk_map, cells, part.offset, inverse_transform)

        # early finalizing to free a bit of memory
        for coverage in chunk_map.values():
            coverage.finalize(compact)
        logger.debug("to_h3: finalized %d values of rect %s", len(chunk_map), window)
        return chunk_map

    def _insert_cells(
        self,
        chunk_map: Dict[Hashable, CellCoverage],
        cells: Sequence[str],
        offset: float,
        inverse_transform: Affine,
    ) -> None:
        centroids = np.array([h3.cell_to_latlng(cell) for cell in cells], dtype=np.float64)

        # undo the antimeridian normalization, then go to array coordinates
        px, py = inverse_transform @ (centroids[:, 1] - offset, centroids[:, 0])
        ix = np.floor(px)
        iy = np.floor(py)

        x_size, y_size = self.axis_order.extent(self.array.shape)
        inside = (ix >= 0) & (ix < x_size) & (iy >= 0) & (iy < y_size)
        if not inside.any():
            return

        values = self._keys[self.axis_order.index(ix[inside].astype(np.intp), iy[inside].astype(np.intp))]
        matched = np.asarray(cells)[inside]
        if self._nodata_key is not None:
            is_data = values != self._nodata_key
            values = values[is_data]
            matched = matched[is_data]

        for cell, key in zip(matched.tolist(), values.tolist()):
            coverage = chunk_map.get(key)
            if coverage is None:
                coverage = chunk_map[key] = CellCoverage()
            coverage.insert(cell)


def _wrap_longitudes(piece: SplitRect) -> SplitRect:
    """Move a piece lying completely east of 180 or west of -180 into the valid range."""
    rect = piece.rect
    if -180.0 <= rect.min_x < 180.0:
        return piece
    shift = normalize_longitude(rect.min_x) - rect.min_x
    return SplitRect(
        Rect(rect.min_x + shift, rect.min_y, rect.max_x + shift, rect.max_y),
        piece.offset + shift,
    )
