import math
from dataclasses import dataclass
from typing import List

from .geometry import Rect

# H3 takes polygons spanning more than 180 degrees of longitude as crossing
# the antimeridian, so wider rectangles are tiled in slices of at most this width
MAX_SLICE_WIDTH = 90.0


def normalize_longitude(longitude: float) -> float:
    """Bring a longitude into [-180, 180)."""
    return ((longitude + 540.0) % 360.0) - 180.0


@dataclass(frozen=True)
class SplitRect:
    rect: Rect

    # normalized minus original longitude. Subtract it from longitudes
    # computed within `rect` to get back to the unsplit coordinates. Adding
    # it would move them a full turn away from the raster.
    offset: float


def split_rect_at_antimeridian(rect: Rect) -> List[SplitRect]:
    min_x = normalize_longitude(rect.min_x)
    max_x = normalize_longitude(rect.max_x)

    if min_x < max_x:
        return [SplitRect(rect, 0.0)]

    return [
        SplitRect(Rect(-180.0, rect.min_y, max_x, rect.max_y), max_x - rect.max_x),
        SplitRect(Rect(min_x, rect.min_y, 180.0, rect.max_y), min_x - rect.min_x),
    ]


def slice_by_longitude(piece: SplitRect, max_width: float = MAX_SLICE_WIDTH) -> List[SplitRect]:
    """Cut `piece` into slices of equal width no wider than `max_width`. All slices keep the offset."""
    rect = piece.rect
    n_slices = max(1, math.ceil(rect.width / max_width))
    if n_slices == 1:
        return [piece]

    step = rect.width / n_slices
    edges = [rect.min_x + i * step for i in range(n_slices)] + [rect.max_x]
    return [
        SplitRect(Rect(x0, rect.min_y, x1, rect.max_y), piece.offset)
        for x0, x1 in zip(edges[:-1], edges[1:])
    ]
