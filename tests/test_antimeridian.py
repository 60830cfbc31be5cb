import pytest

from rasterh3.antimeridian import SplitRect, normalize_longitude, slice_by_longitude, split_rect_at_antimeridian
from rasterh3.geometry import Rect


@pytest.mark.parametrize("lng,expected", [
    (0.0, 0.0),
    (179.0, 179.0),
    (180.0, -180.0),
    (185.0, -175.0),
    (-185.0, 175.0),
    (540.0, -180.0),
])
def test_normalize_longitude(lng, expected):
    assert normalize_longitude(lng) == expected


def test_split_rect_at_antimeridian_not_crossing():
    rect = Rect.from_corners((45.0, 12.0), (67.0, 23.0))
    split = split_rect_at_antimeridian(rect)
    assert len(split) == 1
    assert split[0].rect == rect
    assert split[0].offset == 0.0


def test_split_rect_at_antimeridian_lower():
    rect = Rect.from_corners((-185.0, 12.0), (-178.0, 23.0))
    split = split_rect_at_antimeridian(rect)
    assert len(split) == 2
    assert split[0].rect == Rect.from_corners((-180.0, 12.0), (-178.0, 23.0))
    assert split[0].offset == 0.0
    assert split[1].rect == Rect.from_corners((175.0, 12.0), (180.0, 23.0))
    assert split[1].offset == 360.0


def test_split_rect_at_antimeridian_upper():
    # corners given in wraparound order
    rect = Rect.from_corners((185.0, 12.0), (178.0, 23.0))
    split = split_rect_at_antimeridian(rect)
    assert len(split) == 2
    assert split[0].rect == Rect.from_corners((-180.0, 12.0), (-175.0, 23.0))
    assert split[0].offset == -360.0
    assert split[1].rect == Rect.from_corners((178.0, 12.0), (180.0, 23.0))
    assert split[1].offset == 0.0


def test_slice_by_longitude_narrow_piece():
    piece = SplitRect(Rect(10.0, 0.0, 80.0, 5.0), 0.0)
    assert slice_by_longitude(piece) == [piece]


def test_slice_by_longitude_whole_globe():
    piece = SplitRect(Rect(-180.0, -90.0, 180.0, 90.0), -360.0)
    slices = slice_by_longitude(piece)
    assert [s.rect.min_x for s in slices] == [-180.0, -90.0, 0.0, 90.0]
    assert slices[-1].rect.max_x == 180.0
    for s in slices:
        assert s.rect.width <= 90.0
        assert (s.rect.min_y, s.rect.max_y) == (-90.0, 90.0)
        assert s.offset == -360.0


def test_slice_by_longitude_is_contiguous():
    piece = SplitRect(Rect(-180.0, 0.0, 20.0, 10.0), 0.0)
    slices = slice_by_longitude(piece)
    assert len(slices) == 3
    for a, b in zip(slices[:-1], slices[1:]):
        assert a.rect.max_x == b.rect.min_x
    assert slices[0].rect.min_x == -180.0
    assert slices[-1].rect.max_x == 20.0
