import h3
import pytest
from fastapi.testclient import TestClient

from app import app
from rasterh3 import AxisOrder, ResolutionSearchMode, select_resolution
from rasterh3.transform import from_rasterio

client = TestClient(app)

TRANSFORM = {"coefficients": [0.1, 0.0, 8.0, 0.0, -0.1, 48.0], "convention": "rasterio"}


def test_health():
    r = client.get("/healthz")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "h3_version" in data
    assert "rasterh3_version" in data


@pytest.mark.parametrize("mode", ["min_diff", "smaller_than_pixel"])
def test_resolution(mode):
    body = {"values": [[1, 2], [3, 4]], "dtype": "uint8", "transform": TRANSFORM, "mode": mode}
    r = client.post("/raster/resolution", json=body)
    assert r.status_code == 200
    expected = select_resolution(
        (2, 2), from_rasterio(TRANSFORM["coefficients"]), AxisOrder.YX, ResolutionSearchMode(mode)
    )
    assert r.json() == {"resolution": expected, "mode": mode}


def test_raster_to_h3():
    body = {
        "values": [[1, 1, 0], [0, 2, 2], [0, 0, 0]],
        "dtype": "uint8",
        "nodata": 0,
        "transform": TRANSFORM,
        "res": 7,
    }
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["resolution"] == 7
    assert data["compact"] is False
    assert [v["value"] for v in data["values"]] == [1, 2]
    for v in data["values"]:
        assert v["count"] == len(v["cells"]) > 0
        assert all(h3.get_resolution(c) == 7 for c in v["cells"])
    assert data["count"] == sum(v["count"] for v in data["values"])


def test_raster_to_h3_compact():
    body = {"values": [[5] * 4] * 4, "dtype": "int32", "transform": TRANSFORM, "res": 8, "compact": True}
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 200
    cells = r.json()["values"][0]["cells"]
    assert min(h3.get_resolution(c) for c in cells) < 8


def test_raster_to_h3_nan_values():
    body = {"values": [[None, 1.5], [None, 1.5]], "dtype": "float32", "transform": TRANSFORM, "res": 7}
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 200
    assert [v["value"] for v in r.json()["values"]] == [1.5, None]


def test_null_in_integer_raster():
    body = {"values": [[None, 1]], "dtype": "uint8", "transform": TRANSFORM, "res": 7}
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 400


def test_ragged_values():
    body = {"values": [[1, 1], [1]], "dtype": "uint8", "transform": TRANSFORM, "res": 7}
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 400


def test_singular_transform():
    body = {
        "values": [[1, 1], [1, 1]],
        "dtype": "uint8",
        "transform": {"coefficients": [0, 0, 8, 0, 0, 48], "convention": "rasterio"},
        "res": 5,
    }
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 400


def test_invalid_resolution():
    body = {"values": [[1]], "dtype": "uint8", "transform": TRANSFORM, "res": 16}
    r = client.post("/raster/h3", json=body)
    assert r.status_code == 422


def test_boundary():
    cell = h3.latlng_to_cell(-23.5505, -46.6333, 9)
    r = client.get(f"/h3/boundary/{cell}")
    assert r.status_code == 200
    boundary = r.json()["boundary"]
    assert isinstance(boundary, list)
    assert len(boundary) >= 6

    r2 = client.get("/h3/boundary/not-a-cell")
    assert r2.status_code == 400
