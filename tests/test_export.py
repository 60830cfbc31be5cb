import math

import h3
import numpy as np

from scripts.parquet_to_hexgeojson import cells_to_feature_collection


def test_feature_collection():
    a = h3.latlng_to_cell(-23.5505, -46.6333, 9)
    b = h3.cell_to_parent(a, 7)
    fc = cells_to_feature_collection([(a, np.uint8(3)), (b, np.float32("nan"))])

    assert fc["type"] == "FeatureCollection"
    assert len(fc["features"]) == 2

    first, second = fc["features"]
    assert first["properties"] == {"h3index": a, "h3res": 9, "value": 3}
    assert second["properties"]["h3res"] == 7
    assert second["properties"]["value"] is None

    for feat in fc["features"]:
        ring = feat["geometry"]["coordinates"][0]
        assert ring[0] == ring[-1]
        lng, lat = ring[0]
        assert not math.isnan(lng) and -90 <= lat <= 90
