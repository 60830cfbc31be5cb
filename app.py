import math
from typing import List, Literal, Optional, Union

import h3
import numpy as np
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, conint

import rasterh3
from rasterh3 import AxisOrder, FloatBits, H3Converter, RasterH3Error, ResolutionSearchMode
from rasterh3.transform import from_gdal, from_rasterio

app = FastAPI(title="rasterh3 service", version=rasterh3.__version__)

Number = Union[int, float]


# --------- modelos de entrada ----------
class TransformModel(BaseModel):
    coefficients: List[float] = Field(..., min_length=6, max_length=6)
    # gdal: [origin_x, pixel_w, rot_x, origin_y, rot_y, pixel_h]
    # rasterio: [a, b, c, d, e, f]
    convention: Literal["gdal", "rasterio"] = "rasterio"

    def to_affine(self):
        if self.convention == "gdal":
            return from_gdal(self.coefficients)
        return from_rasterio(self.coefficients)


class RasterRequest(BaseModel):
    # linhas x colunas; com axis_order="yx" o eixo 0 é a latitude
    values: List[List[Optional[Number]]] = Field(..., min_length=1)
    dtype: Literal["uint8", "int16", "int32", "int64", "float32", "float64"] = "float64"
    transform: TransformModel
    axis_order: Literal["xy", "yx"] = "yx"
    mode: Literal["min_diff", "smaller_than_pixel"] = "smaller_than_pixel"

    def to_array(self) -> np.ndarray:
        widths = {len(row) for row in self.values}
        if len(widths) != 1:
            raise HTTPException(400, "todas as linhas de 'values' precisam ter o mesmo tamanho")
        if self.dtype.startswith("float"):
            rows = [[math.nan if v is None else v for v in row] for row in self.values]
        elif any(v is None for row in self.values for v in row):
            raise HTTPException(400, "null só é aceito em rasters float (vira NaN)")
        else:
            rows = self.values
        try:
            return np.asarray(rows, dtype=self.dtype)
        except (OverflowError, ValueError) as e:
            raise HTTPException(400, f"valores inválidos para {self.dtype}: {e}")

    def converter(self, nodata=None) -> H3Converter:
        return H3Converter(
            self.to_array(),
            nodata,
            self.transform.to_affine(),
            AxisOrder(self.axis_order),
        )


class ConvertRequest(RasterRequest):
    nodata: Optional[Number] = None
    res: Optional[conint(ge=0, le=15)] = None
    compact: bool = False


# ---------- helpers ----------
def _json_value(value):
    if isinstance(value, FloatBits):
        value = value.value
        # NaN não é JSON válido
        return None if math.isnan(value) else value
    return value


def _sort_key(item):
    value = _json_value(item[0])
    return (value is None, value if value is not None else 0)


# ---------------- endpoints ----------------
@app.get("/healthz")
def health():
    return {
        "status": "ok",
        "h3_version": getattr(h3, "__version__", "unknown"),
        "rasterh3_version": rasterh3.__version__,
    }


@app.post("/raster/resolution")
def raster_resolution(req: RasterRequest):
    mode = ResolutionSearchMode(req.mode)
    try:
        res = req.converter().nearest_h3_resolution(mode)
    except (RasterH3Error, OverflowError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"resolution": res, "mode": mode.value}


@app.post("/raster/h3")
def raster_to_h3(req: ConvertRequest):
    """
    Body esperado:
    {
      "values": [[1, 1], [0, 2]],
      "dtype": "uint8",
      "nodata": 0,
      "transform": {"coefficients": [0.01, 0, 8.1, 0, -0.01, 49.4], "convention": "rasterio"},
      "axis_order": "yx",
      "res": 9,
      "compact": true
    }
    Sem "res" a resolução é escolhida pelo tamanho do pixel ("mode").
    """
    try:
        conv = req.converter(req.nodata)
        res = req.res
        if res is None:
            res = conv.nearest_h3_resolution(ResolutionSearchMode(req.mode))
        results = conv.to_h3(res, compact=req.compact)
    except (RasterH3Error, OverflowError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    values = []
    for value, coverage in sorted(results.items(), key=_sort_key):
        cells = list(coverage.compacted_iter())
        values.append({"value": _json_value(value), "cells": cells, "count": len(cells)})
    return {
        "resolution": res,
        "compact": req.compact,
        "values": values,
        "count": sum(v["count"] for v in values),
    }


@app.get("/h3/boundary/{cell}")
def cell_boundary(cell: str):
    if not h3.is_valid_cell(cell):
        raise HTTPException(400, f"célula H3 inválida: {cell}")
    return {"boundary": h3.cell_to_boundary(cell)}
