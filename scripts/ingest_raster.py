#!/usr/bin/env python
# Ingestão raster -> H3 (uma banda, valor do pixel sob o centróide de cada célula)

import argparse, os, time
import h3
import numpy as np
import pandas as pd
import rasterio as rio
from rasterio.warp import Resampling, calculate_default_transform, reproject

from rasterh3 import AxisOrder, ConverterConfig, FloatBits, H3Converter, ResolutionSearchMode

DST_CRS = "EPSG:4326"


def log(msg): print(f"[ingest] {msg}", flush=True)


def read_band_wgs84(ds, band: int):
    """Lê a banda; reprojeta para EPSG:4326 (vizinho mais próximo) quando necessário."""
    data = ds.read(band)
    if ds.crs is None or ds.crs.to_string() == DST_CRS:
        return data, ds.transform

    log(f"reprojetando de {ds.crs} -> {DST_CRS}")
    transform, width, height = calculate_default_transform(
        ds.crs, DST_CRS, ds.width, ds.height, *ds.bounds
    )
    dst = np.full((height, width), ds.nodata if ds.nodata is not None else 0, dtype=data.dtype)
    reproject(
        source=data,
        destination=dst,
        src_transform=ds.transform,
        src_crs=ds.crs,
        src_nodata=ds.nodata,
        dst_transform=transform,
        dst_crs=DST_CRS,
        dst_nodata=ds.nodata,
        resampling=Resampling.nearest,
    )
    return dst, transform


def to_rows(results):
    rows = []
    for value, coverage in results.items():
        v = value.value if isinstance(value, FloatBits) else value
        for cell in coverage.compacted_iter():
            rows.append({"value": v, "cell_h3": cell, "h3_res": h3.get_resolution(cell)})
    return rows


def main():
    ap = argparse.ArgumentParser(description="Raster -> H3 (valor por célula)")
    ap.add_argument("--in", dest="in_tif", required=True)
    ap.add_argument("--band", type=int, default=1)
    ap.add_argument("--res", type=int, default=None, help="resolução H3 (0..15); sem ela é escolhida pelo pixel")
    ap.add_argument("--search-mode", choices=[m.value for m in ResolutionSearchMode],
                    default=ResolutionSearchMode.SMALLER_THAN_PIXEL.value)
    ap.add_argument("--compact", action="store_true", help="compacta as células (multi-resolução)")
    ap.add_argument("--workers", type=int, default=None, help="threads para os chunks (default: RASTERH3_MAX_WORKERS)")
    ap.add_argument("--out", dest="out_parquet", default="data/raster_h3.parquet")
    args = ap.parse_args()

    t0 = time.perf_counter()
    with rio.open(args.in_tif) as ds:
        log(f"arquivo={args.in_tif}  CRS={ds.crs}  shape={ds.height}x{ds.width}  nodata={ds.nodata}")
        data, transform = read_band_wgs84(ds, args.band)
        nodata = ds.nodata

    config = ConverterConfig.from_env()
    if args.workers is not None:
        config = config.model_copy(update={"max_workers": args.workers})

    # rasterio lê (linhas, colunas) -> eixo 0 é y
    conv = H3Converter(data, nodata, transform, AxisOrder.YX, config=config)

    res = args.res
    if res is None:
        res = conv.nearest_h3_resolution(ResolutionSearchMode(args.search_mode))
        log(f"resolução H3 escolhida ({args.search_mode}): {res}")

    results = conv.to_h3(res, compact=args.compact)
    for value, coverage in results.items():
        log(f"  {value} -> {len(coverage)} células")

    rows = to_rows(results)
    if not rows:
        raise SystemExit("Nenhuma célula gerada (raster todo nodata?).")

    os.makedirs(os.path.dirname(args.out_parquet) or ".", exist_ok=True)
    pd.DataFrame(rows).to_parquet(args.out_parquet, index=False)
    log(f"Gerado {args.out_parquet} com {len(rows)} linhas em {time.perf_counter() - t0:.1f}s.")


if __name__ == "__main__":
    main()
