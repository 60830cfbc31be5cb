#!/usr/bin/env python
import argparse, os, json, math, h3, pandas as pd


def log(msg): print(f"[export] {msg}", flush=True)


def cell_boundary(cell):
    coords = h3.cell_to_boundary(cell)    # [(lat,lng), ...]
    ring = [[float(lng), float(lat)] for (lat, lng) in coords]
    ring.append(ring[0])  # fechar
    return {"type": "Polygon", "coordinates": [ring]}


def _json_value(v):
    v = v.item() if hasattr(v, "item") else v
    if isinstance(v, float) and math.isnan(v):
        return None
    return v


def cells_to_feature_collection(rows):
    """rows: iterável de (cell_h3, value) -> FeatureCollection com um hexágono por célula"""
    feats = []
    for cell, value in rows:
        feats.append({
            "type": "Feature",
            "properties": {"h3index": cell, "h3res": h3.get_resolution(cell), "value": _json_value(value)},
            "geometry": cell_boundary(cell),
        })
    return {"type": "FeatureCollection", "features": feats}


def main():
    ap = argparse.ArgumentParser(description="Parquet (cell_h3, value) -> GeoJSON de hexágonos")
    ap.add_argument("--in", dest="in_parquet", required=True)
    ap.add_argument("--out", dest="out_geojson", required=True)
    ap.add_argument("--value-col", default="value")
    args = ap.parse_args()

    df = pd.read_parquet(args.in_parquet)
    if "cell_h3" not in df.columns or args.value_col not in df.columns:
        raise SystemExit(f"Parquet precisa ter colunas: cell_h3 e {args.value_col} (ou --value-col).")

    fc = cells_to_feature_collection(zip(df["cell_h3"], df[args.value_col]))
    os.makedirs(os.path.dirname(args.out_geojson) or ".", exist_ok=True)
    with open(args.out_geojson, "w", encoding="utf-8") as f:
        json.dump(fc, f, ensure_ascii=False)
    log(f"GeoJSON salvo: {args.out_geojson} ({len(fc['features'])} hex)")


if __name__ == "__main__":
    main()
