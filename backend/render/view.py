from __future__ import annotations

import math
from typing import Any, Iterable

from shapely.geometry import shape


def collection_bounds(documents: Iterable[dict[str, Any]]) -> tuple[float, float, float, float] | None:
    """
    (min_lon, min_lat, max_lon, max_lat) over every feature geometry, or None if empty.
    """
    min_lon = min_lat = math.inf
    max_lon = max_lat = -math.inf
    for doc in documents:
        for feature in doc.get("features") or []:
            geom = (feature or {}).get("geometry")
            if not geom:
                continue
            g = shape(geom)
            if g.is_empty:
                continue
            x0, y0, x1, y1 = g.bounds
            min_lon, min_lat = min(min_lon, x0), min(min_lat, y0)
            max_lon, max_lat = max(max_lon, x1), max(max_lat, y1)
    if min_lon == math.inf:
        return None
    return min_lon, min_lat, max_lon, max_lat


def fit_view_to_bounds(
    bounds: tuple[float, float, float, float],
    *,
    viewport: dict[str, int] | None = None,
    padding: float = 0.1,
) -> tuple[dict[str, float], float]:
    min_lon, min_lat, max_lon, max_lat = bounds
    pad_lon = max(0.003, (max_lon - min_lon) * padding)
    pad_lat = max(0.003, (max_lat - min_lat) * padding)
    min_lon -= pad_lon
    max_lon += pad_lon
    min_lat -= pad_lat
    max_lat += pad_lat

    center = {"lon": (min_lon + max_lon) / 2.0, "lat": (min_lat + max_lat) / 2.0}
    width = int((viewport or {}).get("width") or 900)
    height = int((viewport or {}).get("height") or 600)
    zoom = bbox_to_zoom(min_lon, min_lat, max_lon, max_lat, width=width, height=height)
    return center, zoom


def bbox_to_zoom(
    min_lon: float,
    min_lat: float,
    max_lon: float,
    max_lat: float,
    *,
    width: int,
    height: int,
) -> float:
    # WebMercator bbox -> zoom heuristic.
    def lat_to_rad(lat: float) -> float:
        s = math.sin(lat * math.pi / 180.0)
        return math.log((1 + s) / (1 - s)) / 2.0

    lon_delta = max(max_lon - min_lon, 1e-6)
    lat_delta = max((lat_to_rad(max_lat) - lat_to_rad(min_lat)) * 180.0 / math.pi, 1e-6)

    # 256px tiles
    zoom_x = math.log2((width * 360.0) / (256.0 * lon_delta))
    zoom_y = math.log2((height * 170.0) / (256.0 * lat_delta))
    return float(min(zoom_x, zoom_y, 22.0))
