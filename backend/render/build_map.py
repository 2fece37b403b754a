from __future__ import annotations

from typing import Any

from engine.style_map import StyleMap
from render.view import collection_bounds, fit_view_to_bounds


def mapbox_layer(layer: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
    """
    Translate one composed engine layer into a Plotly `layout.mapbox.layers` entry.
    """
    paint = layer.get("paint") or {}
    kind = layer["type"]
    out: dict[str, Any] = {
        "name": layer["id"],
        "sourcetype": "geojson",
        "source": data,
        "type": kind,
    }
    if kind == "fill":
        out["color"] = paint.get("fill-color")
        out["opacity"] = paint.get("fill-opacity", 1.0)
        if paint.get("fill-outline-color"):
            out["fill"] = {"outlinecolor": paint["fill-outline-color"]}
    elif kind == "line":
        out["color"] = paint.get("line-color")
        out["opacity"] = paint.get("line-opacity", 1.0)
        out["line"] = {"width": paint.get("line-width", 1.0)}
    elif kind == "circle":
        out["color"] = paint.get("circle-color")
        out["opacity"] = paint.get("circle-opacity", 1.0)
        out["circle"] = {"radius": paint.get("circle-radius", 5.0)}
    else:
        raise ValueError(f"Unsupported layer type: {kind}")
    return out


def _feature_count(doc: dict[str, Any]) -> int:
    return len(doc.get("features") or [])


def build_map_plot(
    instance: StyleMap | None,
    *,
    view_center: dict[str, float],
    view_zoom: float,
    style: str,
    focus_map: bool = False,
    viewport: dict[str, int] | None = None,
    status: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Plotly mapbox payload for the composed map.

    Layers keep the instance's stacking order (first entry is drawn first).
    Before composition, or after a failed one, only the base style is shown.
    """
    layers: list[dict[str, Any]] = []
    sources: dict[str, dict[str, Any]] = {}
    if instance is not None and not instance.removed:
        for sid in instance.source_ids:
            src = instance.get_source(sid) or {}
            sources[sid] = src.get("data") or {}
        for lid in instance.layer_ids:
            layer = instance.get_layer(lid) or {}
            layers.append(mapbox_layer(layer, sources.get(layer.get("source"), {})))

    center, zoom = dict(view_center), float(view_zoom)
    if focus_map and sources:
        bounds = collection_bounds(sources.values())
        if bounds is not None:
            center, zoom = fit_view_to_bounds(bounds, viewport=viewport)

    meta: dict[str, Any] = {
        "stats": {
            "sources": len(sources),
            "layers": len(layers),
            "layerOrder": [layer["name"] for layer in layers],
            "features": {sid: _feature_count(doc) for sid, doc in sources.items()},
        }
    }
    if status is not None:
        meta["status"] = status

    return {
        # Plotly needs a trace to create the mapbox subplot.
        "data": [
            {
                "type": "scattermapbox",
                "lon": [],
                "lat": [],
                "mode": "markers",
                "hoverinfo": "skip",
                "showlegend": False,
            }
        ],
        "layout": {
            "mapbox": {
                "center": center,
                "zoom": zoom,
                "style": style,
                "layers": layers,
            },
            "margin": {"l": 0, "r": 0, "t": 0, "b": 0},
            "showlegend": False,
            "meta": meta,
        },
    }
