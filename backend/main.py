from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from district.registry import get_district, get_settings, resolve_repo_path
from engine.plugins import rtl_text_plugin_status, rtl_text_plugin_url, set_rtl_text_plugin
from engine.style import style_loader_from_config
from errors import DistrictMapError
from fetch.retrievers import retriever_from_settings
from layers.plan import check_layer_plan, default_layers
from logs import configure_logging
from render.build_map import build_map_plot
from sources.registry import default_registry
from viewport.bootstrap import ViewOptions, Viewport

logger = logging.getLogger(__name__)

# Id of the element the frontend renders the map into.
MAP_CONTAINER = "map"

# Upper bound for `?wait=true` on status/plot requests.
WAIT_COMPOSED_TIMEOUT_S = 30.0


def initialize() -> None:
    """
    Process-wide, one-time setup. Runs from the app lifespan, never at import.
    """
    configure_logging()
    plugin = get_district().rtlTextPlugin
    if plugin is not None and rtl_text_plugin_status() == "unavailable":
        set_rtl_text_plugin(plugin.url, _on_rtl_plugin_loaded, lazy=plugin.lazy)


def _on_rtl_plugin_loaded(error: Exception | None) -> None:
    if error is not None:
        logger.error("RTL text plugin failed to load: %s", error)


def build_viewport() -> Viewport:
    cfg = get_district()
    settings = get_settings()
    registry = default_registry()
    layers = default_layers()
    check_layer_plan(layers, registry)
    return Viewport(
        MAP_CONTAINER,
        ViewOptions.from_district(cfg, settings),
        registry=registry,
        retriever=retriever_from_settings(settings),
        layers=layers,
        style_loader=style_loader_from_config(cfg.style, settings),
        fetch_timeout_s=settings.fetch_timeout_s or cfg.fetch.timeoutS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize()
    viewport = build_viewport()
    app.state.viewport = viewport
    await viewport.mount()
    try:
        yield
    finally:
        await viewport.unmount()
        await viewport.retriever.aclose()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _viewport(request: Request) -> Viewport:
    viewport = getattr(request.app.state, "viewport", None)
    if viewport is None:
        raise HTTPException(status_code=503, detail="Map is not initialized")
    return viewport


async def _maybe_wait(viewport: Viewport, wait: bool) -> None:
    if not wait or viewport.composer is None:
        return
    try:
        await asyncio.wait_for(
            asyncio.shield(viewport.wait_composed()), WAIT_COMPOSED_TIMEOUT_S
        )
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail="Map composition still pending") from None
    except (DistrictMapError, RuntimeError) as e:
        # Composition errors are reported through status(), not as a 500 here.
        logger.debug("Composition ended with error: %s", e)


@app.get("/sources")
def list_sources():
    registry = default_registry()
    return [{"id": d.id, "location": d.location} for d in registry]


@app.get("/data/{source_id}.json")
def get_source_document(source_id: str):
    registry = default_registry()
    if source_id not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown source: {source_id}")
    path = resolve_repo_path(registry.location_of(source_id))
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Missing document for source: {source_id}")
    return FileResponse(path, media_type="application/json")


@app.get("/map/status")
async def map_status(request: Request, wait: bool = False):
    viewport = _viewport(request)
    await _maybe_wait(viewport, wait)
    return {
        **viewport.status(),
        "rtlTextPlugin": {"status": rtl_text_plugin_status(), "url": rtl_text_plugin_url()},
    }


@app.get("/map/style")
async def map_style(request: Request, wait: bool = False):
    viewport = _viewport(request)
    await _maybe_wait(viewport, wait)
    instance = viewport.instance
    if instance is None or not instance.style_loaded:
        raise HTTPException(status_code=503, detail="Map style is not loaded")
    return instance.to_style()


@app.get("/map/plot")
async def map_plot(request: Request, fit: bool = False, wait: bool = False):
    viewport = _viewport(request)
    await _maybe_wait(viewport, wait)
    cfg = get_district()
    return build_map_plot(
        viewport.instance,
        view_center={"lat": cfg.view.center.lat, "lon": cfg.view.center.lon},
        view_zoom=cfg.view.zoom,
        style=viewport.options.style_url,
        focus_map=fit,
        status=viewport.status(),
    )


class ApiClick(BaseModel):
    lng: float = Field(ge=-180.0, le=180.0)
    lat: float = Field(ge=-90.0, le=90.0)


@app.post("/map/click")
async def map_click(body: ApiClick, request: Request):
    viewport = _viewport(request)
    try:
        lng_lat = viewport.click(body.lng, body.lat)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return {"lngLat": lng_lat.to_list(), "clicks": len(viewport.clicks)}
