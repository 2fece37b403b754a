from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

import httpx

from engine.style import StyleLoader
from engine.types import ERROR, STYLE_LOAD, Listener
from errors import (
    DuplicateLayerError,
    DuplicateSourceError,
    InstanceRemovedError,
    SourceNotRegisteredError,
    StyleNotReadyError,
)

logger = logging.getLogger(__name__)


class StyleMap:
    """
    In-process map instance composing a Mapbox GL style document.

    Construction returns immediately and schedules the base style load on the
    running event loop; `style.load` fires once that load completes. Sources
    and layers are only accepted afterwards. Layers stack in insertion order.
    """

    def __init__(
        self,
        *,
        container: Any,
        style_loader: StyleLoader,
        center: tuple[float, float],
        zoom: float,
    ) -> None:
        self.container = container
        self.center = center
        self.zoom = zoom
        self._listeners: dict[str, list[Listener]] = {}
        # once() wrappers keyed by (event, original listener) so off() can find them.
        self._once: dict[tuple[str, Listener], Listener] = {}
        self._base_style: dict[str, Any] | None = None
        self._sources: dict[str, dict[str, Any]] = {}
        self._layers: list[dict[str, Any]] = []
        self._removed = False
        # Journal of mutating calls, in call order.
        self.calls: list[tuple[str, ...]] = []
        self._load_task = asyncio.get_running_loop().create_task(
            self._load_style(style_loader), name="style-load"
        )

    async def _load_style(self, loader: StyleLoader) -> None:
        try:
            style = await loader.load()
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error("Base style failed to load: %s", e)
            self.fire(ERROR, e)
            return
        if self._removed:
            return
        self._base_style = style
        logger.debug("Base style loaded (%d layers)", len(style.get("layers") or []))
        self.fire(STYLE_LOAD, None)

    # --- state -------------------------------------------------------------

    @property
    def removed(self) -> bool:
        return self._removed

    @property
    def style_loaded(self) -> bool:
        return self._base_style is not None

    @property
    def source_ids(self) -> list[str]:
        return list(self._sources.keys())

    @property
    def layer_ids(self) -> list[str]:
        return [layer["id"] for layer in self._layers]

    def _check_alive(self) -> None:
        if self._removed:
            raise InstanceRemovedError("Map instance has been removed")

    # --- events ------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        self._check_alive()
        self._listeners.setdefault(event, []).append(listener)

    def once(self, event: str, listener: Listener) -> None:
        if (event, listener) in self._once:
            raise ValueError(f"{listener!r} is already registered once for {event!r}")

        def wrapper(payload: Any) -> None:
            self.off(event, listener)
            listener(payload)

        self._once[(event, listener)] = wrapper
        self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> None:
        # Unsubscribing from a removed instance is a no-op, not an error.
        registered = self._once.pop((event, listener), listener)
        handlers = self._listeners.get(event) or []
        if registered in handlers:
            handlers.remove(registered)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event) or [])

    def fire(self, event: str, payload: Any = None) -> None:
        """
        Dispatch `event` synchronously to the current listeners.
        """
        if self._removed:
            return
        for listener in list(self._listeners.get(event) or []):
            listener(payload)

    # --- sources / layers ----------------------------------------------------

    def add_source(self, source_id: str, source: dict[str, Any]) -> None:
        self._check_alive()
        if not self.style_loaded:
            raise StyleNotReadyError(f"Style is not done loading; cannot add source '{source_id}'")
        if source_id in self._sources:
            raise DuplicateSourceError(f"There is already a source with id '{source_id}'")
        if source.get("type") != "geojson" or "data" not in source:
            raise ValueError(f"Source '{source_id}' must be a geojson source with data")
        self._sources[source_id] = source
        self.calls.append(("add_source", source_id))

    def get_source(self, source_id: str) -> dict[str, Any] | None:
        return self._sources.get(source_id)

    def add_layer(self, layer: dict[str, Any]) -> None:
        self._check_alive()
        layer_id = layer.get("id") or ""
        source_id = layer.get("source") or ""
        if not self.style_loaded:
            raise StyleNotReadyError(f"Style is not done loading; cannot add layer '{layer_id}'")
        if layer_id in self.layer_ids:
            raise DuplicateLayerError(f"There is already a layer with id '{layer_id}'")
        if source_id not in self._sources:
            raise SourceNotRegisteredError(layer_id, source_id)
        self._layers.append(copy.deepcopy(layer))
        self.calls.append(("add_layer", layer_id, source_id))

    def get_layer(self, layer_id: str) -> dict[str, Any] | None:
        for layer in self._layers:
            if layer["id"] == layer_id:
                return layer
        return None

    # --- lifecycle ---------------------------------------------------------

    def remove(self) -> None:
        if self._removed:
            return
        self._removed = True
        self._listeners.clear()
        self._once.clear()
        if not self._load_task.done():
            self._load_task.cancel()

    def to_style(self) -> dict[str, Any]:
        """
        The composed style: base style + registered sources + added layers on top.
        """
        base = copy.deepcopy(self._base_style or {"version": 8, "sources": {}, "layers": []})
        base["sources"] = {**(base.get("sources") or {}), **copy.deepcopy(self._sources)}
        base["layers"] = [*(base.get("layers") or []), *copy.deepcopy(self._layers)]
        base["center"] = list(self.center)
        base["zoom"] = self.zoom
        return base
