from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from composer.lifecycle import Composer, CompositionState
from district.registry import Settings
from district.types import DistrictConfig
from engine.style import StyleLoader, style_url_with_key
from engine.style_map import StyleMap
from engine.types import CLICK, LngLat, MapMouseEvent
from fetch.orchestrator import fetch_all
from fetch.retrievers import Retriever
from interaction.click import ClickRecorder
from layers.types import LayerSpec
from sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewOptions:
    center: tuple[float, float]  # (lng, lat)
    zoom: float
    style_url: str

    @classmethod
    def from_district(cls, cfg: DistrictConfig, settings: Settings) -> "ViewOptions":
        return cls(
            center=(cfg.view.center.lon, cfg.view.center.lat),
            zoom=cfg.view.zoom,
            style_url=style_url_with_key(cfg.style, settings),
        )


class Viewport:
    """
    Owns the single live map instance and everything tied to its lifetime.

    `mount()` starts the feature fetches, constructs the instance (its style
    starts loading in the background), attaches the click recorder and
    schedules composition. `unmount()` undoes all of it. The composer and
    click recorder only ever borrow the instance.
    """

    def __init__(
        self,
        container: Any,
        options: ViewOptions,
        *,
        registry: SourceRegistry,
        retriever: Retriever,
        layers: Sequence[LayerSpec],
        style_loader: StyleLoader,
        fetch_timeout_s: float | None = None,
        compose_timeout_s: float | None = None,
    ) -> None:
        self.container = container
        self.options = options
        self.registry = registry
        self.retriever = retriever
        self.layers = list(layers)
        self.style_loader = style_loader
        self.fetch_timeout_s = fetch_timeout_s
        self.compose_timeout_s = compose_timeout_s
        self._instance: StyleMap | None = None
        self._composer: Composer | None = None
        self._compose_task: asyncio.Task | None = None
        self._recorder: ClickRecorder | None = None

    @property
    def instance(self) -> StyleMap | None:
        return self._instance

    @property
    def composer(self) -> Composer | None:
        return self._composer

    @property
    def clicks(self) -> list[LngLat]:
        return self._recorder.clicks if self._recorder is not None else []

    async def mount(self) -> StyleMap | None:
        if not self.container:
            # Not attached yet; the next mount attempt will try again.
            logger.debug("Map container not available, skipping mount")
            return None
        if self._instance is not None:
            return self._instance

        # Fetches start first so they overlap with the style load.
        fetch = asyncio.ensure_future(
            fetch_all(self.registry, self.retriever, timeout_s=self.fetch_timeout_s)
        )
        instance = StyleMap(
            container=self.container,
            style_loader=self.style_loader,
            center=self.options.center,
            zoom=self.options.zoom,
        )
        self._instance = instance
        self._recorder = ClickRecorder().attach(instance)
        self._composer = Composer(
            instance, fetch, self.layers, timeout_s=self.compose_timeout_s
        )
        self._compose_task = self._composer.start()
        self._compose_task.add_done_callback(self._on_compose_done)
        logger.info(
            "Map mounted at %s zoom %s (%d sources, %d layers)",
            self.options.center,
            self.options.zoom,
            len(self.registry),
            len(self.layers),
        )
        return instance

    @staticmethod
    def _on_compose_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            logger.error("Map composition raised", exc_info=err)

    async def wait_composed(self) -> CompositionState:
        """
        Await the composition task; engine errors raised while composing propagate.
        """
        if self._compose_task is None:
            raise RuntimeError("Viewport is not mounted")
        return await self._compose_task

    async def unmount(self) -> None:
        composer, task = self._composer, self._compose_task
        recorder, instance = self._recorder, self._instance
        self._composer = self._compose_task = None
        self._recorder = self._instance = None

        if composer is not None:
            composer.cancel()
        if recorder is not None:
            recorder.detach()
        if instance is not None:
            instance.remove()
        if task is not None:
            # Failures were already reported by the done callback.
            await asyncio.gather(task, return_exceptions=True)
        if instance is not None:
            logger.info("Map unmounted")

    def click(self, lng: float, lat: float) -> LngLat:
        """
        Deliver a pointer click to the live instance.
        """
        if self._instance is None:
            raise RuntimeError("No live map instance")
        lng_lat = LngLat(lng=lng, lat=lat)
        self._instance.fire(CLICK, MapMouseEvent(lng_lat=lng_lat))
        return lng_lat

    def status(self) -> dict[str, Any]:
        instance, composer = self._instance, self._composer
        error = composer.error if composer is not None else None
        return {
            "mounted": instance is not None,
            "state": composer.state.value if composer is not None else None,
            "styleLoaded": bool(instance and instance.style_loaded),
            "sources": instance.source_ids if instance is not None else [],
            "layers": instance.layer_ids if instance is not None else [],
            "error": str(error) if error is not None else None,
            "clicks": len(self.clicks),
        }
