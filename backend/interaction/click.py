from __future__ import annotations

import logging
from collections import deque
from typing import Any

from engine.types import CLICK, LngLat, MapEngine, MapMouseEvent

logger = logging.getLogger(__name__)


class ClickRecorder:
    """
    Records the geographic coordinate of every click on one map instance.

    Attach/detach are paired: use it as a context manager, or call `detach()`
    on teardown. The listener is always removed from the instance it was
    attached to, even if the caller has moved on to another one.
    """

    def __init__(self, *, max_events: int = 1_000) -> None:
        self._events: deque[LngLat] = deque(maxlen=max_events)
        self._instance: MapEngine | None = None

    @property
    def attached(self) -> bool:
        return self._instance is not None

    @property
    def clicks(self) -> list[LngLat]:
        return list(self._events)

    def _handle_click(self, event: Any) -> None:
        lng_lat = event.lng_lat if isinstance(event, MapMouseEvent) else event
        if not isinstance(lng_lat, LngLat):
            logger.warning("Ignoring click without coordinates: %r", event)
            return
        self._events.append(lng_lat)
        logger.info("Map click at lng=%s lat=%s", lng_lat.lng, lng_lat.lat)

    def attach(self, instance: MapEngine) -> "ClickRecorder":
        if self._instance is not None:
            raise RuntimeError("ClickRecorder is already attached to a map instance")
        instance.on(CLICK, self._handle_click)
        self._instance = instance
        return self

    def detach(self) -> None:
        instance, self._instance = self._instance, None
        if instance is not None:
            instance.off(CLICK, self._handle_click)

    def __enter__(self) -> "ClickRecorder":
        if self._instance is None:
            raise RuntimeError("Call attach(instance) before entering the context")
        return self

    def __exit__(self, *exc: object) -> None:
        self.detach()
