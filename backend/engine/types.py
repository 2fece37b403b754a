from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

# Events consumed by the backend.
STYLE_LOAD = "style.load"
CLICK = "click"
ERROR = "error"

Listener = Callable[[Any], None]


@dataclass(frozen=True)
class LngLat:
    lng: float
    lat: float

    def to_list(self) -> list[float]:
        return [self.lng, self.lat]


@dataclass(frozen=True)
class MapMouseEvent:
    """
    Payload of a `click` event.
    """

    lng_lat: LngLat


class MapEngine(Protocol):
    """
    The subset of the rendering engine the backend relies on.
    """

    @property
    def removed(self) -> bool: ...

    @property
    def style_loaded(self) -> bool: ...

    def on(self, event: str, listener: Listener) -> None: ...

    def once(self, event: str, listener: Listener) -> None: ...

    def off(self, event: str, listener: Listener) -> None: ...

    def add_source(self, source_id: str, source: dict[str, Any]) -> None: ...

    def get_source(self, source_id: str) -> dict[str, Any] | None: ...

    def add_layer(self, layer: dict[str, Any]) -> None: ...

    def remove(self) -> None: ...
