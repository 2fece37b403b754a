from __future__ import annotations

import asyncio
import copy
from typing import Any, Callable

from engine.style import BLANK_STYLE
from layers.types import parse_layer_spec
from sources.registry import SourceRegistry

AREA = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "area"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [
                    [[51.38, 35.70], [51.43, 35.70], [51.43, 35.74], [51.38, 35.74], [51.38, 35.70]]
                ],
            },
        }
    ],
}
STREETS = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "Valiasr"},
            "geometry": {"type": "LineString", "coordinates": [[51.407, 35.70], [51.408, 35.74]]},
        }
    ],
}
POINTS = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "r1"},
            "geometry": {"type": "Point", "coordinates": [51.402, 35.725]},
        },
        {
            "type": "Feature",
            "properties": {"name": "r2"},
            "geometry": {"type": "Point", "coordinates": [51.411, 35.719]},
        },
    ],
}

DOCS_BY_ID: dict[str, dict[str, Any]] = {"area": AREA, "streets": STREETS, "points": POINTS}


def make_registry() -> SourceRegistry:
    return SourceRegistry.from_ids(["area", "streets", "points"])


def docs_by_location() -> dict[str, Any]:
    return {f"data/{sid}.json": doc for sid, doc in DOCS_BY_ID.items()}


def make_layers():
    return [
        parse_layer_spec(
            {
                "id": "area",
                "type": "fill",
                "source": "area",
                "paint": {"fill-opacity": 0.25, "fill-color": "#014a4f"},
            }
        ),
        parse_layer_spec(
            {
                "id": "area-outline",
                "type": "line",
                "source": "area",
                "paint": {"line-width": 2, "line-color": "#003134"},
            }
        ),
        parse_layer_spec(
            {
                "id": "street",
                "type": "line",
                "source": "streets",
                "paint": {"line-width": 4, "line-color": "#3e570a"},
            }
        ),
        parse_layer_spec(
            {
                "id": "restaurant",
                "type": "circle",
                "source": "points",
                "paint": {"circle-radius": 10, "circle-opacity": 0.5, "circle-color": "#ff1515"},
            }
        ),
    ]


class DictRetriever:
    """
    Serves documents from a dict keyed by location.

    `gates` hold a retrieval until the event is set; `errors` make it raise.
    """

    def __init__(
        self,
        docs: dict[str, Any],
        *,
        gates: dict[str, asyncio.Event] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.docs = docs
        self.gates = gates or {}
        self.errors = errors or {}
        self.started: list[str] = []
        self.finished: list[str] = []

    async def retrieve(self, location: str) -> Any:
        self.started.append(location)
        gate = self.gates.get(location)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if location in self.errors:
            raise self.errors[location]
        if location not in self.docs:
            raise FileNotFoundError(location)
        self.finished.append(location)
        return copy.deepcopy(self.docs[location])

    async def aclose(self) -> None:
        return None


class GatedStyleLoader:
    def __init__(self, gate: asyncio.Event | None = None) -> None:
        self.gate = gate

    async def load(self) -> dict[str, Any]:
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        return copy.deepcopy(BLANK_STYLE)


class FailingStyleLoader:
    def __init__(self, reason: str = "401 bad key") -> None:
        self.reason = reason

    async def load(self) -> dict[str, Any]:
        await asyncio.sleep(0)
        raise ValueError(self.reason)


async def until(pred: Callable[[], bool], *, limit: int = 200) -> None:
    for _ in range(limit):
        if pred():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
