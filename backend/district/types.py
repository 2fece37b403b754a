from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from layers.types import LayerSpec


class DistrictCenter(BaseModel):
    lon: float = Field(ge=-180.0, le=180.0)
    lat: float = Field(ge=-90.0, le=90.0)


class DistrictView(BaseModel):
    center: DistrictCenter
    zoom: float = Field(ge=0.0, le=24.0)


class DistrictStyle(BaseModel):
    """
    Themed basemap reference plus the access credential the provider expects.

    `inline` is a full style document used instead of fetching `url`
    (handy offline and in tests).
    """

    url: str
    key: str | None = None
    inline: dict[str, Any] | None = None


class DistrictRTLPlugin(BaseModel):
    url: str
    lazy: bool = False


class DistrictSource(BaseModel):
    id: str
    # Optional explicit location; defaults to `fetch.pattern` formatted with the id.
    path: str | None = None


class DistrictFetch(BaseModel):
    pattern: str = "data/{id}.json"
    timeoutS: float | None = Field(default=None, gt=0.0)


class DistrictConfig(BaseModel):
    id: str
    title: str
    view: DistrictView
    style: DistrictStyle
    rtlTextPlugin: DistrictRTLPlugin | None = None
    sources: list[DistrictSource]
    fetch: DistrictFetch = Field(default_factory=DistrictFetch)
    # Stacking order: later layers paint on top of earlier ones.
    layers: list[LayerSpec]
