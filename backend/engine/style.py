from __future__ import annotations

import asyncio
import copy
from typing import Any, Protocol

import httpx

from district.registry import Settings
from district.types import DistrictStyle

# Minimal valid Mapbox GL style: no basemap, just a background.
BLANK_STYLE: dict[str, Any] = {
    "version": 8,
    "name": "blank",
    "sources": {},
    "layers": [
        {"id": "background", "type": "background", "paint": {"background-color": "#f2efe9"}}
    ],
}


class StyleLoader(Protocol):
    async def load(self) -> dict[str, Any]: ...


def _check_style(style: Any, origin: str) -> dict[str, Any]:
    if not isinstance(style, dict) or style.get("version") != 8:
        raise ValueError(f"Not a version 8 style document: {origin}")
    style.setdefault("sources", {})
    style.setdefault("layers", [])
    return style


class StaticStyleLoader:
    """
    Serves an in-memory style document, optionally after a delay.
    """

    def __init__(self, style: dict[str, Any] | None = None, *, delay_s: float = 0.0) -> None:
        self.style = style if style is not None else BLANK_STYLE
        self.delay_s = delay_s

    async def load(self) -> dict[str, Any]:
        if self.delay_s > 0:
            await asyncio.sleep(self.delay_s)
        else:
            # Still yield once: style readiness is never synchronous with construction.
            await asyncio.sleep(0)
        return _check_style(copy.deepcopy(self.style), "inline style")


class HttpStyleLoader:
    """
    Fetches the themed basemap style; the access credential travels as `key`.
    """

    def __init__(
        self,
        url: str,
        *,
        key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_s: float | None = 30.0,
    ) -> None:
        self.url = url
        self.key = key
        self._client = client
        self.timeout_s = timeout_s

    async def load(self) -> dict[str, Any]:
        params = {"key": self.key} if self.key else None
        if self._client is not None:
            resp = await self._client.get(self.url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                resp = await client.get(self.url, params=params)
        resp.raise_for_status()
        return _check_style(resp.json(), self.url)


def style_url_with_key(style: DistrictStyle, settings: Settings) -> str:
    key = settings.style_key or style.key
    if not key:
        return style.url
    return str(httpx.URL(style.url).copy_merge_params({"key": key}))


def style_loader_from_config(style: DistrictStyle, settings: Settings) -> StyleLoader:
    if style.inline is not None:
        return StaticStyleLoader(style.inline)
    if settings.offline_style:
        return StaticStyleLoader()
    return HttpStyleLoader(style.url, key=settings.style_key or style.key)
