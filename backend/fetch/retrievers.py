from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Protocol

import httpx

from district.registry import Settings, repo_root


class Retriever(Protocol):
    """
    Fetches the raw document stored at a registry location.

    Implementations raise on transport errors, non-success statuses and
    unparsable JSON; the orchestrator turns those into a `RetrievalError`.
    """

    async def retrieve(self, location: str) -> Any: ...

    async def aclose(self) -> None: ...


class HttpRetriever:
    """
    GETs locations relative to the client's `base_url`.
    """

    def __init__(self, client: httpx.AsyncClient, *, owns_client: bool = False) -> None:
        self.client = client
        self._owns_client = owns_client

    @classmethod
    def from_base_url(cls, base_url: str, *, timeout_s: float | None = None) -> "HttpRetriever":
        client = httpx.AsyncClient(base_url=base_url, timeout=timeout_s)
        return cls(client, owns_client=True)

    async def retrieve(self, location: str) -> Any:
        resp = await self.client.get(location)
        resp.raise_for_status()
        return resp.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


class FileRetriever:
    """
    Reads locations as paths under `root` (leading `/` ignored).
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, location: str) -> Path:
        return self.root / (location or "").lstrip("/")

    async def retrieve(self, location: str) -> Any:
        # Keep file IO off the event loop so the style load keeps progressing.
        return await asyncio.to_thread(_read_json, self.path_for(location))

    async def aclose(self) -> None:
        return None


def retriever_from_settings(settings: Settings) -> Retriever:
    if settings.data_base_url:
        return HttpRetriever.from_base_url(
            settings.data_base_url, timeout_s=settings.fetch_timeout_s
        )
    return FileRetriever(repo_root())
