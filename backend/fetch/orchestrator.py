from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from errors import RetrievalError
from fetch.retrievers import Retriever
from sources.registry import SourceDescriptor, SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """
    One `(source id, parsed feature document)` pair.

    `data` is passed through as-is; geometry is never inspected here.
    """

    source_id: str
    data: dict[str, Any]


async def _fetch_one(retriever: Retriever, descriptor: SourceDescriptor) -> FetchResult:
    try:
        data = await retriever.retrieve(descriptor.location)
    except RetrievalError:
        raise
    except (httpx.HTTPError, OSError, ValueError) as e:
        # ValueError covers json.JSONDecodeError.
        raise RetrievalError(
            descriptor.id, descriptor.location, str(e) or type(e).__name__
        ) from e
    if not isinstance(data, dict):
        raise RetrievalError(
            descriptor.id,
            descriptor.location,
            f"expected a JSON object, got {type(data).__name__}",
        )
    return FetchResult(source_id=descriptor.id, data=data)


async def _cancel_all(tasks: list[asyncio.Task]) -> None:
    for t in tasks:
        t.cancel()
    # Reap them so no "exception was never retrieved" noise is left behind.
    await asyncio.gather(*tasks, return_exceptions=True)


async def fetch_all(
    registry: SourceRegistry,
    retriever: Retriever,
    *,
    timeout_s: float | None = None,
) -> list[FetchResult]:
    """
    Retrieve every registry entry concurrently and return once all have settled.

    - fan-out: all retrievals are started before any of them is awaited
    - fan-in: results come back in registry order, exactly one per entry
    - the first failure cancels the rest and raises a single `RetrievalError`
    - no retries; `timeout_s` bounds the whole aggregate
    """
    descriptors = registry.descriptors()
    tasks = [
        asyncio.create_task(_fetch_one(retriever, d), name=f"fetch:{d.id}")
        for d in descriptors
    ]
    logger.debug("Fetching %d sources: %s", len(tasks), registry.keys())

    try:
        if timeout_s is None:
            results = await asyncio.gather(*tasks)
        else:
            results = await asyncio.wait_for(asyncio.gather(*tasks), timeout_s)
    except asyncio.TimeoutError:
        pending = [d for d, t in zip(descriptors, tasks) if not t.done() or t.cancelled()]
        await _cancel_all(tasks)
        ids = ", ".join(d.id for d in pending) or "?"
        locations = ", ".join(d.location for d in pending) or "?"
        logger.error("Fetch timed out after %.1fs (pending: %s)", timeout_s, ids)
        raise RetrievalError(ids, locations, f"timed out after {timeout_s}s") from None
    except RetrievalError as e:
        await _cancel_all(tasks)
        logger.error("Fetch failed for source '%s': %s", e.source_id, e.reason)
        raise
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    logger.debug("Fetched %d sources", len(results))
    return list(results)
