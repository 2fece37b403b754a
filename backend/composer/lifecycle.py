from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Sequence

from composer.compose import compose
from engine.types import ERROR, STYLE_LOAD, MapEngine
from errors import CompositionTimeoutError, EngineError, RetrievalError, StyleLoadError
from fetch.orchestrator import FetchResult
from layers.types import LayerSpec

logger = logging.getLogger(__name__)


class CompositionState(str, Enum):
    constructed = "constructed"
    awaiting_style = "awaiting_style"
    composing = "composing"
    composed = "composed"
    failed = "failed"
    cancelled = "cancelled"


class Composer:
    """
    Joins "all fetches settled" with "style ready" and composes exactly once.

    The fetch awaitable starts running as soon as the composer is built, in
    parallel with the engine's own style load. `style.load` is turned into a
    one-shot future; repeated notifications are ignored.
    """

    def __init__(
        self,
        instance: MapEngine,
        fetch: Awaitable[list[FetchResult]],
        layers: Sequence[LayerSpec],
        *,
        timeout_s: float | None = None,
    ) -> None:
        self.instance = instance
        self.layers = list(layers)
        self.timeout_s = timeout_s
        self.state = CompositionState.constructed
        self.error: Exception | None = None
        self._cancelled = False
        self._task: asyncio.Task | None = None

        self._fetch: asyncio.Future = asyncio.ensure_future(fetch)
        self._style_ready: asyncio.Future = asyncio.get_running_loop().create_future()
        if instance.style_loaded:
            self._style_ready.set_result(None)
        else:
            instance.on(STYLE_LOAD, self._on_style_load)
            instance.on(ERROR, self._on_style_error)
        self._set_state(CompositionState.awaiting_style)

    def _set_state(self, state: CompositionState) -> None:
        logger.debug("Composition %s -> %s", self.state.value, state.value)
        self.state = state

    def _on_style_load(self, _payload: Any) -> None:
        if self._style_ready.done():
            logger.debug("Ignoring repeated %s notification", STYLE_LOAD)
            return
        self._style_ready.set_result(None)

    def _on_style_error(self, payload: Any) -> None:
        if self._style_ready.done():
            return
        err = StyleLoadError(f"Base style failed to load: {payload}")
        self._style_ready.set_exception(err)

    def _detach(self) -> None:
        self.instance.off(STYLE_LOAD, self._on_style_load)
        self.instance.off(ERROR, self._on_style_error)

    def _fail(self, error: Exception) -> None:
        self.error = error
        self._set_state(CompositionState.failed)

    async def _join(self) -> list[FetchResult]:
        joined = asyncio.gather(self._fetch, self._style_ready)
        if self.timeout_s is None:
            results, _ = await joined
        else:
            results, _ = await asyncio.wait_for(joined, self.timeout_s)
        return results

    async def run(self) -> CompositionState:
        """
        Wait for both fetch completion and style readiness, then compose.

        Retrieval failures, a base style that fails to load and timeouts leave
        the map with its base style only: the error is logged and kept on
        `self.error`. Engine errors raised while composing (a layer without its
        source) propagate.
        """
        try:
            results = await self._join()
        except RetrievalError as e:
            logger.error("Composition skipped, feature retrieval failed: %s", e)
            self._fail(e)
            return self.state
        except StyleLoadError as e:
            # The fetches are useless without a style to put them on.
            self._fetch.cancel()
            logger.error("Composition skipped: %s", e)
            self._fail(e)
            return self.state
        except asyncio.TimeoutError:
            err = CompositionTimeoutError(
                f"Sources or style not ready after {self.timeout_s}s"
            )
            logger.error("Composition skipped: %s", err)
            self._fail(err)
            return self.state
        except asyncio.CancelledError:
            self._set_state(CompositionState.cancelled)
            if self._cancelled:
                return self.state
            raise
        finally:
            self._detach()

        # Results may land after teardown; never apply them to a dead instance.
        if self._cancelled or self.instance.removed:
            logger.info("Discarding fetched sources, map instance is gone")
            self._set_state(CompositionState.cancelled)
            return self.state

        self._set_state(CompositionState.composing)
        try:
            compose(self.instance, results, self.layers)
        except EngineError as e:
            logger.error("Composition failed: %s", e)
            self._fail(e)
            raise
        self._set_state(CompositionState.composed)
        return self.state

    def start(self) -> asyncio.Task:
        """
        Schedule `run()` once; later calls return the same task.
        """
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run(), name="compose")
        return self._task

    def cancel(self) -> None:
        if self._cancelled or self.state in (
            CompositionState.composed,
            CompositionState.failed,
        ):
            return
        self._cancelled = True
        self._detach()
        self._fetch.cancel()
        if not self._style_ready.done():
            self._style_ready.cancel()
        if self._task is None:
            if self._fetch.done() and not self._fetch.cancelled():
                # Mark a failed fetch as retrieved; nobody will await it now.
                self._fetch.exception()
            self._set_state(CompositionState.cancelled)
