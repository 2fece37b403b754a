from __future__ import annotations

import logging
from typing import Sequence

from engine.types import MapEngine
from fetch.orchestrator import FetchResult
from layers.types import LayerSpec

logger = logging.getLogger(__name__)


def compose(
    instance: MapEngine,
    results: Sequence[FetchResult],
    layers: Sequence[LayerSpec],
) -> None:
    """
    Register every fetched collection as a geojson source, then stack the layers.

    Must run after `style.load`. All sources go in before the first layer, so
    a layer always finds its source; one that doesn't raises
    `SourceNotRegisteredError` from the engine instead of being skipped.
    """
    for result in results:
        instance.add_source(result.source_id, {"type": "geojson", "data": result.data})

    # Later layers paint on top of earlier ones.
    for spec in layers:
        instance.add_layer(spec.to_engine())

    logger.info(
        "Composed %d sources and %d layers: %s",
        len(results),
        len(layers),
        [spec.id for spec in layers],
    )
