from __future__ import annotations

from district.registry import get_district
from layers.types import STACKING_RANK, LayerSpec
from sources.registry import SourceRegistry


def check_layer_plan(layers: list[LayerSpec], registry: SourceRegistry) -> None:
    """
    Reject a layer stack that could not be composed as configured.

    - layer ids are unique
    - every layer's source is a registry entry
    - painter's order: fills below lines below circles
    """
    seen: set[str] = set()
    last_rank = -1
    last_id = ""
    for spec in layers:
        if spec.id in seen:
            raise ValueError(f"Duplicate layer id: {spec.id}")
        seen.add(spec.id)
        if spec.source not in registry:
            raise ValueError(f"Layer '{spec.id}' references unknown source '{spec.source}'")
        rank = STACKING_RANK[spec.type]
        if rank < last_rank:
            raise ValueError(
                f"Layer '{spec.id}' ({spec.type}) would be drawn above '{last_id}'; "
                "order layers fill -> line -> circle"
            )
        last_rank, last_id = rank, spec.id


def default_layers() -> list[LayerSpec]:
    return list(get_district().layers)
