from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from district.registry import get_district

# Source names end up as engine source ids and in `data/<id>.json` paths.
_SOURCE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

DEFAULT_LOCATION_PATTERN = "data/{id}.json"


@dataclass(frozen=True)
class SourceDescriptor:
    id: str
    location: str


class SourceRegistry:
    """
    Static, ordered mapping from logical source id to retrieval location.

    The id is both the fetch key and the name the source is registered under
    on the map instance, so ids must be unique and engine-safe.
    """

    def __init__(self, entries: Iterable[tuple[str, str]]) -> None:
        descriptors: dict[str, SourceDescriptor] = {}
        for sid, location in entries:
            if not isinstance(sid, str) or not _SOURCE_ID_RE.match(sid):
                raise ValueError(f"Invalid source id: {sid!r}")
            if sid in descriptors:
                raise ValueError(f"Duplicate source id: {sid}")
            if not location:
                raise ValueError(f"Source '{sid}' has an empty location")
            descriptors[sid] = SourceDescriptor(id=sid, location=location)
        self._descriptors = descriptors

    @classmethod
    def from_ids(
        cls, ids: Iterable[str], *, pattern: str = DEFAULT_LOCATION_PATTERN
    ) -> "SourceRegistry":
        return cls((sid, pattern.format(id=sid)) for sid in ids)

    def keys(self) -> list[str]:
        return list(self._descriptors.keys())

    def location_of(self, source_id: str) -> str:
        try:
            return self._descriptors[source_id].location
        except KeyError:
            raise KeyError(f"Unknown source id: {source_id}") from None

    def descriptors(self) -> list[SourceDescriptor]:
        return list(self._descriptors.values())

    def __iter__(self) -> Iterator[SourceDescriptor]:
        return iter(self.descriptors())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._descriptors

    def __repr__(self) -> str:
        return f"SourceRegistry({self.keys()!r})"


def default_registry() -> SourceRegistry:
    cfg = get_district()
    pattern = cfg.fetch.pattern
    return SourceRegistry(
        (src.id, src.path or pattern.format(id=src.id)) for src in cfg.sources
    )
