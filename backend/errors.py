from __future__ import annotations


class DistrictMapError(Exception):
    """
    Base class for everything the map pipeline raises on purpose.
    """


class RetrievalError(DistrictMapError):
    """
    One feature document could not be retrieved or parsed.

    Raised once for the whole fetch aggregate; the sibling retrievals are
    cancelled and no partial result is returned.
    """

    def __init__(self, source_id: str, location: str, reason: str) -> None:
        self.source_id = source_id
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to retrieve source '{source_id}' from {location}: {reason}")


class CompositionTimeoutError(DistrictMapError):
    pass


class EngineError(DistrictMapError):
    """
    Rejected call on a map instance.
    """


class StyleNotReadyError(EngineError):
    pass


class StyleLoadError(EngineError):
    pass


class InstanceRemovedError(EngineError):
    pass


class SourceNotRegisteredError(EngineError, LookupError):
    def __init__(self, layer_id: str, source_id: str) -> None:
        self.layer_id = layer_id
        self.source_id = source_id
        super().__init__(
            f"Layer '{layer_id}' references source '{source_id}' which is not registered"
        )


class DuplicateSourceError(EngineError, ValueError):
    pass


class DuplicateLayerError(EngineError, ValueError):
    pass


class RTLPluginError(DistrictMapError):
    pass
