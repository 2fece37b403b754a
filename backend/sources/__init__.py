from .registry import SourceDescriptor, SourceRegistry, default_registry

__all__ = [
    "SourceDescriptor",
    "SourceRegistry",
    "default_registry",
]
