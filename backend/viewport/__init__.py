from .bootstrap import ViewOptions, Viewport

__all__ = ["ViewOptions", "Viewport"]
