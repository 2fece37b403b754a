from .compose import compose
from .lifecycle import CompositionState, Composer

__all__ = [
    "Composer",
    "CompositionState",
    "compose",
]
