from .click import ClickRecorder

__all__ = ["ClickRecorder"]
