"""Engine module for the application controller."""

from capsync.engine.controller import CaptureController

__all__ = ["CaptureController"]
