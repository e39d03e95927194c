"""Capture adapters for photos and location."""

from capsync.capture.location import LocationCapture
from capsync.capture.outcome import CaptureOutcome, OutcomeKind
from capsync.capture.photo import PhotoCapture

__all__ = ["CaptureOutcome", "LocationCapture", "OutcomeKind", "PhotoCapture"]
