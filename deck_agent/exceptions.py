"""Errors raised by the slide document and the agent loop."""

from __future__ import annotations


class SlideDocumentError(Exception):
    """Base class for rejected document mutations."""


class SlideIndexError(SlideDocumentError, IndexError):
    """An index-based operation referenced a slide that does not exist."""

    def __init__(self, index: int) -> None:
        super().__init__(f"Invalid slide index: {index}")
        self.index = index


class MinimumSlidesError(SlideDocumentError):
    """Deleting would leave the presentation without slides."""

    def __init__(self) -> None:
        super().__init__("Cannot delete the only remaining slide")


class TurnInFlightError(RuntimeError):
    """A user turn was submitted while another one is still running."""
