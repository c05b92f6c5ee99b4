"""The ordered slide document and the observer interface renderers implement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .exceptions import MinimumSlidesError, SlideIndexError
from .tool_schemas import DEFAULT_THEME, THEMES

LOGGER = logging.getLogger(__name__)


class DocumentObserver(Protocol):
    """Receives change notifications from a :class:`SlideDocument`."""

    def on_slides_changed(self, document: "SlideDocument") -> None:
        """Slides were inserted, edited, removed, moved or replaced."""

    def on_cursor_moved(self, index: int) -> None:
        """The current-slide cursor was moved by the document owner."""


@dataclass(slots=True)
class SlideDocument:
    """Ordered slide contents plus the current-slide cursor.

    Slides are opaque HTML fragments addressed by zero-based index. The cursor
    always names an existing slide while the document is non-empty and is 0
    otherwise.
    """

    slides: List[str] = field(default_factory=list)
    current_index: int = 0
    _observers: List[DocumentObserver] = field(
        default_factory=list, repr=False, compare=False
    )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: DocumentObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: DocumentObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_slides_changed(self) -> None:
        for observer in list(self._observers):
            observer.on_slides_changed(self)

    def _notify_cursor_moved(self) -> None:
        for observer in list(self._observers):
            observer.on_cursor_moved(self.current_index)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_slide(self, content: str, position: Optional[int] = None) -> int:
        """Insert ``content`` at ``position`` or append it.

        Positions outside ``[0, len]`` append. Returns the index the slide
        ended up at; moving the cursor there is left to the caller.
        """

        if position is not None and 0 <= position <= len(self.slides):
            self.slides.insert(position, content)
            inserted_at = position
        else:
            self.slides.append(content)
            inserted_at = len(self.slides) - 1
        LOGGER.debug("Inserted slide at %s (total %s)", inserted_at, len(self.slides))
        self._notify_slides_changed()
        return inserted_at

    def update_slide(self, index: int, content: str) -> None:
        self._require_index(index)
        self.slides[index] = content
        self._notify_slides_changed()

    def delete_slide(self, index: int) -> None:
        """Remove the slide at ``index``.

        The last remaining slide can never be deleted. When the removed slide
        was at or before the cursor, the cursor steps back one slide.
        """

        self._require_index(index)
        if len(self.slides) == 1:
            raise MinimumSlidesError()
        del self.slides[index]
        if index <= self.current_index:
            self.current_index = max(self.current_index - 1, 0)
        self.current_index = min(self.current_index, len(self.slides) - 1)
        self._notify_slides_changed()

    def reorder_slide(self, from_index: int, to_index: int) -> int:
        """Move a slide; ``to_index`` is read against the list without it.

        A target at or past the shortened length moves the slide to the end.
        The cursor follows the moved slide. Returns its new index.
        """

        self._require_index(from_index)
        self._require_index(to_index)
        slide = self.slides.pop(from_index)
        target = min(to_index, len(self.slides))
        self.slides.insert(target, slide)
        self.current_index = target
        self._notify_slides_changed()
        return target

    def replace_all_slides(self, slides: Iterable[str]) -> None:
        self.slides = list(slides)
        self.current_index = 0
        self._notify_slides_changed()

    def clear_all_slides(self) -> None:
        self.replace_all_slides([])

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------
    def navigate_to_slide(self, index: int) -> int:
        """Move the cursor, clamping silently into the valid range."""

        self.current_index = self._clamp(index)
        self._notify_cursor_moved()
        return self.current_index

    def absorb_index_change(self, index: int) -> int:
        """Take over a cursor position reported by the renderer.

        Observers are not notified; the renderer already shows this slide.
        """

        self.current_index = self._clamp(index)
        return self.current_index

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_slide_content(self, index: int) -> Optional[str]:
        if self._valid_index(index):
            return self.slides[index]
        return None

    def get_all_slides(self) -> List[str]:
        return list(self.slides)

    def get_total_slides(self) -> int:
        return len(self.slides)

    def get_current_index(self) -> int:
        return self.current_index if self.slides else 0

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "slides": list(self.slides),
            "current_index": self.get_current_index(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlideDocument":
        document = cls(slides=[str(item) for item in data.get("slides", [])])
        document.current_index = document._clamp(int(data.get("current_index") or 0))
        return document

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _valid_index(self, index: int) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.slides)

    def _require_index(self, index: int) -> None:
        if not self._valid_index(index):
            raise SlideIndexError(index)

    def _clamp(self, index: int) -> int:
        if not self.slides:
            return 0
        return max(0, min(int(index), len(self.slides) - 1))


@dataclass(slots=True)
class PresentationSettings:
    """Cosmetic presentation state kept outside the slide document."""

    theme: str = DEFAULT_THEME

    def change_theme(self, theme: str) -> bool:
        if theme not in THEMES:
            return False
        self.theme = theme
        return True
