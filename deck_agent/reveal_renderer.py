"""reveal.js view of a :class:`SlideDocument` kept in sync through observers."""

from __future__ import annotations

import logging
from typing import List, Optional

from jinja2 import Template

from .slide_models import PresentationSettings, SlideDocument

LOGGER = logging.getLogger(__name__)

REVEAL_CDN = "https://cdn.jsdelivr.net/npm/reveal.js@{version}"
EMPTY_SLIDE = "<h2>No slides yet</h2><p>Ask the assistant to create a presentation.</p>"

_PAGE_TEMPLATE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <link rel="stylesheet" href="{{ cdn }}/dist/reveal.css">
  <link rel="stylesheet" href="{{ cdn }}/dist/theme/{{ theme }}.css" id="theme">
  <link rel="stylesheet" href="{{ cdn }}/plugin/highlight/monokai.css">
</head>
<body>
  <div class="reveal">
    <div class="slides">
{% for slide in slides %}      <section>{{ slide }}</section>
{% endfor %}    </div>
  </div>
  <script src="{{ cdn }}/dist/reveal.js"></script>
  <script src="{{ cdn }}/plugin/notes/notes.js"></script>
  <script src="{{ cdn }}/plugin/highlight/highlight.js"></script>
  <script>
    Reveal.initialize({
      hash: false,
      embedded: true,
      plugins: [RevealNotes, RevealHighlight]
    }).then(function () {
      Reveal.slide({{ current_index }});
    });
  </script>
</body>
</html>
"""


class RevealRenderer:
    """Renderer side of the document / renderer contract.

    Subscribes to the document on construction. ``resync`` re-reads the deck.
    The rendered page is display only; navigation comes back through
    ``index_changed``, which the app drives from its slide number input.
    """

    def __init__(
        self,
        document: SlideDocument,
        presentation: Optional[PresentationSettings] = None,
        *,
        reveal_version: str = "5.1.0",
    ) -> None:
        self.document = document
        self.presentation = presentation or PresentationSettings()
        self.cdn = REVEAL_CDN.format(version=reveal_version)
        self.slides: List[str] = []
        self.current_index = 0
        self.revision = 0
        self._template = Template(_PAGE_TEMPLATE)
        document.subscribe(self)
        self.resync()

    # DocumentObserver
    def on_slides_changed(self, document: SlideDocument) -> None:
        self.resync()

    def on_cursor_moved(self, index: int) -> None:
        self.current_index = index

    def resync(self) -> None:
        self.slides = self.document.get_all_slides()
        self.current_index = self.document.get_current_index()
        self.revision += 1
        LOGGER.debug("Renderer resynced: %s slides, revision %s", len(self.slides), self.revision)

    def index_changed(self, index: int) -> int:
        self.current_index = self.document.absorb_index_change(index)
        return self.current_index

    def close(self) -> None:
        self.document.unsubscribe(self)

    def render_html(self) -> str:
        slides = self.slides or [EMPTY_SLIDE]
        return self._template.render(
            cdn=self.cdn,
            theme=self.presentation.theme,
            slides=slides,
            current_index=min(self.current_index, len(slides) - 1),
        )
