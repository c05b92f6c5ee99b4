"""Utilities for reading and writing deck snapshots as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Tuple

from .slide_models import PresentationSettings, SlideDocument
from .tool_schemas import THEMES


class SlideDocumentStore:
    """Persist a `SlideDocument` plus its theme as ``{slides, current_index, theme}``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    # I/O helpers
    # ------------------------------------------------------------------
    def load(self) -> Tuple[SlideDocument, PresentationSettings]:
        if not self.path.exists():
            raise FileNotFoundError(f"Deck snapshot not found at {self.path}")
        return self.loads(self.path.read_text(encoding="utf-8"))

    def save(self, document: SlideDocument, presentation: PresentationSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.dumps(document, presentation), encoding="utf-8")

    # ------------------------------------------------------------------
    # String helpers (used for UI upload / download)
    # ------------------------------------------------------------------
    @staticmethod
    def dumps(document: SlideDocument, presentation: PresentationSettings) -> str:
        payload = document.to_dict()
        payload["theme"] = presentation.theme
        return json.dumps(payload, ensure_ascii=False, indent=2)

    @staticmethod
    def loads(text: str) -> Tuple[SlideDocument, PresentationSettings]:
        data = json.loads(text)
        if not isinstance(data, dict) or not isinstance(data.get("slides", []), list):
            raise ValueError("Deck snapshot must be an object with a 'slides' list")
        index = data.get("current_index", 0)
        if not isinstance(index, int) or isinstance(index, bool):
            raise ValueError(f"Slide index in deck snapshot must be an integer: {index!r}")
        theme = data.get("theme", PresentationSettings().theme)
        if theme not in THEMES:
            raise ValueError(f"Unknown theme in deck snapshot: {theme}")
        return SlideDocument.from_dict(data), PresentationSettings(theme=theme)
