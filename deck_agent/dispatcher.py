"""Execute model-issued tool calls against the slide document."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from LLM_API.data_classes import FunctionCall

from .exceptions import SlideDocumentError
from .slide_models import PresentationSettings, SlideDocument
from .tool_arguments import (
    AddSlideArguments,
    ChangeThemeArguments,
    DeleteSlideArguments,
    ReplaceAllSlidesArguments,
    ToolArguments,
    UpdateSlideArguments,
    describe_validation_error,
    parse_tool_arguments,
)
from .tool_schemas import is_known_tool

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolResult:
    """Uniform result envelope for a single tool call."""

    name: str
    success: bool
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message}
        data.update(self.payload)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


class ToolDispatcher:
    """Map ``(tool name, arguments)`` onto document operations.

    Every call is applied immediately; indices are checked against the
    document as it is at call time.
    """

    def __init__(
        self,
        document: SlideDocument,
        settings: Optional[PresentationSettings] = None,
    ) -> None:
        self.document = document
        self.settings = settings or PresentationSettings()
        self._handlers: Dict[str, Callable[[Any], ToolResult]] = {
            "get_all_slides": self._get_all_slides,
            "get_total_slides": self._get_total_slides,
            "replace_all_slides": self._replace_all_slides,
            "clear_all_slides": self._clear_all_slides,
            "update_slide": self._update_slide,
            "delete_slide": self._delete_slide,
            "add_slide": self._add_slide,
            "change_theme": self._change_theme,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def execute_call(self, call: FunctionCall) -> ToolResult:
        if call.arguments is None:
            message = call.decode_error or "Could not decode tool arguments"
            LOGGER.info("Rejected %s: %s", call.name, message)
            return ToolResult(call.name, False, message)
        return self.execute(call.name, call.arguments)

    def execute(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        if not is_known_tool(name) or name not in self._handlers:
            LOGGER.warning("Model requested unknown tool %r", name)
            return ToolResult(name, False, f"Unknown tool: {name}")

        try:
            parsed = parse_tool_arguments(name, arguments)
        except ValidationError as exc:
            detail = describe_validation_error(exc)
            LOGGER.info("Invalid arguments for %s: %s", name, detail)
            return ToolResult(name, False, f"Invalid arguments for {name}: {detail}")

        try:
            result = self._handlers[name](parsed)
        except SlideDocumentError as exc:
            result = ToolResult(name, False, str(exc))
        LOGGER.info("Tool %s -> %s", name, "ok" if result.success else result.message)
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _get_all_slides(self, _: ToolArguments) -> ToolResult:
        slides = self.document.get_all_slides()
        return ToolResult(
            "get_all_slides",
            True,
            f"Read {len(slides)} slides",
            {"slides": slides, "count": len(slides)},
        )

    def _get_total_slides(self, _: ToolArguments) -> ToolResult:
        total = self.document.get_total_slides()
        return ToolResult(
            "get_total_slides",
            True,
            f"Presentation has {total} slides",
            {"total": total},
        )

    def _replace_all_slides(self, args: ReplaceAllSlidesArguments) -> ToolResult:
        self.document.replace_all_slides(args.slides)
        return ToolResult(
            "replace_all_slides",
            True,
            f"Replaced presentation with {len(args.slides)} slides",
            {"count": len(args.slides)},
        )

    def _clear_all_slides(self, _: ToolArguments) -> ToolResult:
        self.document.clear_all_slides()
        return ToolResult("clear_all_slides", True, "All slides cleared")

    def _update_slide(self, args: UpdateSlideArguments) -> ToolResult:
        self.document.update_slide(args.index, args.content)
        return ToolResult("update_slide", True, f"Slide {args.index} updated")

    def _delete_slide(self, args: DeleteSlideArguments) -> ToolResult:
        self.document.delete_slide(args.index)
        return ToolResult(
            "delete_slide",
            True,
            f"Slide {args.index} deleted",
            {"total": self.document.get_total_slides()},
        )

    def _add_slide(self, args: AddSlideArguments) -> ToolResult:
        inserted_at = self.document.add_slide(args.slide_html(), args.position)
        self.document.navigate_to_slide(inserted_at)
        position = args.position if args.position is not None else "end"
        return ToolResult(
            "add_slide",
            True,
            f"Slide added at position: {position}",
            {"slideType": args.slide_type or "custom", "index": inserted_at},
        )

    def _change_theme(self, args: ChangeThemeArguments) -> ToolResult:
        if self.settings.change_theme(args.theme):
            return ToolResult("change_theme", True, f"Theme changed to: {args.theme}")
        return ToolResult("change_theme", False, f"Failed to change theme to: {args.theme}")
