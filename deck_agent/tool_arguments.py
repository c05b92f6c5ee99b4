"""Typed argument models, one per tool name.

Arguments coming back from the model are validated here before anything
touches the document. Unknown fields are rejected.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ThemeName = Literal[
    "black",
    "white",
    "league",
    "beige",
    "night",
    "serif",
    "simple",
    "solarized",
    "moon",
    "dracula",
    "sky",
    "blood",
]

SlideType = Literal["title", "content", "bullets", "code", "image", "two-column", "custom"]


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class GetAllSlidesArguments(ToolArguments):
    pass


class GetTotalSlidesArguments(ToolArguments):
    pass


class ClearAllSlidesArguments(ToolArguments):
    pass


class ReplaceAllSlidesArguments(ToolArguments):
    slides: List[str] = Field(description="Array of HTML content for each slide")


class UpdateSlideArguments(ToolArguments):
    index: int = Field(description="The index of the slide to update (0-based)")
    content: str = Field(description="New HTML content for the slide")


class DeleteSlideArguments(ToolArguments):
    index: int = Field(description="The index of the slide to delete (0-based)")


class AddSlideArguments(ToolArguments):
    content: str = Field(description="HTML content for the slide")
    position: Optional[int] = Field(default=None, description="Insert position (0-based)")
    slide_type: Optional[SlideType] = Field(default=None, alias="slideType")
    notes: Optional[str] = Field(default=None, description="Speaker notes")

    def slide_html(self) -> str:
        """Slide content with the speaker notes appended, if any."""

        if self.notes:
            return f'{self.content}\n<aside class="notes">{self.notes}</aside>'
        return self.content


class ChangeThemeArguments(ToolArguments):
    theme: ThemeName


ARGUMENT_MODELS: Dict[str, Type[ToolArguments]] = {
    "get_all_slides": GetAllSlidesArguments,
    "get_total_slides": GetTotalSlidesArguments,
    "replace_all_slides": ReplaceAllSlidesArguments,
    "clear_all_slides": ClearAllSlidesArguments,
    "update_slide": UpdateSlideArguments,
    "delete_slide": DeleteSlideArguments,
    "add_slide": AddSlideArguments,
    "change_theme": ChangeThemeArguments,
}


def parse_tool_arguments(name: str, arguments: Optional[Dict[str, Any]]) -> ToolArguments:
    """Validate ``arguments`` for tool ``name``.

    Raises ``KeyError`` for an unknown tool and ``pydantic.ValidationError``
    for arguments that do not fit the tool's model.
    """

    try:
        model = ARGUMENT_MODELS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown tool: {name}") from exc
    return model.model_validate(arguments or {})


def describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)
