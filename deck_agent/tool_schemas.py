"""Declarations of the tools the slide agent exposes to the model.

The definitions here are what gets advertised over either calling convention;
:mod:`deck_agent.tool_arguments` mirrors them with typed argument models.
"""

from __future__ import annotations

from typing import Dict, List, Tuple, get_args

from LLM_API.data_classes import FunctionDefinition

from .tool_arguments import SlideType, ThemeName

THEMES: Tuple[str, ...] = get_args(ThemeName)
DEFAULT_THEME = "black"

SLIDE_TYPES: Tuple[str, ...] = get_args(SlideType)

READ_ONLY_TOOLS = frozenset({"get_all_slides", "get_total_slides"})
DOCUMENT_WRITE_TOOLS = frozenset(
    {
        "replace_all_slides",
        "clear_all_slides",
        "update_slide",
        "delete_slide",
        "add_slide",
    }
)

_THEME_DESCRIPTION = (
    "The theme to apply. Options: black (default - black bg, white text, blue links), "
    "white (white bg, black text, blue links), league (gray bg, white text, blue links), "
    "beige (beige bg, dark text, brown links), night (black bg, thick white text, orange links), "
    "serif (cappuccino bg, gray text, brown links), simple (white bg, black text, blue links), "
    "solarized (cream bg, dark green text, blue links), moon (dark blue bg, thick grey text, blue links), "
    "dracula (dracula color scheme), sky (blue bg, thin dark text, blue links), "
    "blood (dark bg, thick white text, red links)"
)


def _object_schema(properties: Dict[str, dict], required: List[str] | None = None) -> dict:
    schema: dict = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = list(required)
    return schema


TOOL_DEFINITIONS: Tuple[FunctionDefinition, ...] = (
    FunctionDefinition(
        name="get_all_slides",
        description=(
            "Get the HTML content of all slides. ALWAYS use this first to understand "
            "the current presentation before making changes."
        ),
        parameters=_object_schema({}),
    ),
    FunctionDefinition(
        name="get_total_slides",
        description="Get the total number of slides in the presentation.",
        parameters=_object_schema({}),
    ),
    FunctionDefinition(
        name="replace_all_slides",
        description=(
            "Replace the entire presentation with new slides. Use this when you need to "
            "completely restructure or condense a presentation. Read the current slides "
            "with get_all_slides before replacing them."
        ),
        parameters=_object_schema(
            {
                "slides": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Array of HTML content for each slide",
                }
            },
            ["slides"],
        ),
    ),
    FunctionDefinition(
        name="clear_all_slides",
        description=(
            "Remove all slides from the presentation. Use before creating a new "
            "presentation from scratch."
        ),
        parameters=_object_schema({}),
    ),
    FunctionDefinition(
        name="update_slide",
        description="Update the content of a specific slide by index.",
        parameters=_object_schema(
            {
                "index": {
                    "type": "number",
                    "description": "The index of the slide to update (0-based)",
                },
                "content": {
                    "type": "string",
                    "description": "New HTML content for the slide",
                },
            },
            ["index", "content"],
        ),
    ),
    FunctionDefinition(
        name="delete_slide",
        description=(
            "Delete a specific slide by index. The last remaining slide cannot be "
            "deleted; use clear_all_slides to empty the presentation."
        ),
        parameters=_object_schema(
            {
                "index": {
                    "type": "number",
                    "description": "The index of the slide to delete (0-based)",
                }
            },
            ["index"],
        ),
    ),
    FunctionDefinition(
        name="add_slide",
        description=(
            "Add a new slide to the presentation. Supports various content types "
            "including titles, bullet points, code blocks, images, and custom HTML."
        ),
        parameters=_object_schema(
            {
                "content": {
                    "type": "string",
                    "description": (
                        'HTML content for the slide. Examples: "<h1>Title</h1><p>Text</p>", '
                        '"<h2>Topic</h2><ul><li>Point 1</li><li>Point 2</li></ul>", '
                        "\"<pre><code>console.log('Hello')</code></pre>\""
                    ),
                },
                "position": {
                    "type": "number",
                    "description": (
                        "Optional index where to insert the slide (0-based). "
                        "If not provided, adds to the end."
                    ),
                },
                "slideType": {
                    "type": "string",
                    "enum": list(SLIDE_TYPES),
                    "description": "Type of slide to create. Helps with formatting suggestions.",
                },
                "notes": {
                    "type": "string",
                    "description": (
                        "Optional speaker notes for the slide. Will be added as "
                        '<aside class="notes">...</aside>'
                    ),
                },
            },
            ["content"],
        ),
    ),
    FunctionDefinition(
        name="change_theme",
        description=(
            "Change the visual theme of the presentation. Each theme has different "
            "color schemes and typography styles."
        ),
        parameters=_object_schema(
            {
                "theme": {
                    "type": "string",
                    "enum": list(THEMES),
                    "description": _THEME_DESCRIPTION,
                }
            },
            ["theme"],
        ),
    ),
)

_BY_NAME: Dict[str, FunctionDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}


def get_tool_definitions() -> List[FunctionDefinition]:
    """Return the advertised tools in their declaration order."""

    return list(TOOL_DEFINITIONS)


def get_tool_definition(name: str) -> FunctionDefinition:
    try:
        return _BY_NAME[name]
    except KeyError as exc:
        raise KeyError(f"Unknown tool: {name}") from exc


def tool_names() -> List[str]:
    return [tool.name for tool in TOOL_DEFINITIONS]


def is_known_tool(name: str) -> bool:
    return name in _BY_NAME
