"""Instruction text sent with every model request."""

from __future__ import annotations

import textwrap
from typing import Sequence

from .tool_schemas import DEFAULT_THEME, THEMES, TOOL_DEFINITIONS


def _tool_lines() -> str:
    return "\n".join(
        f"- {tool.name}: {tool.description.split('.')[0]}" for tool in TOOL_DEFINITIONS
    )


def _theme_line(themes: Sequence[str] = THEMES) -> str:
    return ", ".join(
        f"{theme} (default)" if theme == DEFAULT_THEME else theme for theme in themes
    )


def build_developer_instructions(total_slides: int, current_index: int) -> str:
    """Developer instructions for the responses convention.

    Rebuilt before every request so the model sees the deck as it is now.
    """

    return textwrap.dedent(
        f"""\
        # Identity
        You are a presentation slide builder assistant with access to tools for creating and managing slides.

        ## Current Presentation State
        - Total slides: {total_slides}
        - Currently viewing: Slide {current_index + 1} (index: {current_index})

        ## PERSISTENCE AND ITERATIVE TOOL USE
        You are an agent - please keep going until the user's query is completely resolved. You can:
        1. Call tools to inspect the current state (e.g., get_all_slides)
        2. Based on the results, decide what actions to take
        3. Call more tools to modify slides as needed
        4. Continue iterating until the task is complete

        ## TOOL CALLING
        - ALWAYS use get_all_slides first to understand the current presentation before making changes
        - When user says "update this slide" or "edit current slide", use index {current_index}
        - When user asks for multiple slides (e.g., "add 3 slides"), call add_slide multiple times
        - Each slide should be a separate add_slide tool call

        ## PLANNING
        You MUST plan extensively before each function call, and reflect extensively on the outcomes of the previous function calls.

        ## Available Tools
        {{tools}}

        ## Themes
        Available themes: {_theme_line()}

        ## HTML Guidelines
        - Use proper HTML formatting
        - Keep content concise and readable
        - One main idea per slide
        - Use appropriate heading levels (h1 for titles, h2 for slide headers)
        - Add speaker notes with <aside class="notes"> for presenter guidance
        """
    ).replace("{tools}", _tool_lines())


def build_fallback_instructions(total_slides: int, current_index: int) -> str:
    """Shorter system prompt used over chat completions."""

    return textwrap.dedent(
        f"""\
        You are a presentation slide builder assistant.

        Current state: {total_slides} slides, viewing slide {current_index + 1}.

        IMPORTANT: When user asks for multiple slides, call add_slide multiple times.
        Always use get_all_slides first to understand the current presentation."""
    )


def format_tool_results(lines: Sequence[str]) -> str:
    return "Tool execution results:\n" + "\n".join(lines)
