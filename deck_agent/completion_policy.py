"""Detect turns where the model only read the deck but was asked to change it."""

from __future__ import annotations

import re
from typing import Iterable

from .tool_schemas import READ_ONLY_TOOLS

REDUCE_PATTERN = re.compile(r"reduce|condense|make it \d+|shorten|\d+ slides", re.IGNORECASE)
CREATE_PATTERN = re.compile(r"create|make.*presentation|build", re.IGNORECASE)
SLIDE_COUNT_PATTERN = re.compile(r"(\d+)\s*slides?", re.IGNORECASE)

DEFAULT_TARGET_SLIDES = 3


def is_reduce_request(intent_text: str) -> bool:
    return bool(REDUCE_PATTERN.search(intent_text or ""))


def is_create_request(intent_text: str) -> bool:
    return bool(CREATE_PATTERN.search(intent_text or ""))


def should_force_write(intent_text: str, calls_made: Iterable[str]) -> bool:
    """Return ``True`` when a write should have followed the reads of this turn.

    ``calls_made`` are the tool names executed so far in the turn. The check
    fires only when at least one call was made, every call was a read, and the
    user's wording asks for the deck to be reduced or created.
    """

    names = list(calls_made)
    if not names or not all(name in READ_ONLY_TOOLS for name in names):
        return False
    return is_reduce_request(intent_text) or is_create_request(intent_text)


def target_slide_count(intent_text: str, default: int = DEFAULT_TARGET_SLIDES) -> int:
    match = SLIDE_COUNT_PATTERN.search(intent_text or "")
    if match is None:
        return default
    return int(match.group(1))


def build_force_write_instruction(intent_text: str) -> str:
    """System instruction demanding an immediate ``replace_all_slides`` call."""

    if is_reduce_request(intent_text):
        count = target_slide_count(intent_text)
        return (
            f"You MUST use replace_all_slides RIGHT NOW with exactly {count} slides. "
            'Example: replace_all_slides(["<h1>Title</h1>", "<h2>Main Points</h2>", '
            '"<h2>Conclusion</h2>"])'
        )
    return "You MUST use replace_all_slides RIGHT NOW with the new presentation slides."

