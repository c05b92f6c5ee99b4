"""Runtime settings for the slide agent, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

ENV_PREFIX = "SLIDE_AGENT_"

T = TypeVar("T")


def _read(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} has an invalid value: {raw!r}") from exc


@dataclass(frozen=True)
class AgentSettings:
    responses_model: str = "gpt-4.1"
    chat_model: str = "gpt-4o"
    max_iterations: int = 10
    request_timeout: Optional[float] = 60.0
    chat_temperature: float = 0.7
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(
                f"{ENV_PREFIX}MAX_ITERATIONS must be at least 1, got {self.max_iterations}"
            )

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "AgentSettings":
        """Build settings from ``SLIDE_AGENT_*`` variables (and ``.env``)."""

        if dotenv:
            load_dotenv()
        defaults = cls()
        return cls(
            responses_model=_read("RESPONSES_MODEL", defaults.responses_model, str),
            chat_model=_read("CHAT_MODEL", defaults.chat_model, str),
            max_iterations=_read("MAX_ITERATIONS", defaults.max_iterations, int),
            request_timeout=_read("REQUEST_TIMEOUT", defaults.request_timeout, float),
            chat_temperature=_read("CHAT_TEMPERATURE", defaults.chat_temperature, float),
            log_level=_read("LOG_LEVEL", defaults.log_level, str).upper(),
        )
