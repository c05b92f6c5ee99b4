"""Pick the upstream calling convention for a turn and stick with it."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from LLM_API.base import CallModel
from LLM_API.data_classes import (
    CallingConvention,
    ChatMessage,
    FunctionCallingRequest,
    FunctionCallingResponse,
    FunctionDefinition,
    create_function_calling_request,
)
from LLM_API.exceptions import LLMUnsupportedProtocolError

LOGGER = logging.getLogger(__name__)


class ProtocolAdapter:
    """Send requests over the responses convention, falling back to chat.

    The first request of a turn tries the multi-item responses convention.
    If the provider reports it as unsupported, the same request is sent once
    over chat completions and every later request of that turn goes there
    directly. Any chat-completions failure propagates.
    """

    def __init__(self, model: CallModel) -> None:
        self.model = model
        self.convention = CallingConvention.RESPONSES
        self.fallback_count = 0

    def begin_turn(self) -> None:
        self.convention = CallingConvention.RESPONSES
        self.fallback_count = 0

    @property
    def using_fallback(self) -> bool:
        return self.convention == CallingConvention.CHAT_COMPLETIONS

    def request(
        self,
        messages: Sequence[ChatMessage],
        functions: Sequence[FunctionDefinition],
        *,
        instructions: Optional[str] = None,
        fallback_instructions: Optional[str] = None,
    ) -> FunctionCallingResponse:
        if self.convention == CallingConvention.RESPONSES:
            request = self._build_request(messages, functions, instructions)
            try:
                return self.model.function_calling(request)
            except LLMUnsupportedProtocolError as exc:
                LOGGER.info(
                    "Responses convention unavailable (%s); switching to chat completions",
                    exc.message,
                )
                self.convention = CallingConvention.CHAT_COMPLETIONS
                self.fallback_count += 1

        request = self._build_request(
            messages, functions, fallback_instructions or instructions
        )
        return self.model.chat_function_calling(request)

    @staticmethod
    def _build_request(
        messages: Sequence[ChatMessage],
        functions: Sequence[FunctionDefinition],
        instructions: Optional[str],
    ) -> FunctionCallingRequest:
        history: List[ChatMessage] = [
            ChatMessage(role=message.role, content=message.content) for message in messages
        ]
        return create_function_calling_request(history, functions, instructions=instructions)
