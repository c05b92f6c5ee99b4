"""Bounded request / execute / feedback loop for one user turn."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from LLM_API.base import CallModel
from LLM_API.data_classes import ChatMessage, FunctionCall, FunctionCallingResponse
from LLM_API.exceptions import LLMError

from .completion_policy import build_force_write_instruction, should_force_write
from .config import AgentSettings
from .dispatcher import ToolDispatcher, ToolResult
from .exceptions import TurnInFlightError
from .prompts import (
    build_developer_instructions,
    build_fallback_instructions,
    format_tool_results,
)
from .protocol import ProtocolAdapter
from .slide_models import PresentationSettings, SlideDocument
from .tool_schemas import get_tool_definitions

LOGGER = logging.getLogger(__name__)

EXHAUSTED_NOTICE = "Maximum iterations reached. Task may be incomplete."
FORCING_NOTICE = "⚠️ Completing the task..."


class TurnState(Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    EXECUTING = "executing"
    DONE = "done"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class TurnResult:
    """Outcome of :meth:`SlideAgentOrchestrator.run_turn`."""

    state: TurnState
    requests: int = 0
    tool_results: List[ToolResult] = field(default_factory=list)
    messages: List[ChatMessage] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None
    forced_completion: bool = False

    @property
    def completed(self) -> bool:
        return self.state == TurnState.DONE


class SlideAgentOrchestrator:
    """Drive the model against a :class:`SlideDocument` one turn at a time.

    The orchestrator keeps the cross-turn conversation (user and assistant
    text) and a display history that also carries tool annotations. Only one
    turn may run at a time.
    """

    def __init__(
        self,
        model: CallModel,
        document: SlideDocument,
        presentation: Optional[PresentationSettings] = None,
        *,
        max_iterations: int = 10,
        on_message: Optional[Callable[[ChatMessage], None]] = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.document = document
        self.presentation = presentation or PresentationSettings()
        self.dispatcher = ToolDispatcher(document, self.presentation)
        self.adapter = ProtocolAdapter(model)
        self.max_iterations = max_iterations
        self.on_message = on_message
        self.conversation: List[ChatMessage] = []
        self.display_messages: List[ChatMessage] = []
        self.state = TurnState.IDLE
        self._in_flight = False

    @classmethod
    def from_settings(
        cls,
        settings: AgentSettings,
        document: SlideDocument,
        presentation: Optional[PresentationSettings] = None,
        *,
        api_key: Optional[str] = None,
        on_message: Optional[Callable[[ChatMessage], None]] = None,
    ) -> "SlideAgentOrchestrator":
        from LLM_API.providers.openai import OpenAIModel

        model = OpenAIModel(
            api_key=api_key,
            model_name=settings.responses_model,
            chat_model_name=settings.chat_model,
            request_timeout=settings.request_timeout,
            chat_temperature=settings.chat_temperature,
        )
        return cls(
            model,
            document,
            presentation,
            max_iterations=settings.max_iterations,
            on_message=on_message,
        )

    @property
    def busy(self) -> bool:
        return self._in_flight

    def reset_conversation(self) -> None:
        if self._in_flight:
            raise TurnInFlightError("Cannot reset the conversation while a turn is running")
        self.conversation.clear()
        self.display_messages.clear()

    # ------------------------------------------------------------------
    # Turn
    # ------------------------------------------------------------------
    def run_turn(
        self, user_text: str, cancel_event: Optional[threading.Event] = None
    ) -> TurnResult:
        text = (user_text or "").strip()
        if not text:
            raise ValueError("User input must not be empty")
        if self._in_flight:
            raise TurnInFlightError("A turn is already running for this document")

        self._in_flight = True
        try:
            result = self._run(text, cancel_event)
        finally:
            self._in_flight = False
        self.state = result.state
        LOGGER.info(
            "Turn finished: %s after %s request(s), %s tool call(s)",
            result.state.value,
            result.requests,
            len(result.tool_results),
        )
        return result

    def _run(self, text: str, cancel_event: Optional[threading.Event]) -> TurnResult:
        self.adapter.begin_turn()
        result = TurnResult(state=TurnState.IDLE)
        user_message = ChatMessage(role="user", content=text)
        transcript: List[ChatMessage] = [*self.conversation, user_message]
        self.conversation.append(user_message)
        self._surface(result, user_message)

        calls_made: List[str] = []
        iteration = 0
        while iteration < self.max_iterations:
            if cancel_event is not None and cancel_event.is_set():
                return self._finish(result, TurnState.CANCELLED)
            iteration += 1
            LOGGER.info("Iteration %s/%s", iteration, self.max_iterations)

            response = self._request(transcript, result)
            if response is None:
                return result
            calls = self._absorb_output(response, transcript, result)
            if not calls:
                if should_force_write(text, calls_made):
                    return self._force_completion(text, transcript, result, cancel_event)
                return self._finish(result, TurnState.DONE)

            self._execute_batch(calls, transcript, result, calls_made)

        LOGGER.warning("Reached maximum iterations limit (%s)", self.max_iterations)
        self._surface(result, ChatMessage(role="system", content=EXHAUSTED_NOTICE))
        return self._finish(result, TurnState.EXHAUSTED)

    def _force_completion(
        self,
        text: str,
        transcript: List[ChatMessage],
        result: TurnResult,
        cancel_event: Optional[threading.Event],
    ) -> TurnResult:
        """One extra request/execute pass demanding ``replace_all_slides``."""

        LOGGER.warning("Model read slides but did not modify them; forcing completion")
        result.forced_completion = True
        self._surface(result, ChatMessage(role="system", content=FORCING_NOTICE))
        transcript.append(
            ChatMessage(role="system", content=build_force_write_instruction(text))
        )
        if cancel_event is not None and cancel_event.is_set():
            return self._finish(result, TurnState.CANCELLED)

        response = self._request(transcript, result)
        if response is None:
            return result
        calls = self._absorb_output(response, transcript, result)
        if calls:
            self._execute_batch(calls, transcript, result, [])
        return self._finish(result, TurnState.DONE)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _request(
        self, transcript: List[ChatMessage], result: TurnResult
    ) -> Optional[FunctionCallingResponse]:
        self.state = TurnState.REQUESTING
        result.requests += 1
        total = self.document.get_total_slides()
        current = self.document.get_current_index()
        try:
            return self.adapter.request(
                transcript,
                get_tool_definitions(),
                instructions=build_developer_instructions(total, current),
                fallback_instructions=build_fallback_instructions(total, current),
            )
        except LLMError as exc:
            LOGGER.error("Model request failed: %s", exc)
            result.error = exc.message
            result.error_type = exc.error_type
            self._surface(result, ChatMessage(role="system", content=f"Error: {exc.message}"))
            self._finish(result, TurnState.FAILED)
            return None

    def _absorb_output(
        self,
        response: FunctionCallingResponse,
        transcript: List[ChatMessage],
        result: TurnResult,
    ) -> List[FunctionCall]:
        """Surface assistant text; ``response.text`` stands in when no segments came back."""
        for segment in response.text_segments:
            if segment.strip():
                self._add_assistant_text(segment, transcript, result)
        calls = response.function_calls
        if calls:
            LOGGER.info("Model requested: %s", ", ".join(response.function_names))
        elif not response.text_segments and response.text.strip():
            self._add_assistant_text(response.text, transcript, result)
        return calls

    def _execute_batch(
        self,
        calls: List[FunctionCall],
        transcript: List[ChatMessage],
        result: TurnResult,
        calls_made: List[str],
    ) -> None:
        self.state = TurnState.EXECUTING
        lines = []
        for call in calls:
            outcome = self.dispatcher.execute_call(call)
            calls_made.append(call.name)
            result.tool_results.append(outcome)
            lines.append(f"- {outcome.name}: {outcome.to_json()}")
            self._surface(result, ChatMessage(role="system", content=self._annotation(outcome)))
        transcript.append(ChatMessage(role="system", content=format_tool_results(lines)))
        LOGGER.info("Executed %s tool call(s)", len(calls))

    @staticmethod
    def _annotation(outcome: ToolResult) -> str:
        if not outcome.success:
            return f"✗ {outcome.message}"
        if outcome.name == "get_all_slides":
            return f"📖 Read {outcome.payload.get('count', 0)} slides"
        return f"✓ {outcome.message}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _add_assistant_text(
        self, text: str, transcript: List[ChatMessage], result: TurnResult
    ) -> None:
        message = ChatMessage(role="assistant", content=text)
        transcript.append(message)
        self.conversation.append(message)
        self._surface(result, message)

    def _surface(self, result: TurnResult, message: ChatMessage) -> None:
        result.messages.append(message)
        self.display_messages.append(message)
        if self.on_message is not None:
            self.on_message(message)

    def _finish(self, result: TurnResult, state: TurnState) -> TurnResult:
        result.state = state
        self.state = state
        return result


def result_summary(result: TurnResult) -> str:
    """One-line JSON summary of a turn, used in logs and the UI status line."""

    return json.dumps(
        {
            "state": result.state.value,
            "requests": result.requests,
            "tools": [outcome.name for outcome in result.tool_results],
            "error": result.error,
        },
        ensure_ascii=False,
    )
