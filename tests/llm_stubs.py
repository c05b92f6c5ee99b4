"""Helper stubs for simulating tool-calling LLM interactions in tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from LLM_API.base import CallModel
from LLM_API.data_classes import (
    CallingConvention,
    FunctionCall,
    FunctionCallingRequest,
    FunctionCallingResponse,
    ProviderConfig,
    TextSegment,
)
from LLM_API.exceptions import LLMUnsupportedProtocolError

Script = Union[FunctionCallingResponse, Exception]


def tool_call(name: str, call_id: str = "call_1", **arguments: Any) -> FunctionCall:
    return FunctionCall(
        id=call_id,
        name=name,
        arguments=arguments,
        raw_arguments=json.dumps(arguments),
        call_id=call_id,
    )


def respond(*items: Union[str, FunctionCall], text: str = "") -> FunctionCallingResponse:
    output = [TextSegment(item) if isinstance(item, str) else item for item in items]
    return FunctionCallingResponse(text=text, model_used="stub", output_items=output)


class ScriptedToolLLM(CallModel):
    """LLM stub that replays predefined responses for each request."""

    def __init__(
        self,
        responses: Iterable[Script] = (),
        *,
        chat_responses: Iterable[Script] = (),
        responses_unsupported: bool = False,
        default: Optional[Callable[[FunctionCallingRequest], FunctionCallingResponse]] = None,
    ) -> None:
        self.responses: List[Script] = list(responses)
        self.chat_responses: List[Script] = list(chat_responses)
        self.responses_unsupported = responses_unsupported
        self.default = default
        self.requests: List[FunctionCallingRequest] = []
        self.chat_requests: List[FunctionCallingRequest] = []
        super().__init__(api_key="stub", model_name="stub-tools")

    def setup_client(self) -> None:
        self.client = None

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(provider_name="Stub", model_name="stub-tools")

    # ------------------------------------------------------------------
    # Convention A
    # ------------------------------------------------------------------
    def function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        self.requests.append(request)
        if self.responses_unsupported:
            raise LLMUnsupportedProtocolError(
                message="404 responses endpoint not found",
                provider="Stub",
                error_type="unsupported_protocol",
            )
        return self._next(self.responses, request, CallingConvention.RESPONSES)

    # ------------------------------------------------------------------
    # Convention B
    # ------------------------------------------------------------------
    def chat_function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        self.chat_requests.append(request)
        return self._next(self.chat_responses, request, CallingConvention.CHAT_COMPLETIONS)

    def _next(
        self,
        queue: List[Script],
        request: FunctionCallingRequest,
        convention: CallingConvention,
    ) -> FunctionCallingResponse:
        if queue:
            item = queue.pop(0)
        elif self.default is not None:
            item = self.default(request)
        else:
            raise AssertionError("No scripted responses left for function calling request")
        if isinstance(item, Exception):
            raise item
        item.convention = convention
        return item

    @property
    def total_requests(self) -> int:
        return len(self.requests) + len(self.chat_requests)


def always_text(text: str = "Done.") -> Callable[[FunctionCallingRequest], FunctionCallingResponse]:
    return lambda request: respond(text)


def always_calls(name: str = "get_total_slides", **arguments: Any) -> Callable[
    [FunctionCallingRequest], FunctionCallingResponse
]:
    return lambda request: respond(tool_call(name, **arguments))


def last_system_message(request: FunctionCallingRequest) -> Optional[str]:
    for message in reversed(request.messages):
        if message.role == "system":
            return message.content
    return None


def parse_tool_results(content: str) -> List[Dict[str, Any]]:
    """Decode the ``- name: {json}`` lines of a tool results system turn."""

    results = []
    for line in content.splitlines()[1:]:
        name, _, payload = line[2:].partition(": ")
        results.append({"name": name, **json.loads(payload)})
    return results


__all__ = [
    "ScriptedToolLLM",
    "always_calls",
    "always_text",
    "last_system_message",
    "parse_tool_results",
    "respond",
    "tool_call",
]
