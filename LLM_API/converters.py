import json
from typing import Dict, Any, List, Optional, Tuple
from .data_classes import (
    ChatMessage, FunctionCall, FunctionDefinition, OutputItem, TextSegment
)

RESPONSES_TOOL_CALL_TYPES = ("function_call", "custom_tool_call", "tool_call")


def _field(item: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an SDK object or a plain dict."""
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def decode_arguments(raw: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Decode a pre-serialised arguments payload.

    Returns ``(arguments, None)`` on success and ``(None, reason)`` when the
    payload is not a JSON object.
    """
    if raw is None or raw == "":
        return {}, None
    if isinstance(raw, dict):
        return dict(raw), None
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        return None, f"Could not decode tool arguments: {exc}"
    if not isinstance(decoded, dict):
        return None, "Tool arguments must be a JSON object"
    return decoded, None


class OpenAIConverter:
    """Convert data classes to and from the two OpenAI calling conventions"""

    # ------------------------------------------------------------------
    # Request side
    # ------------------------------------------------------------------
    @staticmethod
    def convert_messages(messages: List[ChatMessage]) -> List[Dict[str, str]]:
        return [message.to_dict() for message in messages]

    @staticmethod
    def convert_function_definitions_for_responses(
        functions: List[FunctionDefinition]
    ) -> List[Dict[str, Any]]:
        """Flat tool format used by the responses endpoint"""
        return [
            {
                "type": "function",
                "name": func.name,
                "description": func.description,
                "parameters": func.parameters,
                "strict": func.strict
            }
            for func in functions
        ]

    @staticmethod
    def convert_function_definitions_for_chat(
        functions: List[FunctionDefinition]
    ) -> List[Dict[str, Any]]:
        """Nested tool format used by the chat completions endpoint"""
        return [
            {
                "type": "function",
                "function": {
                    "name": func.name,
                    "description": func.description,
                    "parameters": func.parameters,
                    "strict": func.strict
                }
            }
            for func in functions
        ]

    # ------------------------------------------------------------------
    # Response side
    # ------------------------------------------------------------------
    @staticmethod
    def normalize_responses_output(response: Any) -> List[OutputItem]:
        """Flatten the heterogeneous ``output`` list into ordered items."""
        items: List[OutputItem] = []
        for output_item in _field(response, "output", None) or []:
            item_type = _field(output_item, "type", "")
            if item_type == "message":
                for part in _field(output_item, "content", None) or []:
                    if _field(part, "type", "") in ("output_text", "text"):
                        text = _field(part, "text", "")
                        if text:
                            items.append(TextSegment(text=text))
            elif item_type == "text":
                text = _field(output_item, "text", None) or _field(output_item, "content", "")
                if isinstance(text, str) and text:
                    items.append(TextSegment(text=text))
            elif item_type in RESPONSES_TOOL_CALL_TYPES:
                function = _field(output_item, "function", None)
                name = _field(output_item, "name", None) or _field(function, "name", "")
                raw = _field(output_item, "arguments", None)
                if raw is None:
                    raw = _field(output_item, "input", None)
                if raw is None and function is not None:
                    raw = _field(function, "arguments", None)
                arguments, error = decode_arguments(raw)
                items.append(FunctionCall(
                    id=_field(output_item, "id", "") or "",
                    call_id=_field(output_item, "call_id", None),
                    name=name or "",
                    arguments=arguments,
                    raw_arguments=raw if isinstance(raw, str) else json.dumps(raw or {}),
                    decode_error=error
                ))
        return items

    @staticmethod
    def normalize_chat_completion(completion: Any) -> Tuple[List[OutputItem], str]:
        """Split the single assistant message into text and tool calls."""
        choices = _field(completion, "choices", None) or []
        if not choices:
            return [], ""
        message = _field(choices[0], "message", None)
        content = _field(message, "content", None) or ""
        items: List[OutputItem] = []
        if content:
            items.append(TextSegment(text=content))
        for tool_call in _field(message, "tool_calls", None) or []:
            function = _field(tool_call, "function", None)
            if function is None:
                continue
            raw = _field(function, "arguments", "")
            arguments, error = decode_arguments(raw)
            items.append(FunctionCall(
                id=_field(tool_call, "id", "") or "",
                call_id=_field(tool_call, "id", None),
                name=_field(function, "name", "") or "",
                arguments=arguments,
                raw_arguments=raw if isinstance(raw, str) else json.dumps(raw or {}),
                decode_error=error
            ))
        return items, content
