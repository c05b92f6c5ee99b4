from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union
from enum import Enum


# ========== Enums ==========

class ToolChoice(Enum):
    """How the model may use the advertised tools."""
    AUTO = "auto"
    REQUIRED = "required"
    NONE = "none"


class CallingConvention(Enum):
    """Upstream calling conventions understood by the providers."""
    RESPONSES = "responses"
    CHAT_COMPLETIONS = "chat_completions"


# ========== Base Classes ==========

@dataclass
class ChatMessage:
    """A single transcript entry sent to the model."""
    role: str = "user"
    content: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class BaseRequest:
    """Base class for every request."""
    prompt: str = ""
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None


@dataclass
class BaseResponse:
    """Base class for every response."""
    text: str = ""
    model_used: Optional[str] = None
    raw_response: Optional[Any] = None


# ========== Function Calling ==========

@dataclass
class FunctionDefinition:
    """Tool declaration advertised to the model."""
    name: str = ""
    description: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)  # JSON Schema
    strict: bool = False


@dataclass
class FunctionCall:
    """A tool call requested by the model.

    ``arguments`` is ``None`` when ``raw_arguments`` could not be decoded; the
    reason is kept in ``decode_error``.
    """
    id: str = ""
    name: str = ""
    arguments: Optional[Dict[str, Any]] = field(default_factory=dict)
    raw_arguments: str = ""
    call_id: Optional[str] = None
    decode_error: Optional[str] = None


@dataclass
class TextSegment:
    """Assistant text emitted between (or instead of) tool calls."""
    text: str = ""


OutputItem = Union[TextSegment, FunctionCall]


@dataclass
class FunctionCallingRequest(BaseRequest):
    """Function calling request over a multi-turn transcript."""
    messages: List[ChatMessage] = field(default_factory=list)
    functions: List[FunctionDefinition] = field(default_factory=list)
    tool_choice: ToolChoice = ToolChoice.AUTO
    specific_function: Optional[str] = None
    instructions: Optional[str] = None
    parallel_tool_calls: bool = True


@dataclass
class FunctionCallingResponse(BaseResponse):
    """Normalised function calling response.

    ``output_items`` preserves the emission order of text and tool calls;
    ``text`` holds the protocol's convenience ``output_text`` when available.
    """
    output_items: List[OutputItem] = field(default_factory=list)
    convention: Optional[CallingConvention] = None
    stop_reason: Optional[str] = None

    @property
    def function_calls(self) -> List[FunctionCall]:
        return [item for item in self.output_items if isinstance(item, FunctionCall)]

    @property
    def text_segments(self) -> List[str]:
        return [item.text for item in self.output_items if isinstance(item, TextSegment)]

    @property
    def function_names(self) -> List[str]:
        return [fc.name for fc in self.function_calls]


# ========== Provider Configuration ==========

@dataclass
class ProviderConfig:
    """Provider specific capabilities and limits."""
    provider_name: str = ""
    model_name: str = ""
    max_tokens_limit: Optional[int] = None


# ========== Utility Functions ==========

def create_function_calling_request(
    messages: List[ChatMessage],
    functions: List[FunctionDefinition],
    **kwargs
) -> FunctionCallingRequest:
    """Convenience constructor for function calling requests."""
    return FunctionCallingRequest(
        messages=list(messages),
        functions=list(functions),
        **kwargs
    )
