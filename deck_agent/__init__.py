"""Tool-calling slide agent: document model, tools and orchestration loop."""

from .config import AgentSettings
from .completion_policy import build_force_write_instruction, should_force_write
from .dispatcher import ToolDispatcher, ToolResult
from .exceptions import (
    MinimumSlidesError,
    SlideDocumentError,
    SlideIndexError,
    TurnInFlightError,
)
from .orchestrator import SlideAgentOrchestrator, TurnResult, TurnState
from .protocol import ProtocolAdapter
from .reveal_renderer import RevealRenderer
from .slide_document import SlideDocumentStore
from .slide_models import DocumentObserver, PresentationSettings, SlideDocument
from .tool_schemas import (
    READ_ONLY_TOOLS,
    THEMES,
    TOOL_DEFINITIONS,
    get_tool_definitions,
)

__all__ = [
    "AgentSettings",
    "build_force_write_instruction",
    "should_force_write",
    "ToolDispatcher",
    "ToolResult",
    "SlideDocumentError",
    "SlideIndexError",
    "MinimumSlidesError",
    "TurnInFlightError",
    "SlideAgentOrchestrator",
    "TurnResult",
    "TurnState",
    "ProtocolAdapter",
    "RevealRenderer",
    "SlideDocumentStore",
    "DocumentObserver",
    "PresentationSettings",
    "SlideDocument",
    "READ_ONLY_TOOLS",
    "THEMES",
    "TOOL_DEFINITIONS",
    "get_tool_definitions",
]
