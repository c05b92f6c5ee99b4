"""
LLM API Package - Unified function calling interface over model providers
"""

from .base import CallModel
from .data_classes import (
    BaseRequest, BaseResponse,
    ChatMessage, CallingConvention,
    FunctionCallingRequest, FunctionCallingResponse,
    FunctionDefinition, FunctionCall, TextSegment, OutputItem,
    ToolChoice, ProviderConfig
)
from .exceptions import (
    LLMError, LLMAPIError, LLMValidationError,
    LLMRateLimitError, LLMAuthenticationError,
    LLMTimeoutError, LLMModelNotFoundError,
    LLMUnsupportedProtocolError
)

__version__ = "1.0.0"
__all__ = [
    # Base
    'CallModel',
    # Data Classes
    'BaseRequest', 'BaseResponse',
    'ChatMessage', 'CallingConvention',
    'FunctionCallingRequest', 'FunctionCallingResponse',
    'FunctionDefinition', 'FunctionCall', 'TextSegment', 'OutputItem',
    'ToolChoice', 'ProviderConfig',
    # Exceptions
    'LLMError', 'LLMAPIError', 'LLMValidationError',
    'LLMRateLimitError', 'LLMAuthenticationError',
    'LLMTimeoutError', 'LLMModelNotFoundError',
    'LLMUnsupportedProtocolError',
]
