from typing import Optional


class LLMError(Exception):
    """Base exception for all LLM-related errors"""

    def __init__(
        self,
        message: str,
        provider: str = "",
        error_type: str = "general",
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.error_type = error_type
        self.original_error = original_error

    def __str__(self):
        return f"[{self.provider}] {self.error_type}: {self.message}"


class LLMAPIError(LLMError):
    """API request failed"""
    pass


class LLMAuthenticationError(LLMError):
    """Authentication failed (missing or invalid API key)"""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded"""
    pass


class LLMValidationError(LLMError):
    """Request validation failed"""
    pass


class LLMTimeoutError(LLMError):
    """Request timed out"""
    pass


class LLMModelNotFoundError(LLMError):
    """Specified model not found"""
    pass


class LLMUnsupportedProtocolError(LLMError):
    """The endpoint does not support the requested calling convention.

    Raised instead of a generic API error so callers can fall back to another
    convention for the same request.
    """
    pass
