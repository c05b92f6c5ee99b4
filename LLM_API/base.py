"""Abstract base class that normalises the provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .data_classes import (
    FunctionCallingRequest,
    FunctionCallingResponse,
    ProviderConfig,
)


class CallModel(ABC):
    """Abstract base class for all LLM providers."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key
        self.model_name = model_name
        self.client = None
        self.provider_config = self._get_provider_config()
        self.setup_client()

    @abstractmethod
    def setup_client(self) -> None:
        """Initialise the provider client."""

    @abstractmethod
    def _get_provider_config(self) -> ProviderConfig:
        """Return provider specific configuration metadata."""

    # ------------------------------------------------------------------
    # Core API methods that providers must implement
    # ------------------------------------------------------------------
    @abstractmethod
    def function_calling(
        self, request: FunctionCallingRequest
    ) -> FunctionCallingResponse:
        """Execute function calling with the multi-item output convention.

        Raises ``LLMUnsupportedProtocolError`` when the endpoint does not
        offer this convention.
        """

    @abstractmethod
    def chat_function_calling(
        self, request: FunctionCallingRequest
    ) -> FunctionCallingResponse:
        """Execute function calling with the single assistant message convention."""

    # ------------------------------------------------------------------
    # Utility helpers
    # ------------------------------------------------------------------
    def get_provider_name(self) -> str:
        """Return the provider name."""

        return self.provider_config.provider_name
