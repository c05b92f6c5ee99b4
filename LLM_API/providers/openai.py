from typing import Optional, Dict, Any

import openai
from openai import OpenAI

from ..data_classes import (
    CallingConvention,
    FunctionCallingRequest, FunctionCallingResponse,
    ProviderConfig, ToolChoice
)
from ..converters import OpenAIConverter
from ..decorators import log_request
from ..exceptions import (
    LLMError, LLMAPIError, LLMAuthenticationError, LLMModelNotFoundError,
    LLMRateLimitError, LLMTimeoutError, LLMUnsupportedProtocolError,
    LLMValidationError
)
from ._base_provider import BaseProvider


class OpenAIModel(BaseProvider):
    """OpenAI API implementation of CallModel using data classes"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gpt-4.1",
        chat_model_name: str = "gpt-4o",
        request_timeout: Optional[float] = 60.0,
        chat_temperature: float = 0.7,
    ):
        self.chat_model_name = chat_model_name
        self.request_timeout = request_timeout
        self.chat_temperature = chat_temperature
        super().__init__(api_key=api_key, model_name=model_name)

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="OpenAI",
            model_name=self.model_name,
            max_tokens_limit=128000,
        )

    def setup_client(self):
        api_key = self._get_api_key("OPENAI_API_KEY")
        # Retries are left to the caller.
        self.client = OpenAI(api_key=api_key, timeout=self.request_timeout, max_retries=0)

    # ------------------------------------------------------------------
    # Convention A: responses
    # ------------------------------------------------------------------
    @log_request
    def function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        self._validate_request(request)
        model = request.model_name or self.model_name
        request_data: Dict[str, Any] = {
            "model": model,
            "input": OpenAIConverter.convert_messages(request.messages),
            "tools": OpenAIConverter.convert_function_definitions_for_responses(request.functions),
            "tool_choice": self._tool_choice(request, flat=True),
            "parallel_tool_calls": request.parallel_tool_calls
        }
        if request.instructions:
            request_data["instructions"] = request.instructions
        if request.max_tokens:
            request_data["max_output_tokens"] = request.max_tokens

        responses_api = getattr(self.client, "responses", None)
        if responses_api is None:
            raise LLMUnsupportedProtocolError(
                message="Installed client has no responses endpoint",
                provider=self.get_provider_name(),
                error_type="unsupported_protocol"
            )
        try:
            response = responses_api.create(**request_data)
        except openai.OpenAIError as e:
            raise self._translate_error(e, CallingConvention.RESPONSES) from e

        return FunctionCallingResponse(
            text=getattr(response, "output_text", "") or "",
            model_used=model,
            output_items=OpenAIConverter.normalize_responses_output(response),
            convention=CallingConvention.RESPONSES,
            stop_reason=getattr(response, "status", None),
            raw_response=response
        )

    # ------------------------------------------------------------------
    # Convention B: chat completions
    # ------------------------------------------------------------------
    @log_request
    def chat_function_calling(self, request: FunctionCallingRequest) -> FunctionCallingResponse:
        self._validate_request(request)
        model = request.model_name or self.chat_model_name
        messages = OpenAIConverter.convert_messages(request.messages)
        if request.instructions:
            messages.insert(0, {"role": "system", "content": request.instructions})
        request_data: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "tools": OpenAIConverter.convert_function_definitions_for_chat(request.functions),
            "tool_choice": self._tool_choice(request, flat=False),
            "temperature": (
                request.temperature if request.temperature is not None else self.chat_temperature
            )
        }
        if request.max_tokens:
            request_data["max_tokens"] = request.max_tokens

        try:
            completion = self.client.chat.completions.create(**request_data)
        except openai.OpenAIError as e:
            raise self._translate_error(e, CallingConvention.CHAT_COMPLETIONS) from e

        items, content = OpenAIConverter.normalize_chat_completion(completion)
        choices = getattr(completion, "choices", None) or []
        return FunctionCallingResponse(
            text=content,
            model_used=model,
            output_items=items,
            convention=CallingConvention.CHAT_COMPLETIONS,
            stop_reason=getattr(choices[0], "finish_reason", None) if choices else None,
            raw_response=completion
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _tool_choice(request: FunctionCallingRequest, *, flat: bool) -> Any:
        if request.specific_function:
            if flat:
                return {"type": "function", "name": request.specific_function}
            return {"type": "function", "function": {"name": request.specific_function}}
        if request.tool_choice == ToolChoice.REQUIRED:
            return "required"
        if request.tool_choice == ToolChoice.NONE:
            return "none"
        return "auto"

    def _translate_error(self, error: Exception, convention: CallingConvention) -> LLMError:
        provider = self.get_provider_name()
        message = str(error)
        if isinstance(error, openai.NotFoundError):
            if convention == CallingConvention.RESPONSES:
                return LLMUnsupportedProtocolError(
                    message=message, provider=provider,
                    error_type="unsupported_protocol", original_error=error
                )
            return LLMModelNotFoundError(
                message=message, provider=provider,
                error_type="not_found", original_error=error
            )
        if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return LLMAuthenticationError(
                message=message, provider=provider,
                error_type="authentication", original_error=error
            )
        if isinstance(error, openai.RateLimitError):
            return LLMRateLimitError(
                message=message, provider=provider,
                error_type="rate_limit", original_error=error
            )
        if isinstance(error, openai.APITimeoutError):
            return LLMTimeoutError(
                message=message, provider=provider,
                error_type="timeout", original_error=error
            )
        if isinstance(error, openai.BadRequestError):
            return LLMValidationError(
                message=message, provider=provider,
                error_type="bad_request", original_error=error
            )
        return LLMAPIError(
            message=message, provider=provider,
            error_type="api_error", original_error=error
        )
