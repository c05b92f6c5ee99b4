import os
from typing import Optional

from dotenv import load_dotenv

from ..base import CallModel
from ..data_classes import FunctionCallingRequest
from ..exceptions import LLMAuthenticationError, LLMValidationError


class BaseProvider(CallModel):
    """Base class with common provider functionality"""

    def _get_api_key(self, env_var_name: str) -> str:
        """Get API key from the instance, the environment or a .env file"""
        load_dotenv()
        api_key: Optional[str] = self.api_key or os.getenv(env_var_name)

        if not api_key:
            raise LLMAuthenticationError(
                message=f"API key required. Set {env_var_name} or pass api_key parameter",
                provider=self.__class__.__name__,
                error_type="missing_api_key"
            )

        return api_key

    def _validate_request(self, request: FunctionCallingRequest) -> None:
        """Common request validation"""
        if not request.messages and not request.prompt:
            raise LLMValidationError(
                message="Request must have a prompt or messages",
                provider=self.__class__.__name__,
                error_type="empty_request"
            )

        limit = self.provider_config.max_tokens_limit
        if request.max_tokens and limit and request.max_tokens > limit:
            raise LLMValidationError(
                message=f"max_tokens exceeds limit: {limit}",
                provider=self.__class__.__name__,
                error_type="max_tokens"
            )
