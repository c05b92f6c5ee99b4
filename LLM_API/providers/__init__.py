"""
LLM Provider Implementations
"""

from .openai import OpenAIModel

__all__ = ['OpenAIModel']
