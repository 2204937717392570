"""External services module."""

from .ai_service import AIServiceImpl, PROVIDER_OPENAI, PROVIDER_ANTHROPIC

__all__ = [
    "AIServiceImpl",
    "PROVIDER_OPENAI",
    "PROVIDER_ANTHROPIC",
]
