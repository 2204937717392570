"""AI service implementation."""

import logging
from typing import Dict, List, Optional

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from ...application.interfaces import IAIService
from ...domain.exceptions import AIServiceError

logger = logging.getLogger(__name__)

PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"


class AIServiceImpl(IAIService):
    """AI service implementation using OpenAI or Anthropic."""

    def __init__(
        self,
        provider: str,
        model: str,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7
    ):
        if provider not in (PROVIDER_OPENAI, PROVIDER_ANTHROPIC):
            raise ValueError(f"Unknown AI provider: {provider}")

        self.provider = provider
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.openai_client = AsyncOpenAI(api_key=openai_api_key) if provider == PROVIDER_OPENAI else None
        self.anthropic_client = (
            AsyncAnthropic(api_key=anthropic_api_key) if provider == PROVIDER_ANTHROPIC else None
        )

    async def generate(self, parts: List[str]) -> str:
        """Generate one reply from ordered prompt fragments."""
        if not parts:
            raise ValueError("parts must not be empty")

        system_prompt = parts[0]
        user_content = "\n\n".join(parts[1:])

        try:
            if self.provider == PROVIDER_ANTHROPIC:
                return await self._generate_anthropic_response(system_prompt, user_content)
            return await self._generate_openai_response(system_prompt, user_content)
        except Exception as e:
            logger.error(f"Error generating AI response: {e}")
            raise AIServiceError(self.provider, str(e)) from e

    async def health_check(self) -> Dict[str, bool]:
        """Check health of the configured provider."""
        status = {self.provider: False}

        try:
            if self.provider == PROVIDER_ANTHROPIC:
                await self.anthropic_client.messages.create(
                    model=self.model,
                    max_tokens=1,
                    messages=[{"role": "user", "content": "test"}]
                )
            else:
                await self.openai_client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": "test"}],
                    max_tokens=1
                )
            status[self.provider] = True
        except Exception as e:
            logger.error(f"{self.provider} health check failed: {e}")

        return status

    async def _generate_openai_response(self, system_prompt: str, user_content: str) -> str:
        """Generate OpenAI response."""
        response = await self.openai_client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature
        )

        return response.choices[0].message.content or ""

    async def _generate_anthropic_response(self, system_prompt: str, user_content: str) -> str:
        """Generate Anthropic response."""
        response = await self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_content}]
        )

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
