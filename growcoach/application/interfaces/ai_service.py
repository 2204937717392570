"""AI service interface."""

from abc import ABC, abstractmethod
from typing import Dict, List


class IAIService(ABC):
    """Interface for the generative-text provider."""

    @abstractmethod
    async def generate(self, parts: List[str]) -> str:
        """
        Generate one reply from ordered prompt fragments.

        The first fragment is the system prompt; the remaining fragments
        form the conversation and the output-format instruction.
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, bool]:
        """Check health of AI services."""
        pass
