"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM client."""

    async def generate(self, prompt: str) -> str:
        """Generate a complete answer for a prompt.

        Args:
            prompt: Fully rendered prompt.

        Returns:
            Answer text.
        """
        ...
