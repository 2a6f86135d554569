"""
MedWell Backend — Abstract Completion Service Interface
=========================================================

What:  Contract for the external language-model completion API.
How:   Concrete providers inherit from CompletionService and implement
       complete(). AssistantService only depends on this interface, and tests
       substitute a fake implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from fastapi import Request


@dataclass(frozen=True)
class CompletionMessage:
    """One conversation turn. `role` is "user" or "assistant"."""
    role: str
    content: str


class CompletionService(ABC):
    """
    Abstract interface for one-shot text completions.

    Contract:
        - complete() performs exactly one vendor call; no retry, no caching
        - Vendor failures are raised as CompletionServiceError carrying the
          underlying error message
        - An empty vendor answer is returned as "" (never None); callers pick
          their own fallback text
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[CompletionMessage],
        *,
        temperature: float,
        max_tokens: int,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        Request a completion for `messages` (oldest first, last one from the user).

        Args:
            messages: Conversation to complete
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens
            system_instruction: Fixed instruction prepended to the conversation

        Returns:
            Generated text, stripped; "" when the vendor returned nothing.

        Raises:
            CompletionServiceError: The vendor call failed.
        """
        ...

    async def close(self) -> None:
        """Release provider resources on shutdown."""
        return None


def get_completion_service(request: Request) -> CompletionService:
    """FastAPI dependency returning the provider created in the app lifespan."""
    return request.app.state.completion_service
