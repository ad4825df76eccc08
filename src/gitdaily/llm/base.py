"""Base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseLLMProvider(ABC):
    """Abstract base class for text generation providers."""

    def __init__(self, api_key: str, model: str, **kwargs: Any) -> None:
        """Initialize the LLM provider.

        Args:
            api_key: API key for the provider
            model: Model name to use
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model = model
        self.config = kwargs

    @abstractmethod
    async def complete(self, prompt: str, **kwargs: Any) -> str:
        """Generate a completion from the LLM.

        Args:
            prompt: The prompt to send to the LLM
            **kwargs: Additional provider-specific parameters

        Returns:
            The generated text, or an empty string when the provider
            returned no candidate text

        Raises:
            LLMError: If the API call fails
        """
        pass

    @abstractmethod
    def get_usage_stats(self) -> Dict[str, Any]:
        """Get usage statistics for this provider instance."""
        pass

    async def aclose(self) -> None:
        """Release any network resources held by the provider."""
