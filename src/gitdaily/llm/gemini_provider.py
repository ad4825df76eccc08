"""Gemini text generation provider."""

from typing import Any, Dict, Optional

import httpx
import structlog

from gitdaily.errors import LLMError
from gitdaily.llm.base import BaseLLMProvider
from gitdaily.models import LLMConfig

logger = structlog.get_logger(__name__)


class GeminiProvider(BaseLLMProvider):
    """Provider for the Gemini ``generateContent`` REST endpoint.

    Each prompt is sent as a single-turn request with one content block
    holding one text part. Only the first candidate is used.
    """

    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Gemini provider.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter
            model: Model name
            base_url: API base URL
            timeout: Request timeout in seconds
            http_client: Optional pre-configured async httpx client
            transport: Optional transport for the client created here
            **kwargs: Additional parameters
        """
        super().__init__(api_key, model or self.DEFAULT_MODEL, **kwargs)
        self.base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=timeout, transport=transport)
        self.total_requests = 0

    @classmethod
    def from_config(cls, config: LLMConfig, **kwargs: Any) -> "GeminiProvider":
        """Create a provider from an ``LLMConfig``."""
        if not config.api_key:
            raise LLMError("Gemini API key is not configured")
        return cls(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    @staticmethod
    def build_request(prompt: str) -> Dict[str, Any]:
        """Build the JSON body for a single-turn prompt."""
        return {"contents": [{"parts": [{"text": prompt}]}]}

    @staticmethod
    def extract_text(payload: Dict[str, Any]) -> str:
        """Return the first candidate's first text part, or ``""``."""
        candidates = payload.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return ""
        return parts[0].get("text") or ""

    async def complete(self, prompt: str, **kwargs: Any) -> str:
        """Generate a completion from Gemini.

        Args:
            prompt: The prompt to send
            **kwargs: Extra top-level request fields (e.g. ``generationConfig``)

        Returns:
            Generated text, empty when no candidate text was returned

        Raises:
            LLMError: If the request fails or the response cannot be decoded
        """
        body = self.build_request(prompt)
        body.update(kwargs)

        try:
            response = await self.http.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise LLMError(f"Gemini API request failed: {e}") from e

        self.total_requests += 1

        if response.is_error:
            raise LLMError(
                f"Gemini API request failed with status {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise LLMError(f"Failed to decode Gemini response: {e}") from e

        if not isinstance(payload, dict):
            raise LLMError("Unexpected Gemini response shape")

        text = self.extract_text(payload)
        logger.debug("gemini_completion", model=self.model, chars=len(text))
        return text

    def get_usage_stats(self) -> Dict[str, Any]:
        """Get current usage statistics.

        Returns:
            Dictionary with request count and model
        """
        return {"total_requests": self.total_requests, "model": self.model}

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self.http.aclose()
