"""LLM provider interface and implementations."""

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

import openai
from openai import AsyncOpenAI
from rich.console import Console

from ..exceptions import LLMCallError

console = Console()

MockResponse = Union[str, Exception]


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def complete(self, prompt: str, max_tokens: int) -> str:
        """
        Send a single-turn prompt and return the raw text reply.

        Args:
            prompt: Full prompt text
            max_tokens: Upper bound on generated tokens

        Returns:
            Model output, expected to contain one JSON object

        Raises:
            LLMCallError: If the provider call fails
        """
        pass

    @abstractmethod
    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI (or OpenAI-compatible) implementation of LLM provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL (for compatible gateways)
            timeout: Per-request timeout in seconds
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model = model
        self.total_tokens = 0
        self.api_calls = 0

    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Run a chat completion at low temperature."""
        try:
            self.api_calls += 1
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.0,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise LLMCallError(f"{self.model} call failed: {e}") from e

        if response.usage:
            self.total_tokens += response.usage.total_tokens

        if not response.choices or response.choices[0].message.content is None:
            raise LLMCallError(f"{self.model} returned no content")

        return response.choices[0].message.content.strip()

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
            "model": self.model,
        }


class MockLLMProvider(LLMProvider):
    """
    Mock LLM provider for offline runs and testing.

    Responses are served from `responses` in order (an Exception entry is
    raised instead of returned), or computed by `responder` when given. With
    neither, a fixed valid reply is returned for the prompt kind.
    """

    def __init__(
        self,
        responses: Optional[List[MockResponse]] = None,
        responder: Optional[Callable[[str], MockResponse]] = None,
    ) -> None:
        """Initialize mock provider."""
        self.responses = list(responses or [])
        self.responder = responder
        self.calls: List[str] = []

    def _default_reply(self, prompt: str) -> str:
        payload: Dict[str, Any]
        if '"summary"' in prompt:
            payload = {
                "summary": "Mock summary of the judgment.",
                "legal_areas": ["Litigation & Dispute Resolution"],
                "jurisdiction": "EU",
                "key_provisions": [],
                "significance": "Mock significance.",
            }
        else:
            payload = {"legal_areas": [], "jurisdiction": None, "language": "en"}
        return json.dumps(payload)

    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Return the next scripted reply."""
        self.calls.append(prompt)

        if self.responder is not None:
            reply = self.responder(prompt)
        elif self.responses:
            reply = self.responses.pop(0)
        else:
            reply = self._default_reply(prompt)

        if isinstance(reply, Exception):
            raise reply
        return reply

    def get_usage_stats(self) -> Dict:
        """Get mock usage statistics."""
        return {
            "total_tokens": 0,
            "api_calls": len(self.calls),
            "model": "mock",
        }


class UnavailableLLMProvider(LLMProvider):
    """
    Stand-in for a provider that cannot be built.

    Every call raises LLMCallError, so enrichment leaves records pending
    until a working provider is configured.
    """

    def __init__(self, reason: str) -> None:
        """Initialize with the reason calls will fail."""
        self.reason = reason
        self.calls = 0

    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Always fail."""
        self.calls += 1
        raise LLMCallError(self.reason)

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_tokens": 0,
            "api_calls": 0,
            "model": None,
        }


def create_llm_provider(llm_config: Dict[str, Any], timeout: float = 60.0) -> LLMProvider:
    """
    Build the configured provider.

    The mock is only used when `provider: mock` is set. A missing key or an
    unknown provider gives a provider whose calls fail.
    """
    provider = llm_config.get("provider")

    if provider == "mock":
        return MockLLMProvider()

    if provider == "openai":
        api_key = llm_config.get("api_key")
        if not api_key:
            key_env = llm_config.get("api_key_env") or "api_key"
            reason = f"No OpenAI API key found (set {key_env})"
            console.print(f"[red]{reason}. Enrichment calls will fail.[/red]")
            return UnavailableLLMProvider(reason)

        return OpenAIProvider(
            api_key=api_key,
            model=llm_config.get("model", "gpt-4o-mini"),
            base_url=llm_config.get("base_url"),
            timeout=timeout,
        )

    reason = f"Unknown LLM provider {provider!r}"
    console.print(f"[red]{reason}. Enrichment calls will fail.[/red]")
    return UnavailableLLMProvider(reason)
