"""
Provider-agnostic LLM client abstraction.
Supports multiple providers: IO Intelligence (io.net) and Anthropic Claude.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional
import json

import anyio
from openai import OpenAI
from anthropic import AsyncAnthropic

from travel_planner.config import settings, Settings
from travel_planner.domain.errors import ServiceUnavailableError


def extract_json_text(text_response: str) -> str:
    """
    Strip Markdown code fences (```json ... ``` or ``` ... ```) around a JSON payload.
    Text without fences is returned trimmed.
    """
    if "```json" in text_response:
        json_start = text_response.find("```json") + 7
        json_end = text_response.find("```", json_start)
    elif "```" in text_response:
        json_start = text_response.find("```") + 3
        json_end = text_response.find("```", json_start)
    else:
        return text_response.strip()

    if json_end == -1:
        json_end = len(text_response)
    return text_response[json_start:json_end].strip()


def parse_json_response(text_response: str) -> Any:
    """
    Parse a model response as JSON after stripping code fences.

    Raises:
        ValueError: If JSON parsing fails
    """
    try:
        return json.loads(extract_json_text(text_response))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON from LLM response: {e}\nResponse: {text_response[:500]}")


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
    ) -> str:
        """Generate plain text response."""
        pass

    async def generate_structured(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 2048,
    ) -> Any:
        """
        Generate a JSON response (object or array).

        Raises:
            ValueError: If the response is not valid JSON
        """
        text_response = await self.generate_text(prompt, system_prompt, max_tokens)
        return parse_json_response(text_response)


class IoNetLLMClient(LLMClient):
    """
    IO Intelligence (io.net) implementation of LLM client.
    Uses OpenAI-compatible API with custom base_url.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_output_tokens: int = 1024,
        temperature: float = 0.3,
        base_url: str = "https://api.intelligence.io.solutions/api/v1/",
    ):
        if not api_key:
            raise ValueError("IO Intelligence API key is required. Set IONET_API_KEY environment variable.")

        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
        )
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

    def _build_messages(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> list[dict]:
        """Build OpenAI-style messages list."""
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        return messages

    def _sync_chat_completion(self, messages: list[dict], max_tokens: int) -> str:
        """Synchronous chat completion call."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_completion_tokens=max_tokens,
            stream=False,
        )
        return response.choices[0].message.content or ""

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
    ) -> str:
        messages = self._build_messages(prompt, system_prompt)

        # Run sync OpenAI client in thread to avoid blocking
        return await anyio.to_thread.run_sync(
            lambda: self._sync_chat_completion(messages, min(max_tokens, self.max_output_tokens))
        )


class AnthropicLLMClient(LLMClient):
    """
    Anthropic Claude implementation of LLM client.
    Uses async Anthropic SDK.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
    ):
        self.api_key = api_key or settings.anthropic_api_key
        self.base_url = base_url or settings.anthropic_base_url
        self.model = model or settings.anthropic_model
        self.temperature = temperature

        if not self.api_key:
            raise ValueError("Anthropic API key is required. Set ANTHROPIC_API_KEY environment variable.")

        self.client = AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.base_url,
        )

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
    ) -> str:
        """Generate plain text response using Claude."""
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system_prompt or "",
            messages=[{"role": "user", "content": prompt}],
        )

        return response.content[0].text


def get_suggestion_llm_client(app_settings: Optional[Settings] = None) -> LLMClient:
    """
    Factory function for the activity-suggestion LLM client.

    Higher temperature than planning use cases: suggestions should vary
    between calls.

    Raises:
        ServiceUnavailableError: the configured provider has no API key
    """
    s = app_settings or settings

    if s.llm_provider == "ionet":
        if not s.ionet_api_key:
            raise ServiceUnavailableError(
                "AI suggestions are not configured. Set IONET_API_KEY environment variable."
            )
        return IoNetLLMClient(
            api_key=s.ionet_api_key,
            model=s.suggestion_model,
            max_output_tokens=1024,
            temperature=0.8,
            base_url=s.ionet_base_url,
        )
    elif s.llm_provider == "anthropic":
        if not s.anthropic_api_key:
            raise ServiceUnavailableError(
                "AI suggestions are not configured. Set ANTHROPIC_API_KEY environment variable."
            )
        return AnthropicLLMClient(
            api_key=s.anthropic_api_key,
            base_url=s.anthropic_base_url,
            model=s.anthropic_model,
            temperature=0.8,
        )
    else:
        raise ServiceUnavailableError(f"Unknown LLM provider: {s.llm_provider}. Use 'ionet' or 'anthropic'.")
