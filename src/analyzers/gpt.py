"""
OpenAI Provider

Secondary classification backend using chat completions in JSON mode.
"""

from typing import Optional

import openai

from src.analyzers.base import LLMProvider
from src.errors import ProviderError, ProviderNotConfigured

SYSTEM_PROMPT = "You are an AI tool analyst that returns only valid JSON responses."


class OpenAIProvider(LLMProvider):
    """LLM provider backed by OpenAI chat completions."""

    name = 'openai'

    def __init__(self, api_key: Optional[str] = None, model: str = 'gpt-4o-mini', client=None):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ProviderNotConfigured("OpenAI API key not configured")
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def complete(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError("OpenAI returned an empty response")
        return content
