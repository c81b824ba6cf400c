"""
Claude Provider

Primary classification backend using the Anthropic Messages API.
"""

from typing import Optional

import anthropic

from src.analyzers.base import LLMProvider
from src.errors import ProviderError, ProviderNotConfigured


class ClaudeProvider(LLMProvider):
    """LLM provider backed by Claude."""

    name = 'claude'

    def __init__(self, api_key: Optional[str] = None, model: str = 'claude-sonnet-4-20250514',
                 max_tokens: int = 4096, client=None):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ProviderNotConfigured("Claude API key not configured")
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def complete(self, prompt: str) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}]
            )
        except anthropic.APIError as e:
            raise ProviderError(f"Claude API error: {e}") from e

        if not response.content:
            raise ProviderError("Claude returned an empty response")
        return response.content[0].text
