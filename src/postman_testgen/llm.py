"""LLM client wrapper around litellm.

Provides a unified interface for calling any LLM model supported by litellm.
"""

import re

from litellm import completion

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class LlmClient:
    """Wrapper for LLM API calls via litellm."""

    def __init__(self, model: str | None = None, temperature: float = 0.2):
        self.model = model or DEFAULT_MODEL
        self.temperature = temperature

    def call(self, system: str, user: str) -> str:
        """Send a system+user message to the LLM and return the response text."""
        response = completion(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""


def extract_json(text: str) -> str:
    """Extract JSON from a response that might contain Markdown code blocks."""
    match = re.search(r"```(?:json)?\s*\n(.*?)```", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text.strip()
