"""
LLM Provider: Abstract Interface

All generative calls go through this interface. Swap providers
by changing COPYGATE_LLM_PROVIDER in env.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Optional


class MalformedOutputError(ValueError):
    """The provider answered, but the answer is not parseable JSON."""


def parse_json_text(text: Any) -> Any:
    """Parse provider output as JSON, tolerating ```json fences."""
    if not isinstance(text, str):
        raise MalformedOutputError(
            f"LLM returned {type(text).__name__}, expected a JSON string"
        )
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[-1].rsplit("```", 1)[0].strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(
            f"LLM returned invalid JSON: {e}. Raw response: {text[:300]}"
        ) from e


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    model: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """Generate a text response from the LLM."""
        ...

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.3,
    ) -> Any:
        """Generate and parse a JSON response. Raises MalformedOutputError on bad JSON."""
        text = await self.generate(
            prompt=prompt,
            system_instruction=system_instruction,
            temperature=temperature,
            json_mode=True,
        )
        return parse_json_text(text)
