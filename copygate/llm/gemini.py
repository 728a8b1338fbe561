"""
Gemini Provider: Google Gemini API implementation.

Uses the google.genai SDK. Client is lazily initialized, so the
app loads without an API key and only fails on actual LLM call.

Each call is a single attempt. Failures propagate to the caller,
which owns the fallback policy.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from google import genai
from google.genai import types

from copygate.llm import LLMProvider

logger = logging.getLogger("copygate.llm.gemini")


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self._api_key = api_key or os.getenv("GEMINI_API_KEY", "")
        self.model = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError(
                    "GEMINI_API_KEY not set. Get one from "
                    "https://aistudio.google.com/apikey"
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
        )
        if json_mode:
            config.response_mime_type = "application/json"

        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            logger.warning("Gemini call to %s failed: %s", self.model, e)
            raise
        return response.text
