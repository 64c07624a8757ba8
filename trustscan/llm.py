"""
LLM Service
===========
Thin async client for the generative-language backend.

Gemini is reached through its OpenAI-compatible endpoint, so the stock
``openai`` client is used with a custom ``base_url``.

``analyze_context`` never raises. When no key is configured or the call
fails it returns one of the sentinel strings below; callers treat any
non-JSON answer as "no findings".
"""

from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

from .run_config import Settings

logger = logging.getLogger(__name__)

DISABLED_MESSAGE = "AI Analysis Disabled: No API Key provided."
UNAVAILABLE_MESSAGE = "AI Analysis Unavailable: API Not Enabled."
FAILED_MESSAGE = "AI Analysis Failed due to an error."


class LLMService:
    """Sends one prompt + page context and returns the raw text answer."""

    def __init__(self, settings: Optional[Settings] = None, client=None):
        settings = settings or Settings.from_env()
        self.model = settings.llm_model
        self._client = client
        if self._client is None and settings.gemini_api_key:
            self._client = AsyncOpenAI(
                api_key=settings.gemini_api_key,
                base_url=settings.llm_base_url,
            )
        if self._client is None:
            logger.warning("[LLM] GEMINI_API_KEY is missing — AI analysis disabled")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def analyze_context(self, context: str, prompt: str) -> str:
        if not self.enabled:
            return DISABLED_MESSAGE

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": context},
                ],
            )
            return completion.choices[0].message.content or ""
        except Exception as e:
            msg = str(e)
            if "404" in msg or "not found" in msg.lower():
                logger.error(
                    "[LLM] Model not found. Enable the Generative Language API "
                    f"or check TRUSTSCAN_MODEL ({self.model})"
                )
                return UNAVAILABLE_MESSAGE
            logger.error(f"[LLM] Analysis failed: {msg}")
            return FAILED_MESSAGE
