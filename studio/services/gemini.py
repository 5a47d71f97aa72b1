"""
Gemini client for package recommendations
Thin wrapper around google-genai used to parse search queries and write summaries
"""

import json
import logging
import re
import time
from typing import Optional

from google import genai
from google.genai import types

from ..config import GEMINI_API_KEY, GEMINI_MODEL

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 1000

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class GeminiInvalidResponseException(Exception):
    pass


class GeminiClient:
    """Text generation against one model. Raises on empty or failed responses."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        self._client = genai.Client(api_key=self.api_key)

    def predict(self, prompt: str, temperature: float = 0.2, max_output_tokens: int = MAX_OUTPUT_TOKENS) -> str:
        start_time = time.time()
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=temperature, max_output_tokens=max_output_tokens),
        )
        logger.info(f"🤖 Gemini call took {time.time() - start_time:.2f}s")
        if not response.text:
            raise GeminiInvalidResponseException()
        return response.text

    def predict_json(self, prompt: str, temperature: float = 0.2) -> dict:
        """First JSON object found in the response text"""
        text = self.predict(prompt, temperature=temperature, max_output_tokens=500)
        match = JSON_OBJECT_PATTERN.search(text)
        if not match:
            raise GeminiInvalidResponseException("No JSON object in response")
        try:
            parsed = json.loads(match.group(0))
        except ValueError as e:
            raise GeminiInvalidResponseException(str(e)) from e
        if not isinstance(parsed, dict):
            raise GeminiInvalidResponseException("Response JSON is not an object")
        return parsed


def get_gemini_client() -> Optional[GeminiClient]:
    """None when no API key is configured, so callers use their offline fallbacks"""
    if not GEMINI_API_KEY:
        return None
    return GeminiClient()
