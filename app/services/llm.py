# llm service — gemini text completion via langchain
# the text-analysis capability: complete(prompt, max_tokens, temperature) -> raw text
# a missing api key is a valid configuration, callers check `configured` first

import logging
from typing import Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from app.config import settings

logger = logging.getLogger(__name__)


class GeminiTextClient:
    """thin async wrapper around a gemini chat model"""

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model
        # one chain per (max_tokens, temperature) pair
        self._chains: dict[tuple[int, float], object] = {}

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_chain(self, max_tokens: int, temperature: float):
        key = (max_tokens, temperature)
        if key not in self._chains:
            llm = ChatGoogleGenerativeAI(
                model=self.model,
                google_api_key=self.api_key,
                temperature=temperature,
                max_output_tokens=max_tokens,
            )
            self._chains[key] = llm | StrOutputParser()
        return self._chains[key]

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """run one completion. raises whatever the sdk raises on failure."""
        chain = self._get_chain(max_tokens, temperature)
        result = await chain.ainvoke(prompt)
        return result.strip()


_text_client: Optional[GeminiTextClient] = None


def get_text_client() -> GeminiTextClient:
    """dependency injection for the text-analysis capability"""
    global _text_client
    if _text_client is None:
        _text_client = GeminiTextClient(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
        )
    return _text_client
