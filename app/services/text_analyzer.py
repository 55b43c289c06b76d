# text analyzer — turns journal text into structured analysis via the llm capability
#
# contract (every public method):
#   1. no api key configured      -> documented default, no call made
#   2. provider error / timeout   -> documented default
#   3. model text is not json     -> documented default verbatim
#   4. json object, partial/typed -> default with every present, well-typed key overwritten
# nothing here raises to the caller.

import json
import logging
import math
from typing import Any, Optional

from app.config import settings
from app.models.analysis import (
    AnalysisResult,
    InsightSynthesisResult,
    KeywordAnalysis,
    KeywordCount,
    KeywordTheme,
    WeeklySummary,
)
from app.services.outcomes import (
    CompletionOutcome,
    ConfigAbsent,
    MalformedResponse,
    Ok,
    ProviderError,
)
from app.services.prompt_builder import (
    MOODS,
    SENTIMENTS,
    single_entry_prompt,
    weekly_summary_prompt,
)

logger = logging.getLogger(__name__)

MAX_EMOTIONS = 3
SUMMARY_ITEMS = 3


def _strip_code_fence(raw: str) -> str:
    """unwrap a ```json ... ``` block; the body is still parsed strictly"""
    text = raw.strip()
    if text.startswith("```") and text.endswith("```"):
        text = text[3:-3].strip()
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _string_list(value: Any) -> Optional[list[str]]:
    """keep the string items of a list, None if value is not a list"""
    if not isinstance(value, list):
        return None
    return [str(v).strip() for v in value if _is_text(v)]


def merge_analysis(parsed: dict) -> AnalysisResult:
    """overlay the well-typed keys of a parsed model object on the default analysis"""
    result = AnalysisResult().model_dump()

    mood = parsed.get("mood")
    if _is_text(mood) and mood.strip().lower() in MOODS:
        result["mood"] = mood.strip().lower()

    sentiment = parsed.get("sentiment")
    if _is_text(sentiment) and sentiment.strip().lower() in SENTIMENTS:
        result["sentiment"] = sentiment.strip().lower()

    score = parsed.get("sentimentScore")
    if _is_number(score):
        result["sentiment_score"] = float(score)

    emotions = _string_list(parsed.get("emotions"))
    if emotions is not None:
        result["emotions"] = [e.lower() for e in emotions][:MAX_EMOTIONS]

    insight = parsed.get("insight")
    if _is_text(insight):
        result["insight"] = insight.strip()

    return AnalysisResult(**result)


def merge_synthesis(parsed: dict) -> InsightSynthesisResult:
    result = InsightSynthesisResult().model_dump()
    for key in ("summary", "mood_trend", "insightful_advice"):
        if _is_text(parsed.get(key)):
            result[key] = parsed[key].strip()
    for key in ("emotional_anchors", "behavioral_patterns", "warning_signs", "ai_suggestions"):
        items = _string_list(parsed.get(key))
        if items is not None:
            result[key] = items
    return InsightSynthesisResult(**result)


def _object_list(value: Any) -> list:
    """the list value as given, or an empty list for any other json type"""
    return value if isinstance(value, list) else []


def merge_keywords(parsed: dict) -> KeywordAnalysis:
    keywords = []
    for item in _object_list(parsed.get("keywords")):
        if isinstance(item, dict) and _is_text(item.get("word")):
            count = item.get("count")
            keywords.append(KeywordCount(word=item["word"].strip(), count=int(count) if _is_number(count) else 0))

    themes = []
    for item in _object_list(parsed.get("themes")):
        if isinstance(item, dict) and _is_text(item.get("theme")):
            themes.append(KeywordTheme(
                theme=item["theme"].strip(),
                keywords=_string_list(item.get("keywords")) or [],
            ))

    return KeywordAnalysis(keywords=keywords, themes=themes)


class TextAnalyzer:
    """llm-backed analysis with a strict fallback contract"""

    def __init__(
        self,
        client,
        temperature: float = settings.ANALYSIS_TEMPERATURE,
        max_tokens: int = settings.ANALYSIS_MAX_OUTPUT_TOKENS,
        synthesis_max_tokens: int = settings.SYNTHESIS_MAX_OUTPUT_TOKENS,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.synthesis_max_tokens = synthesis_max_tokens

    async def complete_json(self, prompt: str, max_tokens: Optional[int] = None) -> CompletionOutcome:
        """one model call, classified. never raises."""
        if not self.client.configured:
            return ConfigAbsent(capability="gemini")

        try:
            raw = await self.client.complete(
                prompt,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            return ProviderError(code=type(e).__name__, message=str(e))

        try:
            parsed = json.loads(_strip_code_fence(raw or ""))
        except json.JSONDecodeError as e:
            return MalformedResponse(raw=raw or "", reason=str(e))

        if not isinstance(parsed, dict):
            return MalformedResponse(raw=raw, reason=f"expected a json object, got {type(parsed).__name__}")

        return Ok(parsed)

    def _unwrap(self, outcome: CompletionOutcome, purpose: str) -> Optional[dict]:
        """log a non-ok outcome and return the parsed object, or None to use the default"""
        if isinstance(outcome, Ok):
            return outcome.value
        if isinstance(outcome, ConfigAbsent):
            logger.warning(f"Gemini API key not configured, returning default {purpose}")
        elif isinstance(outcome, MalformedResponse):
            logger.warning(f"Malformed model response for {purpose} ({outcome.reason}): {outcome.raw[:200]!r}")
        elif isinstance(outcome, ProviderError):
            logger.error(f"Gemini {purpose} call failed: {outcome.code}: {outcome.message}")
        return None

    async def analyze(self, text: str) -> AnalysisResult:
        """single-entry mood / sentiment / emotion / insight analysis"""
        outcome = await self.complete_json(single_entry_prompt(text))
        parsed = self._unwrap(outcome, "analysis")
        if parsed is None:
            return AnalysisResult()

        result = merge_analysis(parsed)
        missing = [k for k in ("mood", "sentiment", "sentimentScore", "emotions", "insight") if k not in parsed]
        if missing:
            logger.warning(f"Model response missing {missing}, merged over defaults")
        return result

    async def synthesize(self, prompt: str) -> InsightSynthesisResult:
        """multi-entry insight synthesis with the same fallback contract as analyze"""
        outcome = await self.complete_json(prompt, max_tokens=self.synthesis_max_tokens)
        parsed = self._unwrap(outcome, "insight synthesis")
        if parsed is None:
            return InsightSynthesisResult()
        return merge_synthesis(parsed)

    async def extract_keywords(self, prompt: str) -> KeywordAnalysis:
        outcome = await self.complete_json(prompt, max_tokens=self.synthesis_max_tokens)
        parsed = self._unwrap(outcome, "keyword extraction")
        if parsed is None:
            return KeywordAnalysis()
        return merge_keywords(parsed)

    async def weekly_summary(self, entries: list[dict]) -> WeeklySummary:
        """three insights + three suggestions. both arrays are required, otherwise default."""
        if not entries:
            return WeeklySummary()

        outcome = await self.complete_json(weekly_summary_prompt(entries), max_tokens=self.synthesis_max_tokens)
        parsed = self._unwrap(outcome, "weekly summary")
        if parsed is None:
            return WeeklySummary()

        insights = _string_list(parsed.get("insights"))
        suggestions = _string_list(parsed.get("suggestions"))
        if insights is None or suggestions is None:
            logger.warning("Weekly summary response missing insights/suggestions arrays, using default")
            return WeeklySummary()

        return WeeklySummary(insights=insights[:SUMMARY_ITEMS], suggestions=suggestions[:SUMMARY_ITEMS])
