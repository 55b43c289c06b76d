# analysis models — structured output of the text analyzer
# single-entry analysis, multi-entry synthesis, keywords and weekly summary

from typing import Literal
from pydantic import BaseModel, Field

from app.config import settings

Mood = Literal["happy", "sad", "anxious", "angry", "neutral", "excited", "confused", "mixed"]
Sentiment = Literal["positive", "negative", "neutral"]


class AnalysisResult(BaseModel):
    """mood / sentiment / emotions / insight for one journal entry.
    sentiment_score is passed through unclamped."""
    mood: Mood = "neutral"
    sentiment: Sentiment = "neutral"
    sentiment_score: float = Field(0.0, alias="sentimentScore")
    emotions: list[str] = Field(default_factory=list, max_length=3)
    insight: str = "No insight available."

    model_config = {"populate_by_name": True}


class InsightSynthesisResult(BaseModel):
    """multi-entry insight synthesis (premium weekly insights)"""
    summary: str = "AI analysis could not be completed at this time."
    mood_trend: str = "unknown"
    emotional_anchors: list[str] = Field(default_factory=list)
    behavioral_patterns: list[str] = Field(default_factory=list)
    warning_signs: list[str] = Field(default_factory=list)
    insightful_advice: str = "Please try again later."
    ai_suggestions: list[str] = Field(default_factory=list)


class KeywordCount(BaseModel):
    word: str
    count: int = 0


class KeywordTheme(BaseModel):
    theme: str
    keywords: list[str] = Field(default_factory=list)


class KeywordAnalysis(BaseModel):
    keywords: list[KeywordCount] = Field(default_factory=list)
    themes: list[KeywordTheme] = Field(default_factory=list)


DEFAULT_SUMMARY_INSIGHTS = [
    "You expressed gratitude in several entries this week, which is linked to improved well-being.",
    "Your writing shows a balance of both positive and challenging emotions.",
    "You have mentioned important relationships several times, indicating they are significant to you right now.",
]

DEFAULT_SUMMARY_SUGGESTIONS = [
    "Consider journaling at a consistent time each day to build a helpful routine.",
    "Try incorporating a few minutes of mindfulness before writing to enhance emotional awareness.",
    "Your entries are more detailed when you write for at least 5 minutes.",
]


class WeeklySummary(BaseModel):
    insights: list[str] = Field(default_factory=lambda: list(DEFAULT_SUMMARY_INSIGHTS))
    suggestions: list[str] = Field(default_factory=lambda: list(DEFAULT_SUMMARY_SUGGESTIONS))


class AnalyzeRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=settings.JOURNAL_MAX_LENGTH)
