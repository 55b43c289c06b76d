# stats models — weekly aggregation, mood distribution and mood history

from pydantic import BaseModel, Field


class EmotionCount(BaseModel):
    emotion: str
    count: int


class DailyEmotions(BaseModel):
    """emotion counts for one calendar day, empty map on days without entries"""
    date: str
    emotion_counts: dict[str, int] = Field(default_factory=dict, alias="emotionCounts")

    model_config = {"populate_by_name": True}


class WeeklyStats(BaseModel):
    total_entries: int = Field(0, ge=0, alias="totalEntries")
    emotion_counts: dict[str, int] = Field(default_factory=dict, alias="emotionCounts")
    daily_emotions: list[DailyEmotions] = Field(default_factory=list, alias="dailyEmotions")
    dominant_mood: str = Field("neutral", alias="dominantMood")
    top_emotions: list[EmotionCount] = Field(default_factory=list, alias="topEmotions")
    trends: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class MoodDistributionItem(BaseModel):
    mood: str
    count: int
    percentage: int


class MoodTrendsResponse(BaseModel):
    total_entries: int = Field(0, alias="totalEntries")
    mood_distribution: list[MoodDistributionItem] = Field(default_factory=list, alias="moodDistribution")

    model_config = {"populate_by_name": True}


class MoodHistoryPoint(BaseModel):
    date: str
    mood: str


class WeeklySummaryResponse(BaseModel):
    entries_count: int = Field(0, alias="entriesCount")
    insights: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
