# insight models — stored multi-entry syntheses

from pydantic import BaseModel, Field

from app.models.analysis import InsightSynthesisResult


class StoredInsight(InsightSynthesisResult):
    """a synthesis result with the date it was generated"""
    date: str
    entries_analyzed: int = Field(0, alias="entriesAnalyzed")

    model_config = {"populate_by_name": True}


class GenerateInsightsResponse(BaseModel):
    insight: StoredInsight
    stored: bool = False
    notified: bool = False
